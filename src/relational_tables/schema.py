"""Schema class describing a table's attributes, domains and key."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

from relational_tables.errors import AttributeNotFound, SchemaError
from relational_tables.types import Domain, parse_domains

logger = logging.getLogger(__name__)


def split_names(names: str | Iterable[str]) -> tuple[str, ...]:
    """Split a space-separated name string, or normalize a sequence of names."""
    if isinstance(names, str):
        return tuple(names.split())
    return tuple(names)


@dataclass(frozen=True)
class Schema:
    """Ordered attribute names, their domains, and the primary key."""

    attributes: tuple[str, ...]
    domains: tuple[Domain, ...]
    key: tuple[str, ...]

    def __post_init__(self) -> None:
        if len(self.attributes) != len(self.domains):
            raise SchemaError(
                f"{len(self.attributes)} attributes but {len(self.domains)} domains"
            )
        if len(set(self.attributes)) != len(self.attributes):
            raise SchemaError(f"Duplicate attribute names in {list(self.attributes)}")
        if not self.key:
            raise SchemaError("Primary key must name at least one attribute")
        for name in self.key:
            if name not in self.attributes:
                raise SchemaError(f"Key attribute '{name}' is not in the schema")

    @classmethod
    def parse(
        cls,
        attributes: str | Iterable[str],
        domains: str | Iterable[str | Domain],
        key: str | Iterable[str],
    ) -> Schema:
        """Build a schema from space-separated strings or sequences.

        Args:
            attributes: Attribute names, e.g. ``"title year"``.
            domains: Domain names, e.g. ``"String Integer"``.
            key: Primary key attribute names.

        Raises:
            SchemaError: If a domain token is unknown or the parts disagree.
        """
        return cls(split_names(attributes), parse_domains(domains), split_names(key))

    @property
    def width(self) -> int:
        return len(self.attributes)

    def column_of(self, name: str) -> int | None:
        """Return the position of ``name``, or None when it is not an attribute."""
        for i, attribute in enumerate(self.attributes):
            if attribute == name:
                return i
        return None

    def col(self, name: str) -> int:
        """Return the position of ``name``.

        Raises:
            AttributeNotFound: If the schema has no such attribute.
        """
        position = self.column_of(name)
        if position is None:
            raise AttributeNotFound(name)
        return position

    def resolve_columns(self, names: Sequence[str], strict: bool = False) -> list[int]:
        """Resolve attribute names to column positions.

        In the default soft mode, a name that is not in the schema is logged
        and skipped, and the remaining names still resolve. With
        ``strict=True`` the first unknown name raises AttributeNotFound.
        """
        positions = []
        for name in names:
            position = self.column_of(name)
            if position is None:
                if strict:
                    raise AttributeNotFound(name)
                logger.warning("match: attribute '%s' not found in %s", name, list(self.attributes))
                continue
            positions.append(position)
        return positions

    def domain_of(self, name: str) -> Domain | None:
        position = self.column_of(name)
        if position is None:
            return None
        return self.domains[position]

    @property
    def key_columns(self) -> list[int]:
        """Positions of the primary key attributes."""
        return [self.col(name) for name in self.key]

    def compatible(self, other: Schema) -> bool:
        """Check whether two schemas have the same arity and pairwise domains."""
        if len(self.domains) != len(other.domains):
            logger.debug("compatible: tables have different arity")
            return False
        for j, (mine, theirs) in enumerate(zip(self.domains, other.domains)):
            if mine is not theirs:
                logger.debug("compatible: tables disagree on domain %d", j)
                return False
        return True

    def project(self, positions: Sequence[int]) -> Schema:
        """Return the narrowed schema for the given column positions.

        The source key is kept when every key attribute survives;
        otherwise the projected attributes become the key.
        """
        attributes = tuple(self.attributes[p] for p in positions)
        domains = tuple(self.domains[p] for p in positions)
        key = self.key if set(self.key) <= set(attributes) else attributes
        return Schema(attributes, domains, key)

    def describe(self) -> str:
        """Return a one-line ``name: Domain`` summary with key markers."""
        parts = []
        for name, domain in zip(self.attributes, self.domains):
            marker = "*" if name in self.key else ""
            parts.append(f"{marker}{name}: {domain}")
        return ", ".join(parts)

"""Column domains for the relational_tables library."""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable

from relational_tables.errors import SchemaError


class Domain(Enum):
    """Scalar value kinds a column may hold."""

    BYTE = "Byte"
    SHORT = "Short"
    INTEGER = "Integer"
    LONG = "Long"
    FLOAT = "Float"
    DOUBLE = "Double"
    CHARACTER = "Character"
    STRING = "String"

    def __str__(self) -> str:
        return self.value

    @property
    def is_integral(self) -> bool:
        """Return whether this domain holds whole numbers."""
        return self in _INTEGRAL_RANGES

    @property
    def is_real(self) -> bool:
        """Return whether this domain holds floating point numbers."""
        return self in (Domain.FLOAT, Domain.DOUBLE)

    @property
    def is_numeric(self) -> bool:
        return self.is_integral or self.is_real

    @property
    def value_range(self) -> tuple[int, int] | None:
        """Return the inclusive (min, max) range for integral domains."""
        return _INTEGRAL_RANGES.get(self)

    def conforms(self, value: Any) -> bool:
        """Check whether a runtime value is well-typed for this domain."""
        # bool is an int subclass but never a valid column value
        if isinstance(value, bool):
            return False
        if self.is_integral:
            if not isinstance(value, int):
                return False
            min_val, max_val = _INTEGRAL_RANGES[self]
            return min_val <= value <= max_val
        if self.is_real:
            return isinstance(value, (int, float))
        if self is Domain.CHARACTER:
            return isinstance(value, str) and len(value) == 1
        return isinstance(value, str)


_INTEGRAL_RANGES: dict[Domain, tuple[int, int]] = {
    Domain.BYTE: (-(2**7), 2**7 - 1),
    Domain.SHORT: (-(2**15), 2**15 - 1),
    Domain.INTEGER: (-(2**31), 2**31 - 1),
    Domain.LONG: (-(2**63), 2**63 - 1),
}


# Mapping from domain name strings to Domain enum values
DOMAIN_NAMES: dict[str, Domain] = {d.value: d for d in Domain}


def parse_domain(name: str | Domain) -> Domain:
    """Resolve a domain token such as ``"Integer"`` to its Domain.

    Raises:
        SchemaError: If the token names no known domain.
    """
    if isinstance(name, Domain):
        return name
    domain = DOMAIN_NAMES.get(name)
    if domain is None:
        known = ", ".join(DOMAIN_NAMES)
        raise SchemaError(f"Unknown domain '{name}' (expected one of: {known})")
    return domain


def parse_domains(names: str | Iterable[str | Domain]) -> tuple[Domain, ...]:
    """Resolve a space-separated string or a sequence of domain tokens."""
    if isinstance(names, str):
        names = names.split()
    return tuple(parse_domain(n) for n in names)

"""In-memory relational tables and the relational algebra operators."""

from __future__ import annotations

import itertools
import logging
from collections import defaultdict
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator, Sequence

from relational_tables.errors import (
    ArityMismatch,
    DuplicateKey,
    PersistenceFailure,
    RelationalError,
    SchemaMismatch,
    TypeMismatch,
)
from relational_tables.index import Index, IndexType, make_index
from relational_tables.key import CompositeKey
from relational_tables.schema import Schema, split_names
from relational_tables.storage import TableStore
from relational_tables.types import Domain

logger = logging.getLogger(__name__)

Row = tuple[Any, ...]
Predicate = Callable[[Row], bool]


def _disambiguate(names: Iterable[str], taken: Iterable[str]) -> list[str]:
    """Append "2" to each name until it no longer collides with ``taken``."""
    seen = set(taken)
    result = []
    for name in names:
        while name in seen:
            name += "2"
        seen.add(name)
        result.append(name)
    return result


class Table:
    """A named relation: a schema plus an ordered list of tuples.

    Five relational algebra operators are provided (project, select,
    union, minus and join) along with a validated insert. Operators never
    modify their operands; each returns a new table with a generated name.

    Usage::

        movie = Table("movie", "title year genre", "String Integer String", "title year")
        movie.insert(("Star_Wars", 1977, "sciFi"))
        classics = movie.select(lambda t: t[movie.col("year")] < 1980)
    """

    DEFAULT_INDEX = IndexType.NO_INDEX

    # Counter for naming derived (temporary) tables
    _counter = itertools.count()

    def __init__(
        self,
        name: str,
        attributes: str | Iterable[str],
        domains: str | Iterable[str | Domain],
        key: str | Iterable[str],
        tuples: Iterable[Sequence[Any]] | None = None,
        index_type: IndexType | str | None = None,
    ) -> None:
        """Create a table.

        Args:
            name: Name of the relation.
            attributes: Attribute names, space-separated or as a sequence.
            domains: Domain names (e.g. ``"String Integer"``) or Domain values.
            key: Primary key attribute names.
            tuples: Optional initial rows, taken as already validated.
            index_type: Index strategy over the primary key.

        Raises:
            SchemaError: If the schema is malformed or a domain is unknown.
        """
        self.name = name
        self.schema = Schema.parse(attributes, domains, key)
        self._key_columns = self.schema.key_columns
        self._index: Index = make_index(index_type or self.DEFAULT_INDEX)
        self._tuples: list[Row] = []

        if tuples is None:
            logger.info("DDL> create table %s (%s)", name, " ".join(self.schema.attributes))
            return

        for values in tuples:
            self._append(tuple(values))

    @classmethod
    def from_schema(
        cls,
        name: str,
        schema: Schema,
        tuples: Iterable[Sequence[Any]] = (),
        index_type: IndexType | str | None = None,
    ) -> Table:
        """Create a table from an existing schema and rows."""
        return cls(name, schema.attributes, schema.domains, schema.key, tuples, index_type)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def attributes(self) -> tuple[str, ...]:
        return self.schema.attributes

    @property
    def domains(self) -> tuple[Domain, ...]:
        return self.schema.domains

    @property
    def key(self) -> tuple[str, ...]:
        return self.schema.key

    @property
    def index_type(self) -> IndexType:
        return self._index.index_type

    @property
    def index(self) -> Index:
        return self._index

    @property
    def rows(self) -> list[Row]:
        """Return a copy of the table's rows in insertion order."""
        return list(self._tuples)

    @property
    def count(self) -> int:
        """Return the number of rows in the table."""
        return len(self._tuples)

    def __len__(self) -> int:
        return len(self._tuples)

    def __iter__(self) -> Iterator[Row]:
        return iter(self._tuples)

    def __repr__(self) -> str:
        return f"Table({self.name!r}, {self.schema.describe()}, rows={len(self._tuples)})"

    def col(self, name: str) -> int:
        """Return the column position of an attribute.

        Raises:
            AttributeNotFound: If the attribute is not in this table.
        """
        return self.schema.col(name)

    def column_of(self, name: str) -> int | None:
        """Return the column position of an attribute, or None if absent."""
        return self.schema.column_of(name)

    def key_of(self, row: Sequence[Any]) -> CompositeKey:
        """Return the primary key value of a row."""
        return CompositeKey.from_row(row, self._key_columns)

    # ------------------------------------------------------------------
    # Data manipulation
    # ------------------------------------------------------------------

    def insert(self, values: Sequence[Any]) -> int:
        """Insert a tuple and return its position.

        Raises:
            ArityMismatch: If the number of values differs from the schema width.
            TypeMismatch: If a value does not conform to its column's domain.
            DuplicateKey: If a row with the same primary key already exists.
        """
        row = tuple(values)
        logger.info("DML> insert into %s values %s", self.name, row)

        self._type_check(row)
        key_val = self.key_of(row)
        if self._contains_key(key_val):
            raise DuplicateKey(f"Duplicate key {key_val} in table '{self.name}'")

        self._tuples.append(row)
        self._index.put(key_val, row)
        return len(self._tuples) - 1

    def _append(self, row: Row) -> None:
        self._tuples.append(row)
        key_val = self.key_of(row)
        # First occurrence wins when derived rows repeat a key
        if self._index.get(key_val) is None:
            self._index.put(key_val, row)

    def _type_check(self, row: Row) -> None:
        """Check the width of a row and the domain of every value."""
        if len(row) != self.schema.width:
            raise ArityMismatch(
                f"Table '{self.name}' expects {self.schema.width} values, got {len(row)}"
            )
        for attribute, domain, value in zip(self.schema.attributes, self.schema.domains, row):
            if not domain.conforms(value):
                raise TypeMismatch(attribute, domain, value)

    def _has_unique_keys(self) -> bool:
        # _append indexes only the first row per key
        return len(self._index) == len(self._tuples)

    def _contains_key(self, key_val: CompositeKey) -> bool:
        if self._index.enabled:
            return self._index.get(key_val) is not None
        return any(self.key_of(row) == key_val for row in self._tuples)

    # ------------------------------------------------------------------
    # Relational algebra
    # ------------------------------------------------------------------

    def _next_name(self) -> str:
        return f"{self.name}{next(Table._counter)}"

    def _derive(self, schema: Schema, rows: Iterable[Row]) -> Table:
        return Table.from_schema(self._next_name(), schema, rows, self.index_type)

    def project(self, attributes: str | Sequence[str]) -> Table:
        """Keep only the given attributes, in the given order.

        Row order and duplicate rows are preserved. The key is kept when
        the projection includes it; otherwise the projected attributes
        become the key. Unknown attribute names are logged and skipped.

        #usage movie.project("title year studioName")
        """
        names = split_names(attributes)
        logger.info("RA> %s.project (%s)", self.name, " ".join(names))

        positions = self.schema.resolve_columns(names)
        schema = self.schema.project(positions)
        rows = [tuple(row[p] for p in positions) for row in self._tuples]
        return self._derive(schema, rows)

    def select(self, condition: Predicate | CompositeKey) -> Table:
        """Select rows by predicate, or the row whose primary key matches.

        #usage movie.select(lambda t: t[movie.col("year")] == 1977)
        #usage movie.select(CompositeKey("Star_Wars", 1977))
        """
        if isinstance(condition, CompositeKey):
            return self._select_key(condition)
        if not callable(condition):
            raise TypeError(f"select expects a predicate or CompositeKey, got {type(condition).__name__}")

        logger.info("RA> %s.select (%s)", self.name, getattr(condition, "__name__", condition))
        rows = [row for row in self._tuples if condition(row)]
        return self._derive(self.schema, rows)

    def _select_key(self, key_val: CompositeKey) -> Table:
        logger.info("RA> %s.select (%s)", self.name, key_val)

        if self._index.enabled:
            found = self._index.get(key_val)
        else:
            found = next((row for row in self._tuples if self.key_of(row) == key_val), None)

        rows = [] if found is None else [found]
        return self._derive(self.schema, rows)

    def _check_compatible(self, other: Table, operator: str) -> None:
        if not self.schema.compatible(other.schema):
            raise SchemaMismatch(
                f"{operator}: tables '{self.name}' and '{other.name}' are not compatible"
            )

    def union(self, other: Table) -> Table:
        """Set union of this table and ``other``.

        Each distinct row appears once: this table's rows first, then rows
        of ``other`` not already present.

        Raises:
            SchemaMismatch: If the tables are not compatible.
        """
        logger.info("RA> %s.union (%s)", self.name, other.name)
        self._check_compatible(other, "union")

        seen: set[Row] = set()
        rows = []
        for row in itertools.chain(self._tuples, other._tuples):
            if row not in seen:
                seen.add(row)
                rows.append(row)
        return self._derive(self.schema, rows)

    def minus(self, other: Table) -> Table:
        """Rows of this table that do not appear in ``other``.

        Raises:
            SchemaMismatch: If the tables are not compatible.
        """
        logger.info("RA> %s.minus (%s)", self.name, other.name)
        self._check_compatible(other, "minus")

        excluded = set(other._tuples)
        rows = [row for row in self._tuples if row not in excluded]
        return self._derive(self.schema, rows)

    def _join_columns(
        self,
        attributes1: str | Sequence[str],
        attributes2: str | Sequence[str],
        other: Table,
    ) -> tuple[list[int], list[int]]:
        names1 = split_names(attributes1)
        names2 = split_names(attributes2)
        if len(names1) != len(names2):
            raise ArityMismatch(
                f"join: {len(names1)} attributes on the left but {len(names2)} on the right"
            )
        return (
            self.schema.resolve_columns(names1, strict=True),
            other.schema.resolve_columns(names2, strict=True),
        )

    def _join_schema(self, other: Table) -> Schema:
        renamed = _disambiguate(other.attributes, self.attributes)
        return Schema(
            self.attributes + tuple(renamed),
            self.domains + other.domains,
            self.key,
        )

    def _nested_loop_rows(self, cols1: list[int], other: Table, cols2: list[int]) -> list[Row]:
        rows = []
        for t1 in self._tuples:
            key1 = CompositeKey.from_row(t1, cols1)
            for t2 in other._tuples:
                if key1 == CompositeKey.from_row(t2, cols2):
                    rows.append(t1 + t2)
        return rows

    def join(
        self,
        attributes1: str | Sequence[str] | Table,
        attributes2: str | Sequence[str] | None = None,
        other: Table | None = None,
    ) -> Table:
        """Equi-join this table with ``other`` using a nested loop.

        Rows match when ``attributes1`` of this table equal ``attributes2``
        of ``other``. Attribute names of ``other`` that collide with this
        table's get "2" appended. Called with a single table argument this
        performs a natural join instead.

        #usage movie.join("studioName", "name", studio)
        #usage movie_star.join(stars_in)

        Raises:
            ArityMismatch: If the attribute lists differ in length.
            AttributeNotFound: If a join attribute does not exist.
        """
        if isinstance(attributes1, Table) and attributes2 is None and other is None:
            return self.natural_join(attributes1)
        if attributes2 is None or other is None or isinstance(attributes1, Table):
            raise TypeError("join expects (attributes1, attributes2, other) or (other)")

        logger.info("RA> %s.join (%s, %s, %s)", self.name, attributes1, attributes2, other.name)
        cols1, cols2 = self._join_columns(attributes1, attributes2, other)
        rows = self._nested_loop_rows(cols1, other, cols2)
        return self._derive(self._join_schema(other), rows)

    def i_join(
        self,
        attributes1: str | Sequence[str],
        attributes2: str | Sequence[str],
        other: Table,
    ) -> Table:
        """Equi-join that probes the primary-key index of ``other``.

        The index is only usable when ``attributes2`` is exactly the key of
        ``other``, ``other`` keeps an index, and every row of ``other`` has
        its own index entry. Derived tables may repeat key values, in which
        case this falls back to the nested loop.
        """
        logger.info("RA> %s.i_join (%s, %s, %s)", self.name, attributes1, attributes2, other.name)
        cols1, cols2 = self._join_columns(attributes1, attributes2, other)

        if other._index.enabled and cols2 == other._key_columns and other._has_unique_keys():
            rows = []
            for t1 in self._tuples:
                t2 = other._index.get(CompositeKey.from_row(t1, cols1))
                if t2 is not None:
                    rows.append(t1 + t2)
        else:
            logger.debug("i_join: no usable index on '%s', using nested loop", other.name)
            rows = self._nested_loop_rows(cols1, other, cols2)

        return self._derive(self._join_schema(other), rows)

    def h_join(
        self,
        attributes1: str | Sequence[str],
        attributes2: str | Sequence[str],
        other: Table,
    ) -> Table:
        """Equi-join that hashes the smaller table on its join attributes."""
        logger.info("RA> %s.h_join (%s, %s, %s)", self.name, attributes1, attributes2, other.name)
        cols1, cols2 = self._join_columns(attributes1, attributes2, other)

        rows = []
        if len(other) <= len(self):
            buckets: dict[CompositeKey, list[Row]] = defaultdict(list)
            for t2 in other._tuples:
                buckets[CompositeKey.from_row(t2, cols2)].append(t2)
            for t1 in self._tuples:
                for t2 in buckets.get(CompositeKey.from_row(t1, cols1), ()):
                    rows.append(t1 + t2)
        else:
            buckets = defaultdict(list)
            for t1 in self._tuples:
                buckets[CompositeKey.from_row(t1, cols1)].append(t1)
            for t2 in other._tuples:
                for t1 in buckets.get(CompositeKey.from_row(t2, cols2), ()):
                    rows.append(t1 + t2)

        return self._derive(self._join_schema(other), rows)

    def common_attributes(self, other: Table) -> list[str]:
        """Attribute names shared with ``other`` whose domains agree.

        Domains are compared by attribute name, so the shared attributes
        may sit at different positions in the two schemas.
        """
        common = []
        for name, domain in zip(self.attributes, self.domains):
            if other.schema.domain_of(name) is domain:
                common.append(name)
        return common

    def natural_join(self, other: Table) -> Table:
        """Join on all common attributes, keeping one copy of each.

        With no common attributes this is the cartesian product.
        """
        logger.info("RA> %s.join (%s)", self.name, other.name)

        common = self.common_attributes(other)
        cols1 = [self.col(name) for name in common]
        cols2 = [other.col(name) for name in common]
        kept = [i for i, name in enumerate(other.attributes) if name not in common]

        schema = Schema(
            self.attributes + tuple(_disambiguate((other.attributes[i] for i in kept), self.attributes)),
            self.domains + tuple(other.domains[i] for i in kept),
            self.key,
        )

        rows = []
        for t1 in self._tuples:
            key1 = CompositeKey.from_row(t1, cols1)
            for t2 in other._tuples:
                if key1 == CompositeKey.from_row(t2, cols2):
                    rows.append(t1 + tuple(t2[i] for i in kept))

        return self._derive(schema, rows)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Return the table's full state as JSON-compatible data."""
        return {
            "name": self.name,
            "attributes": list(self.attributes),
            "domains": [d.value for d in self.domains],
            "key": list(self.key),
            "index": self.index_type.value,
            "tuples": [list(row) for row in self._tuples],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Table:
        """Rebuild a table from :meth:`to_dict` output.

        Raises:
            PersistenceFailure: If the data is incomplete or inconsistent.
        """
        try:
            table = cls(
                data["name"],
                data["attributes"],
                data["domains"],
                data["key"],
                (),
                data.get("index"),
            )
            for values in data["tuples"]:
                row = tuple(values)
                table._type_check(row)
                table._append(row)
        except (KeyError, TypeError, ValueError, RelationalError) as e:
            raise PersistenceFailure(f"Corrupt table data: {e}") from e
        return table

    def save(self, store: TableStore | Path | str | None = None) -> Path:
        """Write this table to ``<name>.dbf`` in the store directory.

        Raises:
            PersistenceFailure: If the file cannot be written.
        """
        if not isinstance(store, TableStore):
            store = TableStore(store)
        return store.save(self.name, self.to_dict())

    @classmethod
    def load(cls, name: str, store: TableStore | Path | str | None = None) -> Table:
        """Load the table with the given name from the store directory.

        Raises:
            PersistenceFailure: If the file is missing, unreadable or corrupt.
        """
        if not isinstance(store, TableStore):
            store = TableStore(store)
        return cls.from_dict(store.load(name))

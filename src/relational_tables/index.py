"""Pluggable primary-key indexes for tables."""

from __future__ import annotations

import bisect
from enum import Enum
from typing import Any, Iterator

from relational_tables.key import CompositeKey

Row = tuple[Any, ...]


class IndexType(Enum):
    """The supported index strategies."""

    NO_INDEX = "none"
    HASH = "hash"
    ORDERED = "ordered"


class Index:
    """Base class for a mapping from primary key to row."""

    index_type: IndexType

    @property
    def enabled(self) -> bool:
        """Return whether lookups go through this index."""
        return True

    def put(self, key: CompositeKey, row: Row) -> None:
        raise NotImplementedError

    def get(self, key: CompositeKey) -> Row | None:
        raise NotImplementedError

    def __contains__(self, key: object) -> bool:
        return isinstance(key, CompositeKey) and self.get(key) is not None

    def __len__(self) -> int:
        raise NotImplementedError

    def items(self) -> Iterator[tuple[CompositeKey, Row]]:
        raise NotImplementedError


class NoIndex(Index):
    """Placeholder used when a table keeps no index."""

    index_type = IndexType.NO_INDEX

    @property
    def enabled(self) -> bool:
        return False

    def put(self, key: CompositeKey, row: Row) -> None:
        pass

    def get(self, key: CompositeKey) -> Row | None:
        return None

    def __len__(self) -> int:
        return 0

    def items(self) -> Iterator[tuple[CompositeKey, Row]]:
        return iter(())


class HashIndex(Index):
    """Hash-based index backed by a dict."""

    index_type = IndexType.HASH

    def __init__(self) -> None:
        self._map: dict[CompositeKey, Row] = {}

    def put(self, key: CompositeKey, row: Row) -> None:
        self._map[key] = row

    def get(self, key: CompositeKey) -> Row | None:
        return self._map.get(key)

    def __len__(self) -> int:
        return len(self._map)

    def items(self) -> Iterator[tuple[CompositeKey, Row]]:
        return iter(self._map.items())


class OrderedIndex(Index):
    """Sorted index; iterates entries in ascending key order.

    Keys are kept in a sorted list searched with bisect, so lookups are
    O(log n).
    """

    index_type = IndexType.ORDERED

    def __init__(self) -> None:
        self._keys: list[CompositeKey] = []
        self._rows: list[Row] = []

    def _find(self, key: CompositeKey) -> int | None:
        try:
            pos = bisect.bisect_left(self._keys, key)
        except TypeError:
            # Values that cannot be ordered against the stored keys never match
            return None
        if pos < len(self._keys) and self._keys[pos] == key:
            return pos
        return None

    def put(self, key: CompositeKey, row: Row) -> None:
        pos = bisect.bisect_left(self._keys, key)
        if pos < len(self._keys) and self._keys[pos] == key:
            self._rows[pos] = row
        else:
            self._keys.insert(pos, key)
            self._rows.insert(pos, row)

    def get(self, key: CompositeKey) -> Row | None:
        pos = self._find(key)
        if pos is None:
            return None
        return self._rows[pos]

    def __len__(self) -> int:
        return len(self._keys)

    def items(self) -> Iterator[tuple[CompositeKey, Row]]:
        return iter(zip(self._keys, self._rows))


_INDEX_CLASSES: dict[IndexType, type[Index]] = {
    IndexType.NO_INDEX: NoIndex,
    IndexType.HASH: HashIndex,
    IndexType.ORDERED: OrderedIndex,
}


def make_index(index_type: IndexType | str) -> Index:
    """Create an empty index of the given type."""
    if isinstance(index_type, str):
        index_type = IndexType(index_type)
    return _INDEX_CLASSES[index_type]()

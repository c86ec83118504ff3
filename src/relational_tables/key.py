"""Composite keys built from one or more column values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Sequence


@dataclass(frozen=True, order=True)
class CompositeKey:
    """An immutable, ordered group of column values.

    Keys compare equal when they have the same length and equal values at
    every position, and order lexicographically, so they can serve as both
    hash-map and sorted-map keys.
    """

    values: tuple[Any, ...]

    def __init__(self, *values: Any) -> None:
        # Accept CompositeKey("a", 1) as well as CompositeKey(("a", 1))
        if len(values) == 1 and isinstance(values[0], (tuple, list)):
            values = tuple(values[0])
        object.__setattr__(self, "values", tuple(values))

    @classmethod
    def from_row(cls, row: Sequence[Any], positions: Sequence[int]) -> CompositeKey:
        """Extract the values of ``row`` at ``positions`` into a key."""
        return cls(tuple(row[p] for p in positions))

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.values)

    def __getitem__(self, index: int) -> Any:
        return self.values[index]

    def __repr__(self) -> str:
        return f"CompositeKey{self.values!r}"

    def __str__(self) -> str:
        return "(" + ", ".join(str(v) for v in self.values) + ")"

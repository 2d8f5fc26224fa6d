"""Search results and per-item grouping."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Generic, TypeVar, overload

from stockroom.domain.stock.value_objects import GroupedEntry, IndexedEntry

T = TypeVar("T")

# =============================================================================
# SEARCH RESULT
# =============================================================================


@dataclass(frozen=True)
class StockSearchResult(Generic[T]):
    """Ordered, read-only matches of a search over an engine."""

    entries: tuple[IndexedEntry[T], ...] = ()

    def group(self) -> list[GroupedEntry[T]]:
        """Collapse matches of the same item into one entry per item.

        Items are compared by equality, so unhashable items are supported.
        Groups appear in order of first encounter; each group's indexes keep
        the encounter order of its matches.

        Returns:
            One grouped entry per distinct item.
        """
        items: list[T] = []
        quantities: list[int] = []
        indexes: list[list[int]] = []

        for entry in self.entries:
            position = _position_of(items, entry.item)
            if position is None:
                items.append(entry.item)
                quantities.append(entry.quantity)
                indexes.append([entry.index])
            else:
                quantities[position] += entry.quantity
                indexes[position].append(entry.index)

        return [
            GroupedEntry(item, quantity, tuple(group_indexes))
            for item, quantity, group_indexes in zip(
                items, quantities, indexes, strict=True
            )
        ]

    @property
    def total_quantity(self) -> int:
        """Sum of quantities across all matches."""
        return sum(entry.quantity for entry in self.entries)

    def __iter__(self) -> Iterator[IndexedEntry[T]]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    @overload
    def __getitem__(self, index: int) -> IndexedEntry[T]: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[IndexedEntry[T], ...]: ...

    def __getitem__(
        self, index: int | slice
    ) -> IndexedEntry[T] | tuple[IndexedEntry[T], ...]:
        return self.entries[index]


def _position_of(items: list[T], item: T) -> int | None:
    for position, candidate in enumerate(items):
        if candidate == item:
            return position
    return None

"""Slot storage for the Stock bounded context."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Generic, Protocol, TypeVar

from stockroom.domain.stock.value_objects import Entry
from stockroom.shared.exceptions import IndexOutOfRangeError

T = TypeVar("T")

# =============================================================================
# PROTOCOLS
# =============================================================================


class SlotSequence(Protocol[T]):
    """Ordered, index-addressable store of slots.

    Positions are contiguous ``0..len-1``; removing a slot shifts every later
    slot down by one. Implementations raise ``IndexOutOfRangeError`` for any
    position outside the sequence.
    """

    def get(self, index: int) -> Entry[T]:
        """Return the slot at ``index``."""
        ...

    def set(self, index: int, slot: Entry[T]) -> None:
        """Replace the slot at ``index``."""
        ...

    def append(self, slot: Entry[T]) -> None:
        """Add a slot after the last one."""
        ...

    def insert(self, index: int, slot: Entry[T]) -> None:
        """Place a slot at ``index``, shifting later slots up.

        ``index`` may equal ``len(self)`` to append.
        """
        ...

    def remove_at(self, index: int) -> Entry[T]:
        """Remove and return the slot at ``index``."""
        ...

    def swap(self, first: int, second: int) -> None:
        """Exchange the slots at two positions."""
        ...

    def first_index_where(self, predicate: Callable[[Entry[T]], bool]) -> int | None:
        """Position of the first slot matching ``predicate``, or None."""
        ...

    def all_indexes_where(self, predicate: Callable[[Entry[T]], bool]) -> list[int]:
        """Positions of every slot matching ``predicate``, ascending."""
        ...

    def copy(self) -> SlotSequence[T]:
        """An independent sequence holding the same slots."""
        ...

    def __len__(self) -> int: ...


# =============================================================================
# LIST-BACKED SEQUENCE
# =============================================================================


@dataclass
class ListSlotSequence(Generic[T]):
    """Implements SlotSequence over a plain Python list.

    Negative positions are rejected rather than counted from the end.
    """

    _slots: list[Entry[T]] = field(default_factory=list)

    @classmethod
    def of(cls, slots: Iterable[Entry[T]]) -> ListSlotSequence[T]:
        """Build a sequence holding ``slots`` in order."""
        return cls(list(slots))

    def get(self, index: int) -> Entry[T]:
        self._check(index)
        return self._slots[index]

    def set(self, index: int, slot: Entry[T]) -> None:
        self._check(index)
        self._slots[index] = slot

    def append(self, slot: Entry[T]) -> None:
        self._slots.append(slot)

    def insert(self, index: int, slot: Entry[T]) -> None:
        if not 0 <= index <= len(self._slots):
            raise IndexOutOfRangeError(index, len(self._slots))
        self._slots.insert(index, slot)

    def remove_at(self, index: int) -> Entry[T]:
        self._check(index)
        return self._slots.pop(index)

    def swap(self, first: int, second: int) -> None:
        self._check(first)
        self._check(second)
        self._slots[first], self._slots[second] = (
            self._slots[second],
            self._slots[first],
        )

    def first_index_where(self, predicate: Callable[[Entry[T]], bool]) -> int | None:
        for index, slot in enumerate(self._slots):
            if predicate(slot):
                return index
        return None

    def all_indexes_where(self, predicate: Callable[[Entry[T]], bool]) -> list[int]:
        return [index for index, slot in enumerate(self._slots) if predicate(slot)]

    def copy(self) -> ListSlotSequence[T]:
        return ListSlotSequence(list(self._slots))

    def __len__(self) -> int:
        return len(self._slots)

    def _check(self, index: int) -> None:
        if not 0 <= index < len(self._slots):
            raise IndexOutOfRangeError(index, len(self._slots))

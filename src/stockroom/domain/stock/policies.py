"""Allocation policies: how a quantity change lands on the slot sequence."""

from __future__ import annotations

import logging

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, ClassVar, Protocol, TypeVar

from stockroom.domain.stock.sequences import SlotSequence
from stockroom.domain.stock.value_objects import Entry
from stockroom.shared.exceptions import (
    InsufficientStockError,
    InvalidArgumentError,
    NotInStockError,
    StackFullError,
)
from stockroom.shared.types import PolicyKind

logger = logging.getLogger(__name__)

T = TypeVar("T")

# =============================================================================
# PROTOCOLS
# =============================================================================


class AllocationPolicy(Protocol):
    """Interface for distributing quantity deltas across slots.

    Policies mutate the sequence they are given and raise on failure; the
    caller stages a copy, so a raised error never leaves partial changes
    behind.
    """

    kind: ClassVar[PolicyKind]

    def apply_add(
        self, slots: SlotSequence[Any], item: Any, quantity: int, stack_size: int
    ) -> None:
        """Add ``quantity`` of ``item``."""
        ...

    def apply_remove(
        self, slots: SlotSequence[Any], item: Any, quantity: int, stack_size: int
    ) -> None:
        """Remove ``quantity`` of ``item``.

        Raises:
            NotInStockError: If no slot holds the item.
            InsufficientStockError: If fewer than ``quantity`` are held.
        """
        ...

    def apply_insert(
        self,
        slots: SlotSequence[Any],
        index: int,
        item: Any,
        quantity: int,
        stack_size: int,
    ) -> None:
        """Place ``quantity`` of ``item`` in new slots starting at ``index``."""
        ...

    def seed(self, entries: Iterable[Entry[T]], stack_size: int) -> list[Entry[T]]:
        """Lay out the initial slots of a newly constructed engine."""
        ...


def holding(item: object) -> Callable[[Entry[Any]], bool]:
    """Slot predicate matching slots whose item equals ``item``."""
    return lambda slot: slot.item == item


# =============================================================================
# AGGREGATE
# =============================================================================


@dataclass(frozen=True)
class AggregatePolicy:
    """Keeps exactly one slot per distinct item."""

    kind: ClassVar[PolicyKind] = PolicyKind.AGGREGATE

    def apply_add(
        self, slots: SlotSequence[Any], item: Any, quantity: int, stack_size: int
    ) -> None:
        """Merge into the item's slot, or open one.

        Raises:
            StackFullError: If the item's slot would exceed ``stack_size``.
        """
        index = slots.first_index_where(holding(item))
        if index is None:
            if quantity > stack_size:
                raise StackFullError(stack_size, quantity)
            slots.append(Entry(item, quantity))
            return

        slot = slots.get(index)
        if slot.quantity + quantity > stack_size:
            raise StackFullError(stack_size, quantity)
        slots.set(index, slot.with_quantity(slot.quantity + quantity))

    def apply_remove(
        self, slots: SlotSequence[Any], item: Any, quantity: int, stack_size: int
    ) -> None:
        index = slots.first_index_where(holding(item))
        if index is None:
            raise NotInStockError(item)

        slot = slots.get(index)
        if slot.quantity < quantity:
            raise InsufficientStockError(item, quantity, slot.quantity)

        remaining = slot.quantity - quantity
        if remaining == 0:
            slots.remove_at(index)
        else:
            slots.set(index, slot.with_quantity(remaining))

    def apply_insert(
        self,
        slots: SlotSequence[Any],
        index: int,
        item: Any,
        quantity: int,
        stack_size: int,
    ) -> None:
        """Open the item's only slot at ``index``.

        Raises:
            InvalidArgumentError: If the item already has a slot.
            StackFullError: If ``quantity`` exceeds ``stack_size``.
        """
        if slots.first_index_where(holding(item)) is not None:
            msg = f"Cannot insert {item!r}: it already has a slot, add to it instead"
            raise InvalidArgumentError(msg)
        if quantity > stack_size:
            raise StackFullError(stack_size, quantity)
        slots.insert(index, Entry(item, quantity))

    def seed(self, entries: Iterable[Entry[T]], stack_size: int) -> list[Entry[T]]:
        """Merge duplicate items, then validate each total.

        Raises:
            StackFullError: If any merged total exceeds ``stack_size``.
        """
        merged: list[Entry[T]] = []
        for entry in entries:
            position = next(
                (i for i, slot in enumerate(merged) if slot.item == entry.item),
                None,
            )
            if position is None:
                merged.append(Entry(entry.item, entry.quantity))
            else:
                current = merged[position]
                merged[position] = current.with_quantity(
                    current.quantity + entry.quantity
                )

        if any(slot.quantity > stack_size for slot in merged):
            raise StackFullError(stack_size)
        return merged


# =============================================================================
# OVERFLOW
# =============================================================================


@dataclass(frozen=True)
class OverflowPolicy:
    """Spreads an item over as many capped slots as it needs.

    Adds top up existing slots in sequence order and append the rest; removes
    drain the highest-positioned slot first.
    """

    kind: ClassVar[PolicyKind] = PolicyKind.OVERFLOW

    def apply_add(
        self, slots: SlotSequence[Any], item: Any, quantity: int, stack_size: int
    ) -> None:
        remaining = quantity
        for index in slots.all_indexes_where(holding(item)):
            if remaining == 0:
                break
            slot = slots.get(index)
            spare = stack_size - slot.quantity
            if spare <= 0:
                continue
            topped = min(spare, remaining)
            slots.set(index, slot.with_quantity(slot.quantity + topped))
            remaining -= topped

        if remaining > 0:
            self._insert_chunks(slots, len(slots), item, remaining, stack_size)

    def apply_remove(
        self, slots: SlotSequence[Any], item: Any, quantity: int, stack_size: int
    ) -> None:
        indexes = slots.all_indexes_where(holding(item))
        if not indexes:
            raise NotInStockError(item)

        available = sum(slots.get(index).quantity for index in indexes)
        if quantity > available:
            raise InsufficientStockError(item, quantity, available)

        remaining = quantity
        # Highest positions first, so removals never shift an index still
        # waiting to be visited.
        for index in reversed(indexes):
            if remaining == 0:
                break
            slot = slots.get(index)
            taken = min(slot.quantity, remaining)
            remaining -= taken
            if taken == slot.quantity:
                slots.remove_at(index)
            else:
                slots.set(index, slot.with_quantity(slot.quantity - taken))

    def apply_insert(
        self,
        slots: SlotSequence[Any],
        index: int,
        item: Any,
        quantity: int,
        stack_size: int,
    ) -> None:
        self._insert_chunks(slots, index, item, quantity, stack_size)

    def seed(self, entries: Iterable[Entry[T]], stack_size: int) -> list[Entry[T]]:
        """Split every supplied entry into its own chunks, without merging."""
        seeded: list[Entry[T]] = []
        for entry in entries:
            remaining = entry.quantity
            while remaining > 0:
                chunk = min(stack_size, remaining)
                seeded.append(Entry(entry.item, chunk))
                remaining -= chunk
        return seeded

    @staticmethod
    def _insert_chunks(
        slots: SlotSequence[Any],
        index: int,
        item: Any,
        quantity: int,
        stack_size: int,
    ) -> None:
        remaining = quantity
        position = index
        while remaining > 0:
            chunk = min(stack_size, remaining)
            slots.insert(position, Entry(item, chunk))
            remaining -= chunk
            position += 1
        logger.debug(
            "Placed %d of %r in %d new slot(s) from position %d",
            quantity,
            item,
            position - index,
            index,
        )

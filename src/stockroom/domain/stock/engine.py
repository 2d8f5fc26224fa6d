"""The Quantity Engine: stackable stock over capacity-bounded slots."""

from __future__ import annotations

import logging

from collections.abc import Callable, Iterable, Iterator
from typing import Any, Generic, TypeVar

from stockroom.domain.stock.policies import AllocationPolicy, holding
from stockroom.domain.stock.search import StockSearchResult
from stockroom.domain.stock.sequences import ListSlotSequence, SlotSequence
from stockroom.domain.stock.value_objects import (
    Entry,
    IndexedEntry,
    StockChange,
    TryAddResult,
    TryRemoveResult,
)
from stockroom.shared.constants import DEFAULT_STACK_SIZE
from stockroom.shared.exceptions import (
    CollectionModifiedError,
    IndexOutOfRangeError,
    InvalidArgumentError,
    NoMatchError,
)
from stockroom.shared.types import ItemPredicate

logger = logging.getLogger(__name__)

T = TypeVar("T")

ChangeListener = Callable[[StockChange[Any]], None]
SequenceFactory = Callable[[Iterable[Entry[Any]]], SlotSequence[Any]]


# =============================================================================
# ENGINE
# =============================================================================


class QuantityEngine(Generic[T]):
    """Aggregate root holding counted items in capacity-bounded slots.

    Slot distribution is delegated to an ``AllocationPolicy``. Every mutating
    call stages its work on a copy of the slot sequence and only replaces the
    live sequence once the whole call has succeeded, so a raised error leaves
    the engine exactly as it was. A successful call that changed anything
    notifies subscribers once with the coalesced deltas.
    """

    def __init__(
        self,
        policy: AllocationPolicy,
        stack_size: int = DEFAULT_STACK_SIZE,
        entries: Iterable[Entry[T] | tuple[T, int]] = (),
        *,
        sequence_factory: SequenceFactory = ListSlotSequence.of,
    ) -> None:
        """Create an engine, optionally pre-stocked.

        Args:
            policy: Decides how quantities map onto slots.
            stack_size: Maximum quantity a single slot may hold.
            entries: Initial stock as entries or ``(item, quantity)`` pairs.
                The policy decides whether duplicates are merged.
            sequence_factory: Builds the slot sequence from initial slots.

        Raises:
            InvalidArgumentError: If ``stack_size`` or any quantity is not
                positive.
            StackFullError: If the policy cannot fit the initial stock.
        """
        _require_stack_size(stack_size)
        self._policy = policy
        self._stack_size = stack_size
        self._sequence_factory = sequence_factory
        self._listeners: list[ChangeListener] = []
        self._version = 0

        seeded = policy.seed([_coerce_entry(e) for e in entries], stack_size)
        self._slots: SlotSequence[T] = sequence_factory(seeded)

    @classmethod
    def from_items(
        cls,
        items: Iterable[T],
        policy: AllocationPolicy,
        stack_size: int = DEFAULT_STACK_SIZE,
    ) -> QuantityEngine[T]:
        """Create an engine where each supplied item counts once."""
        return cls(policy, stack_size, [Entry(item, 1) for item in items])

    # -------------------------------------------------------------------------
    # Projections
    # -------------------------------------------------------------------------

    @property
    def policy(self) -> AllocationPolicy:
        """The active allocation policy."""
        return self._policy

    @property
    def stack_size(self) -> int:
        """Maximum quantity a single slot may hold."""
        return self._stack_size

    @stack_size.setter
    def stack_size(self, value: int) -> None:
        """Change the cap; lowering it truncates oversized slots in place.

        Truncated quantity is discarded, not moved into new slots.

        Raises:
            InvalidArgumentError: If ``value`` is not positive.
        """
        _require_stack_size(value)
        if value == self._stack_size:
            return

        staged = self._slots.copy()
        truncated: list[Entry[T]] = []
        for index in range(len(staged)):
            slot = staged.get(index)
            if slot.quantity > value:
                staged.set(index, slot.with_quantity(value))
                truncated.append(Entry(slot.item, slot.quantity - value))

        self._stack_size = value
        if not truncated:
            # A cap change invalidates iteration even when no slot moves.
            self._version += 1
            return

        logger.warning(
            "Stack size lowered to %d: discarded %d item(s) from %d slot(s)",
            value,
            sum(e.quantity for e in truncated),
            len(truncated),
        )
        self._commit(staged, StockChange(old_values=tuple(truncated)), "stack_size")

    @property
    def total_count(self) -> int:
        """Sum of quantities across all slots."""
        return sum(slot.quantity for slot in self._snapshot())

    @property
    def stack_count(self) -> int:
        """Number of slots."""
        return len(self._slots)

    @property
    def last_index(self) -> int:
        """Position of the last slot, or -1 when empty."""
        return len(self._slots) - 1

    def quantity_of(self, item: T) -> int:
        """Total quantity held of ``item``; 0 when absent."""
        return _quantity_in(self._slots, item)

    def quantity_where(self, predicate: Callable[[T], bool]) -> int:
        """Total quantity held across slots whose item matches."""
        _require_predicate(predicate)
        return sum(
            self._slots.get(index).quantity
            for index in self._slots.all_indexes_where(_on_item(predicate))
        )

    def indexes_of(self, item: T) -> list[int]:
        """Positions of every slot holding ``item``."""
        return self._slots.all_indexes_where(holding(item))

    def indexes_where(self, predicate: Callable[[T], bool]) -> list[int]:
        """Positions of every slot whose item matches."""
        _require_predicate(predicate)
        return self._slots.all_indexes_where(_on_item(predicate))

    def search(self, item: T) -> StockSearchResult[T]:
        """Slots holding ``item``, with their positions."""
        return self._search(holding(item))

    def search_where(self, predicate: Callable[[T], bool]) -> StockSearchResult[T]:
        """Slots whose item matches, with their positions."""
        _require_predicate(predicate)
        return self._search(_on_item(predicate))

    # -------------------------------------------------------------------------
    # Adding
    # -------------------------------------------------------------------------

    def add(self, item: T, quantity: int = 1) -> None:
        """Add ``quantity`` of ``item`` through the policy.

        Raises:
            InvalidArgumentError: If ``quantity`` is not positive.
            StackFullError: If the policy cannot fit the quantity.
        """
        _require_quantity(quantity)
        staged = self._slots.copy()
        self._policy.apply_add(staged, item, quantity, self._stack_size)
        self._commit(staged, StockChange(new_values=(Entry(item, quantity),)), "add")

    def add_where(self, predicate: Callable[[T], bool], quantity: int = 1) -> None:
        """Add ``quantity`` once per slot whose item matches.

        Raises:
            InvalidArgumentError: If ``predicate`` or ``quantity`` is invalid.
            NoMatchError: If no slot matches.
            StackFullError: If the policy cannot fit any of the additions.
        """
        _require_predicate(predicate)
        _require_quantity(quantity)
        items = self._matching_slot_items(predicate)
        if not items:
            msg = f"Cannot add {quantity} using predicate {predicate!r}: no match"
            raise NoMatchError(msg)

        staged = self._slots.copy()
        for item in items:
            self._policy.apply_add(staged, item, quantity, self._stack_size)
        change = StockChange(new_values=tuple(Entry(item, quantity) for item in items))
        self._commit(staged, change, "add_where")

    def try_add(self, item: T, quantity: int = 1) -> TryAddResult:
        """Add as much of ``quantity`` as fits under the stack size.

        The room left is ``stack_size`` minus the item's total quantity,
        whichever policy is active.

        Raises:
            InvalidArgumentError: If ``quantity`` is not positive.
        """
        _require_quantity(quantity)
        staged = self._slots.copy()
        added = self._try_add_into(staged, item, quantity)
        change = StockChange(new_values=(Entry(item, added),) if added else ())
        self._commit(staged, change, "try_add")
        return TryAddResult(added, quantity - added)

    def try_add_where(
        self, predicate: Callable[[T], bool], quantity: int = 1
    ) -> TryAddResult:
        """Lenient add applied once per slot whose item matches.

        Returns the summed outcome; no match yields nothing added.

        Raises:
            InvalidArgumentError: If ``predicate`` or ``quantity`` is invalid.
        """
        _require_predicate(predicate)
        _require_quantity(quantity)
        items = self._matching_slot_items(predicate)
        if not items:
            return TryAddResult(0, quantity)

        staged = self._slots.copy()
        deltas: list[Entry[T]] = []
        added_total = 0
        not_added_total = 0
        for item in items:
            added = self._try_add_into(staged, item, quantity)
            added_total += added
            not_added_total += quantity - added
            if added:
                deltas.append(Entry(item, added))

        self._commit(staged, StockChange(new_values=tuple(deltas)), "try_add_where")
        return TryAddResult(added_total, not_added_total)

    # -------------------------------------------------------------------------
    # Positional placement
    # -------------------------------------------------------------------------

    def insert(self, index: int, item: T, quantity: int = 1) -> None:
        """Place ``quantity`` of ``item`` in new slots starting at ``index``.

        Raises:
            InvalidArgumentError: If ``quantity`` is not positive, or the
                policy refuses a second slot for the item.
            IndexOutOfRangeError: If ``index`` is outside ``0..len``.
            StackFullError: If the policy cannot fit the quantity.
        """
        _require_quantity(quantity)
        if not 0 <= index <= len(self._slots):
            raise IndexOutOfRangeError(index, len(self._slots))

        staged = self._slots.copy()
        self._policy.apply_insert(staged, index, item, quantity, self._stack_size)
        change = StockChange(new_values=(Entry(item, quantity),))
        self._commit(staged, change, "insert")

    def insert_first(self, item: T, quantity: int = 1) -> None:
        """Place ``quantity`` of ``item`` at the front."""
        self.insert(0, item, quantity)

    def insert_last(self, item: T, quantity: int = 1) -> None:
        """Place ``quantity`` of ``item`` at the end, without topping up."""
        self.insert(len(self._slots), item, quantity)

    # -------------------------------------------------------------------------
    # Removing
    # -------------------------------------------------------------------------

    def remove(self, item: T, quantity: int = 1) -> None:
        """Remove exactly ``quantity`` of ``item``.

        Raises:
            InvalidArgumentError: If ``quantity`` is not positive.
            NotInStockError: If the item is not held.
            InsufficientStockError: If less than ``quantity`` is held.
        """
        _require_quantity(quantity)
        staged = self._slots.copy()
        self._policy.apply_remove(staged, item, quantity, self._stack_size)
        change = StockChange(old_values=(Entry(item, quantity),))
        self._commit(staged, change, "remove")

    def remove_where(self, predicate: Callable[[T], bool], quantity: int = 1) -> None:
        """Remove ``quantity`` from every distinct matching item.

        Either every matching item loses ``quantity`` or nothing changes.

        Raises:
            InvalidArgumentError: If ``predicate`` or ``quantity`` is invalid.
            NoMatchError: If no slot matches.
            InsufficientStockError: If any matching item holds too little.
        """
        _require_predicate(predicate)
        _require_quantity(quantity)
        items = self._distinct_items(predicate)
        if not items:
            msg = f"Cannot remove {quantity} using predicate {predicate!r}: no match"
            raise NoMatchError(msg)

        staged = self._slots.copy()
        for item in items:
            self._policy.apply_remove(staged, item, quantity, self._stack_size)
        change = StockChange(old_values=tuple(Entry(item, quantity) for item in items))
        self._commit(staged, change, "remove_where")

    def try_remove(self, item: T, quantity: int = 1) -> TryRemoveResult:
        """Remove up to ``quantity`` of ``item`` without failing on stock.

        Raises:
            InvalidArgumentError: If ``quantity`` is not positive.
        """
        _require_quantity(quantity)
        staged = self._slots.copy()
        removed = self._try_remove_from(staged, item, quantity)
        change = StockChange(old_values=(Entry(item, removed),) if removed else ())
        self._commit(staged, change, "try_remove")
        return TryRemoveResult(removed, quantity - removed)

    def try_remove_where(
        self, predicate: Callable[[T], bool], quantity: int = 1
    ) -> TryRemoveResult:
        """Lenient remove applied to every distinct matching item.

        Raises:
            InvalidArgumentError: If ``predicate`` or ``quantity`` is invalid.
        """
        _require_predicate(predicate)
        _require_quantity(quantity)
        items = self._distinct_items(predicate)
        if not items:
            return TryRemoveResult(0, quantity)

        staged = self._slots.copy()
        deltas: list[Entry[T]] = []
        removed_total = 0
        not_removed_total = 0
        for item in items:
            removed = self._try_remove_from(staged, item, quantity)
            removed_total += removed
            not_removed_total += quantity - removed
            if removed:
                deltas.append(Entry(item, removed))

        change = StockChange(old_values=tuple(deltas))
        self._commit(staged, change, "try_remove_where")
        return TryRemoveResult(removed_total, not_removed_total)

    def remove_at(self, index: int, count: int = 1) -> None:
        """Remove ``count`` consecutive slots starting at ``index``.

        Raises:
            InvalidArgumentError: If ``count`` is not positive.
            IndexOutOfRangeError: If the range leaves the sequence.
        """
        if count <= 0:
            msg = f"Cannot remove {count} slots: count must be greater than zero"
            raise InvalidArgumentError(msg)
        self._check_index(index)
        self._check_index(index + count - 1)

        staged = self._slots.copy()
        removed = [staged.remove_at(index) for _ in range(count)]
        self._commit(staged, StockChange(old_values=tuple(removed)), "remove_at")

    # -------------------------------------------------------------------------
    # Clearing
    # -------------------------------------------------------------------------

    def clear(self) -> None:
        """Remove every slot."""
        removed = tuple(self._snapshot())
        self._commit(
            self._sequence_factory([]), StockChange(old_values=removed), "clear"
        )

    def clear_item(self, item: T) -> None:
        """Remove every slot holding ``item``."""
        self._clear_slots(holding(item), "clear_item")

    def clear_where(self, predicate: Callable[[T], bool]) -> None:
        """Remove every slot whose item matches."""
        _require_predicate(predicate)
        self._clear_slots(_on_item(predicate), "clear_where")

    # -------------------------------------------------------------------------
    # Reordering
    # -------------------------------------------------------------------------

    def swap(self, first: int, second: int) -> None:
        """Exchange two slot positions.

        Raises:
            IndexOutOfRangeError: If either position is outside the sequence.
        """
        self._check_index(first)
        self._check_index(second)
        if first == second:
            return

        staged = self._slots.copy()
        displaced = (staged.get(first), staged.get(second))
        staged.swap(first, second)
        change = StockChange(old_values=displaced, new_values=displaced[::-1])
        self._commit(staged, change, "swap")

    # -------------------------------------------------------------------------
    # Change notification
    # -------------------------------------------------------------------------

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """Call ``listener`` after every call that changes stock.

        Returns:
            A callable that removes the listener again.
        """
        self._listeners.append(listener)
        return lambda: self.unsubscribe(listener)

    def unsubscribe(self, listener: ChangeListener) -> None:
        """Stop notifying ``listener``; unknown listeners are ignored."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    # -------------------------------------------------------------------------
    # Container protocol
    # -------------------------------------------------------------------------

    def __getitem__(self, index: int) -> Entry[T]:
        self._check_index(index)
        return self._slots.get(index)

    def __iter__(self) -> Iterator[Entry[T]]:
        version = self._version
        index = 0
        while True:
            if self._version != version:
                msg = "Engine was modified during iteration"
                raise CollectionModifiedError(msg)
            if index >= len(self._slots):
                return
            yield self._slots.get(index)
            index += 1

    def __len__(self) -> int:
        return len(self._slots)

    def __contains__(self, entry: object) -> bool:
        return any(slot == entry for slot in self._snapshot())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, QuantityEngine):
            return NotImplemented
        if other is self:
            return True
        return (
            self._stack_size == other._stack_size
            and self._snapshot() == other._snapshot()
        )

    def __hash__(self) -> int:
        # Items may be unhashable; hash only the shape compared by __eq__.
        return hash((self._stack_size, len(self._slots)))

    def __repr__(self) -> str:
        name = type(self).__name__
        if not len(self._slots):
            return f"Empty {name}"
        return f"{name} with {len(self._slots)} stacks of items"

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _commit(
        self, staged: SlotSequence[T], change: StockChange[T], operation: str
    ) -> None:
        """Make ``staged`` live and notify, if anything changed."""
        if not change:
            return
        self._slots = staged
        self._version += 1
        logger.debug(
            "%s committed: %d old value(s), %d new value(s)",
            operation,
            len(change.old_values),
            len(change.new_values),
        )
        for listener in list(self._listeners):
            listener(change)

    def _try_add_into(self, staged: SlotSequence[T], item: T, quantity: int) -> int:
        room = self._stack_size - _quantity_in(staged, item)
        added = max(0, min(quantity, room))
        if added:
            self._policy.apply_add(staged, item, added, self._stack_size)
        return added

    def _try_remove_from(
        self, staged: SlotSequence[T], item: T, quantity: int
    ) -> int:
        removed = min(quantity, _quantity_in(staged, item))
        if removed:
            self._policy.apply_remove(staged, item, removed, self._stack_size)
        return removed

    def _clear_slots(
        self, slot_predicate: Callable[[Entry[T]], bool], operation: str
    ) -> None:
        staged = self._slots.copy()
        removed = [
            staged.remove_at(index)
            for index in reversed(staged.all_indexes_where(slot_predicate))
        ]
        removed.reverse()
        self._commit(staged, StockChange(old_values=tuple(removed)), operation)

    def _search(
        self, slot_predicate: Callable[[Entry[T]], bool]
    ) -> StockSearchResult[T]:
        matches: list[IndexedEntry[T]] = []
        for index in self._slots.all_indexes_where(slot_predicate):
            slot = self._slots.get(index)
            matches.append(IndexedEntry(slot.item, slot.quantity, index))
        return StockSearchResult(tuple(matches))

    def _matching_slot_items(self, predicate: Callable[[T], bool]) -> list[T]:
        """Item of each matching slot, one per slot, in sequence order."""
        return [
            self._slots.get(index).item
            for index in self._slots.all_indexes_where(_on_item(predicate))
        ]

    def _distinct_items(self, predicate: Callable[[T], bool]) -> list[T]:
        """Distinct matching items in order of first appearance."""
        distinct: list[T] = []
        for item in self._matching_slot_items(predicate):
            if not any(seen == item for seen in distinct):
                distinct.append(item)
        return distinct

    def _snapshot(self) -> list[Entry[T]]:
        return [self._slots.get(index) for index in range(len(self._slots))]

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._slots):
            raise IndexOutOfRangeError(index, len(self._slots))


# =============================================================================
# HELPERS
# =============================================================================


def _quantity_in(slots: SlotSequence[Any], item: object) -> int:
    return sum(
        slots.get(index).quantity for index in slots.all_indexes_where(holding(item))
    )


def _on_item(predicate: ItemPredicate) -> Callable[[Entry[Any]], bool]:
    return lambda slot: bool(predicate(slot.item))


def _require_predicate(predicate: object) -> None:
    if predicate is None or not callable(predicate):
        msg = f"Predicate must be callable, got {predicate!r}"
        raise InvalidArgumentError(msg)


def _require_quantity(quantity: int) -> None:
    if quantity <= 0:
        msg = f"Quantity must be greater than zero, got {quantity}"
        raise InvalidArgumentError(msg)


def _require_stack_size(stack_size: int) -> None:
    if stack_size <= 0:
        msg = f"Stack size must be greater than zero, got {stack_size}"
        raise InvalidArgumentError(msg)


def _coerce_entry(raw: Entry[Any] | tuple[Any, int]) -> Entry[Any]:
    if isinstance(raw, Entry):
        item, quantity = raw.item, raw.quantity
    else:
        item, quantity = raw
    _require_quantity(quantity)
    return Entry(item, quantity)

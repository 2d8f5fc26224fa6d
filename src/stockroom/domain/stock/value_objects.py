"""Value objects for the Stock bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")

# =============================================================================
# ENTRIES
# =============================================================================


@dataclass(frozen=True)
class Entry(Generic[T]):
    """One slot: an item and the quantity held in it."""

    item: T
    quantity: int

    def with_quantity(self, quantity: int) -> Entry[T]:
        """Copy of this entry holding a different quantity."""
        return Entry(self.item, quantity)

    def __str__(self) -> str:
        return f"{self.item} x{self.quantity}"


@dataclass(frozen=True)
class IndexedEntry(Entry[T]):
    """A slot together with its position at search time.

    Positions go stale after any structural mutation of the engine.
    """

    index: int

    def __str__(self) -> str:
        return f"{self.index}. {self.item} x{self.quantity}"


@dataclass(frozen=True)
class GroupedEntry(Entry[T]):
    """All matches of one item collapsed into a single total."""

    indexes: tuple[int, ...]


# =============================================================================
# RESULTS
# =============================================================================


@dataclass(frozen=True)
class TryAddResult:
    """Outcome of a lenient add."""

    added: int
    not_added: int

    @property
    def total(self) -> int:
        """Quantity originally requested."""
        return self.added + self.not_added

    def __str__(self) -> str:
        if self.added == 0:
            return f"None of the {self.total} items could be added"
        if self.not_added == 0:
            return f"All of the {self.total} items could be added"
        return f"{self.added} items out of {self.total} were added"


@dataclass(frozen=True)
class TryRemoveResult:
    """Outcome of a lenient remove."""

    removed: int
    not_removed: int

    @property
    def total(self) -> int:
        """Quantity originally requested."""
        return self.removed + self.not_removed

    def __str__(self) -> str:
        if self.removed == 0:
            return f"All {self.not_removed} items could not be removed"
        return f"{self.removed} items out of {self.total} were removed"


# =============================================================================
# CHANGE NOTIFICATION
# =============================================================================


@dataclass(frozen=True)
class StockChange(Generic[T]):
    """Coalesced deltas produced by one engine call.

    ``old_values`` holds quantities that left the engine (removed slots or
    decreases), ``new_values`` quantities that entered it. Both carry the
    delta, not the remaining quantity.
    """

    old_values: tuple[Entry[T], ...] = ()
    new_values: tuple[Entry[T], ...] = ()

    def __bool__(self) -> bool:
        return bool(self.old_values or self.new_values)

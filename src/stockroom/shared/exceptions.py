"""Typed exception hierarchy for Stockroom."""

from __future__ import annotations

# =============================================================================
# BASE
# =============================================================================


class StockroomError(Exception):
    """Base exception for all Stockroom errors."""


# =============================================================================
# ARGUMENTS
# =============================================================================


class InvalidArgumentError(StockroomError, ValueError):
    """A quantity, stack size, or predicate argument is invalid."""


class IndexOutOfRangeError(StockroomError, IndexError):
    """A slot position lies outside the slot sequence."""

    def __init__(self, index: int, size: int) -> None:
        self.index = index
        self.size = size
        super().__init__(f"Index {index} is out of range for {size} slots")


# =============================================================================
# STOCK
# =============================================================================


class StackFullError(StockroomError):
    """Adding would push an item above the stack size."""

    def __init__(self, stack_size: int, quantity: int | None = None) -> None:
        self.stack_size = stack_size
        self.quantity = quantity
        if quantity is None:
            msg = f"Cannot add item: maximum stack size of {stack_size} is reached"
        else:
            msg = (
                f"Cannot add {quantity} items: stack would exceed the maximum "
                f"of {stack_size}"
            )
        super().__init__(msg)


class NotInStockError(StockroomError):
    """A strict removal targets an item that has no slot."""

    def __init__(self, item: object) -> None:
        self.item = item
        super().__init__(f"Cannot remove {item!r}: it is not in stock")


class InsufficientStockError(StockroomError):
    """A strict removal asks for more than is held."""

    def __init__(self, item: object, requested: int, available: int) -> None:
        self.item = item
        self.requested = requested
        self.available = available
        super().__init__(
            f"Cannot remove {requested} of {item!r}: only {available} in stock"
        )


class NoMatchError(StockroomError):
    """A strict predicate-based operation matched no slot."""


# =============================================================================
# ITERATION
# =============================================================================


class CollectionModifiedError(StockroomError, RuntimeError):
    """The engine was mutated while being iterated."""


# =============================================================================
# CONFIGURATION
# =============================================================================


class ConfigurationError(StockroomError):
    """Invalid or missing configuration."""

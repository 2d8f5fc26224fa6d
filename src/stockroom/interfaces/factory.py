"""Factories for building engines from policy names and configuration."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TypeVar

from stockroom.domain.stock.engine import QuantityEngine
from stockroom.domain.stock.policies import (
    AggregatePolicy,
    AllocationPolicy,
    OverflowPolicy,
)
from stockroom.domain.stock.value_objects import Entry
from stockroom.interfaces.config import StockroomConfig
from stockroom.shared.constants import DEFAULT_STACK_SIZE
from stockroom.shared.exceptions import ConfigurationError
from stockroom.shared.types import PolicyKind

T = TypeVar("T")


def create_policy(kind: PolicyKind | str) -> AllocationPolicy:
    """Create an allocation policy from its kind or name.

    Supported names:
        - ``aggregate`` or ``table``: one slot per item
        - ``overflow`` or ``list``: as many capped slots as needed

    Raises:
        ConfigurationError: If the name is unknown.
    """
    try:
        parsed = kind if isinstance(kind, PolicyKind) else PolicyKind.parse(kind)
    except ValueError:
        msg = f"Unknown policy '{kind}'. Use aggregate, overflow, table, or list"
        raise ConfigurationError(msg) from None

    if parsed is PolicyKind.AGGREGATE:
        return AggregatePolicy()
    return OverflowPolicy()


def create_engine(
    config: StockroomConfig | None = None,
    entries: Iterable[Entry[T] | tuple[T, int]] = (),
) -> QuantityEngine[T]:
    """Create an engine with the configured policy and stack size.

    Args:
        config: Engine defaults. Defaults to ``StockroomConfig()``.
        entries: Initial stock.
    """
    if config is None:
        config = StockroomConfig()
    return QuantityEngine(create_policy(config.policy), config.stack_size, entries)


def stock_table(
    entries: Iterable[Entry[T] | tuple[T, int]] = (),
    stack_size: int = DEFAULT_STACK_SIZE,
) -> QuantityEngine[T]:
    """Engine keeping one slot per item; duplicate entries are merged."""
    return QuantityEngine(AggregatePolicy(), stack_size, entries)


def stock_list(
    entries: Iterable[Entry[T] | tuple[T, int]] = (),
    stack_size: int = DEFAULT_STACK_SIZE,
) -> QuantityEngine[T]:
    """Engine spreading items over as many capped slots as needed."""
    return QuantityEngine(OverflowPolicy(), stack_size, entries)

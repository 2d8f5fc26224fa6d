"""Fixtures for Stock domain tests."""

from __future__ import annotations

import pytest

from stockroom.domain.stock.engine import QuantityEngine
from stockroom.domain.stock.policies import AggregatePolicy, OverflowPolicy
from stockroom.domain.stock.sequences import ListSlotSequence
from stockroom.domain.stock.value_objects import Entry, StockChange


@pytest.fixture
def table() -> QuantityEngine[str]:
    return QuantityEngine(AggregatePolicy(), stack_size=10)


@pytest.fixture
def overflow() -> QuantityEngine[str]:
    return QuantityEngine(OverflowPolicy(), stack_size=10)


@pytest.fixture
def slots() -> ListSlotSequence[str]:
    return ListSlotSequence.of(
        [Entry("apple", 4), Entry("pear", 10), Entry("apple", 7)]
    )


@pytest.fixture
def changes() -> list[StockChange[str]]:
    """Collects published changes; subscribe with ``changes.append``."""
    return []

"""Tests for engine and policy factories."""

from __future__ import annotations

import pytest

from stockroom.domain.stock.policies import AggregatePolicy, OverflowPolicy
from stockroom.domain.stock.value_objects import Entry
from stockroom.interfaces.config import StockroomConfig
from stockroom.interfaces.factory import (
    create_engine,
    create_policy,
    stock_list,
    stock_table,
)
from stockroom.shared.exceptions import ConfigurationError
from stockroom.shared.types import PolicyKind


class TestCreatePolicy:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("aggregate", AggregatePolicy),
            ("table", AggregatePolicy),
            ("overflow", OverflowPolicy),
            ("list", OverflowPolicy),
            (PolicyKind.OVERFLOW, OverflowPolicy),
        ],
    )
    def test_known_names(self, name: str, expected: type) -> None:
        assert isinstance(create_policy(name), expected)

    def test_unknown_name_raises(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown policy 'heap'"):
            create_policy("heap")


class TestCreateEngine:
    def test_uses_default_config(self) -> None:
        engine = create_engine()

        assert engine.stack_size == 255
        assert isinstance(engine.policy, AggregatePolicy)

    def test_uses_supplied_config(self) -> None:
        config = StockroomConfig(stack_size=10, policy=PolicyKind.OVERFLOW)

        engine = create_engine(config, [("apple", 25)])

        assert [slot.quantity for slot in engine] == [10, 10, 5]


class TestShortcuts:
    def test_stock_table_merges_duplicates(self) -> None:
        engine = stock_table([("apple", 2), ("apple", 3)], stack_size=10)

        assert list(engine) == [Entry("apple", 5)]

    def test_stock_list_splits_entries(self) -> None:
        engine = stock_list([("apple", 12)], stack_size=10)

        assert list(engine) == [Entry("apple", 10), Entry("apple", 2)]

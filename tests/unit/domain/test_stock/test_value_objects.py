"""Tests for Stock value objects."""

from __future__ import annotations

import dataclasses

import pytest

from stockroom.domain.stock.value_objects import (
    Entry,
    GroupedEntry,
    IndexedEntry,
    StockChange,
    TryAddResult,
    TryRemoveResult,
)

# =============================================================================
# Entry
# =============================================================================


def test_entry_equality_is_by_value() -> None:
    assert Entry("apple", 3) == Entry("apple", 3)
    assert Entry("apple", 3) != Entry("apple", 4)
    assert Entry(None, 1) == Entry(None, 1)


def test_entry_is_frozen() -> None:
    entry = Entry("apple", 3)
    with pytest.raises(dataclasses.FrozenInstanceError):
        entry.quantity = 5  # type: ignore[misc]


def test_entry_with_quantity_returns_copy() -> None:
    entry = Entry("apple", 3)

    updated = entry.with_quantity(8)

    assert updated == Entry("apple", 8)
    assert entry.quantity == 3


def test_entry_str() -> None:
    assert str(Entry("apple", 3)) == "apple x3"
    assert str(Entry(None, 2)) == "None x2"


def test_indexed_entry_str_includes_position() -> None:
    assert str(IndexedEntry("apple", 3, 4)) == "4. apple x3"


def test_indexed_entry_differs_from_plain_entry() -> None:
    assert IndexedEntry("apple", 3, 0) != Entry("apple", 3)


def test_grouped_entry_keeps_indexes() -> None:
    grouped = GroupedEntry("apple", 11, (0, 2))

    assert grouped.quantity == 11
    assert grouped.indexes == (0, 2)


# =============================================================================
# Results
# =============================================================================


def test_try_add_result_total() -> None:
    assert TryAddResult(added=3, not_added=4).total == 7


@pytest.mark.parametrize(
    ("result", "expected"),
    [
        (TryAddResult(0, 5), "None of the 5 items could be added"),
        (TryAddResult(5, 0), "All of the 5 items could be added"),
        (TryAddResult(2, 3), "2 items out of 5 were added"),
    ],
)
def test_try_add_result_str(result: TryAddResult, expected: str) -> None:
    assert str(result) == expected


def test_try_remove_result_total() -> None:
    assert TryRemoveResult(removed=7, not_removed=93).total == 100


@pytest.mark.parametrize(
    ("result", "expected"),
    [
        (TryRemoveResult(0, 5), "All 5 items could not be removed"),
        (TryRemoveResult(7, 93), "7 items out of 100 were removed"),
        (TryRemoveResult(5, 0), "5 items out of 5 were removed"),
    ],
)
def test_try_remove_result_str(result: TryRemoveResult, expected: str) -> None:
    assert str(result) == expected


# =============================================================================
# StockChange
# =============================================================================


def test_empty_stock_change_is_falsy() -> None:
    assert not StockChange()


def test_stock_change_with_values_is_truthy() -> None:
    assert StockChange(old_values=(Entry("apple", 1),))
    assert StockChange(new_values=(Entry("apple", 1),))

"""Fixtures for shared kernel tests."""

from __future__ import annotations

import pytest

from stockroom.shared.exceptions import InsufficientStockError, StackFullError


@pytest.fixture
def stack_full_error() -> StackFullError:
    return StackFullError(stack_size=10, quantity=6)


@pytest.fixture
def insufficient_stock_error() -> InsufficientStockError:
    return InsufficientStockError(item="apple", requested=12, available=7)

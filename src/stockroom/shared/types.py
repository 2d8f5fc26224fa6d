"""Domain-specific types shared across Stockroom."""

from __future__ import annotations

from collections.abc import Callable
from enum import StrEnum
from typing import Any

# =============================================================================
# ALIASES
# =============================================================================

ItemPredicate = Callable[[Any], bool]
"""Selects slots by their item."""

# =============================================================================
# ENUMS
# =============================================================================


class PolicyKind(StrEnum):
    """How an engine distributes quantity across slots."""

    AGGREGATE = "aggregate"
    OVERFLOW = "overflow"

    @classmethod
    def parse(cls, raw: str) -> PolicyKind:
        """Parse a policy name, accepting ``table`` and ``list`` aliases.

        Raises:
            ValueError: If the name is unknown.
        """
        name = raw.strip().lower()
        return cls(_POLICY_ALIASES.get(name, name))


_POLICY_ALIASES = {
    "table": PolicyKind.AGGREGATE.value,
    "list": PolicyKind.OVERFLOW.value,
}

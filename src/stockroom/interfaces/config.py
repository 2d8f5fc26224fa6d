"""Configuration assembly from environment variables."""

from __future__ import annotations

import os

from dataclasses import dataclass

from stockroom.shared.constants import (
    DEFAULT_POLICY,
    DEFAULT_STACK_SIZE,
    ENV_POLICY,
    ENV_STACK_SIZE,
)
from stockroom.shared.exceptions import ConfigurationError
from stockroom.shared.types import PolicyKind


def _parse_int(name: str, raw: str) -> int:
    """Parse an integer env var or raise with a clear message."""
    try:
        return int(raw)
    except ValueError:
        msg = f"Invalid integer for {name}: {raw!r}"
        raise ConfigurationError(msg) from None


def parse_stack_size(name: str, raw: object) -> int:
    """Validate a configured stack size.

    Raises:
        ConfigurationError: If the value is not a positive integer.
    """
    if isinstance(raw, bool):
        msg = f"Invalid integer for {name}: {raw!r}"
        raise ConfigurationError(msg)
    value = _parse_int(name, raw) if isinstance(raw, str) else raw
    if not isinstance(value, int):
        msg = f"Invalid integer for {name}: {raw!r}"
        raise ConfigurationError(msg)
    if value <= 0:
        msg = f"{name} must be greater than zero, got {value}"
        raise ConfigurationError(msg)
    return value


def parse_policy(name: str, raw: object) -> PolicyKind:
    """Convert a policy name to ``PolicyKind`` or raise."""
    try:
        return PolicyKind.parse(str(raw))
    except ValueError:
        valid = ", ".join(kind.value for kind in PolicyKind)
        msg = f"Invalid {name} {raw!r} (valid: {valid}, table, list)"
        raise ConfigurationError(msg) from None


@dataclass(frozen=True)
class StockroomConfig:
    """Typed defaults for building engines."""

    stack_size: int = DEFAULT_STACK_SIZE
    policy: PolicyKind = PolicyKind(DEFAULT_POLICY)

    @classmethod
    def from_env(cls) -> StockroomConfig:
        """Build config from environment variables.

        Optional (with defaults):
            STOCKROOM_STACK_SIZE, STOCKROOM_POLICY
        """
        return cls(
            stack_size=parse_stack_size(
                ENV_STACK_SIZE,
                os.environ.get(ENV_STACK_SIZE, str(DEFAULT_STACK_SIZE)),
            ),
            policy=parse_policy(
                ENV_POLICY,
                os.environ.get(ENV_POLICY, DEFAULT_POLICY),
            ),
        )

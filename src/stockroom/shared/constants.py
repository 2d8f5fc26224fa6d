"""Centralized defaults for Stockroom. Overridable via configuration."""

from __future__ import annotations

# =============================================================================
# STACKS
# =============================================================================

DEFAULT_STACK_SIZE = 255
DEFAULT_POLICY = "aggregate"

# =============================================================================
# ENVIRONMENT
# =============================================================================

ENV_STACK_SIZE = "STOCKROOM_STACK_SIZE"
ENV_POLICY = "STOCKROOM_POLICY"

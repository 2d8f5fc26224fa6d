"""TOML-based configuration loader.

Reads ``[tool.stockroom]`` from ``pyproject.toml`` and produces a typed
``StockroomConfig``.  Missing file or missing section → all defaults apply.
"""

from __future__ import annotations

import logging
import tomllib

from pathlib import Path
from typing import Any

from stockroom.interfaces.config import (
    StockroomConfig,
    parse_policy,
    parse_stack_size,
)
from stockroom.shared.constants import DEFAULT_POLICY, DEFAULT_STACK_SIZE
from stockroom.shared.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# ── defaults ────────────────────────────────────────────────────────────
_DEFAULTS: dict[str, Any] = {
    "stack_size": DEFAULT_STACK_SIZE,
    "policy": DEFAULT_POLICY,
}

_ALL_KNOWN_KEYS = set(_DEFAULTS)


def load_stockroom_config(project_root: Path | None = None) -> StockroomConfig:
    """Load Stockroom configuration from ``pyproject.toml``.

    Merge order (later wins): defaults → ``[tool.stockroom]``.

    Args:
        project_root: Directory containing ``pyproject.toml``.
            Defaults to ``Path.cwd()``.

    Returns:
        A frozen ``StockroomConfig`` dataclass.

    Raises:
        ConfigurationError: On TOML parse errors or invalid values.
    """
    if project_root is None:
        project_root = Path.cwd()

    merged: dict[str, Any] = dict(_DEFAULTS)

    section = _read_tool_section(project_root / "pyproject.toml")
    if section is not None:
        _warn_unknown_keys(section)
        for key in _ALL_KNOWN_KEYS & section.keys():
            merged[key] = section[key]

    return StockroomConfig(
        stack_size=parse_stack_size("stack_size", merged["stack_size"]),
        policy=parse_policy("policy", merged["policy"]),
    )


# ── internal helpers ────────────────────────────────────────────────────


def _read_tool_section(toml_path: Path) -> dict[str, Any] | None:
    """Return ``[tool.stockroom]`` from *toml_path*, or ``None`` if absent.

    Raises:
        ConfigurationError: If the file is not valid TOML, or ``tool`` or
            ``tool.stockroom`` is present but is not a table.
    """
    if not toml_path.is_file():
        return None
    try:
        document = tomllib.loads(toml_path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        msg = f"Failed to parse {toml_path}: {exc}"
        raise ConfigurationError(msg) from exc

    section: Any = document
    path: list[str] = []
    for key in ("tool", "stockroom"):
        path.append(key)
        section = section.get(key)
        if section is None:
            return None
        if not isinstance(section, dict):
            dotted = ".".join(path)
            kind = type(section).__name__
            msg = f"[{dotted}] in {toml_path} must be a table, got {kind}"
            raise ConfigurationError(msg)
    return section


def _warn_unknown_keys(section: dict[str, Any]) -> None:
    """Log a warning for any keys not in the known set."""
    for key in section:
        if key not in _ALL_KNOWN_KEYS:
            logger.warning("Unknown key in [tool.stockroom]: %r", key)

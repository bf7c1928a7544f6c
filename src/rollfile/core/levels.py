"""Logging level helpers."""

from __future__ import annotations

import logging

from .errors import ConfigurationError

__all__ = ["get_level_by_name", "ensure_level"]


def get_level_by_name(name: str) -> int:
    """Resolve a logging level from a friendly name such as ``"warning"``."""

    stripped = name.strip().upper()
    if stripped.isdigit():
        return int(stripped)
    resolved = logging.getLevelName(stripped)
    if isinstance(resolved, int):
        return resolved
    raise ConfigurationError(f"Unknown logging level: {name!r}")


def ensure_level(value: int | str) -> int:
    """Normalize user supplied level values."""

    if isinstance(value, int):
        return value
    return get_level_by_name(value)

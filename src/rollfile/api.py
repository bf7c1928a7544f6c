"""Public API surface for rollfile."""

from __future__ import annotations

import logging
from typing import Any, Dict

from .config.loader import load_configuration
from .core.manager import GLOBAL_MANAGER

_CONFIGURED = False


def configure(overrides: Dict[str, Any] | None = None) -> None:
    """Configure rollfile using the provided overrides."""

    global _CONFIGURED
    config = load_configuration(overrides or {})
    GLOBAL_MANAGER.configure(config)
    _CONFIGURED = True


def _ensure_configured() -> None:
    if not _CONFIGURED:
        configure({})


def get_logger(name: str) -> logging.Logger:
    """Return a logger whose records reach the rolling file sink."""

    _ensure_configured()
    return GLOBAL_MANAGER.get_logger(name)


def shutdown() -> None:
    """Dispose the rolling file sink and detach it from the root logger."""

    global _CONFIGURED
    GLOBAL_MANAGER.shutdown()
    _CONFIGURED = False

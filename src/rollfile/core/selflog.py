"""Process-wide diagnostic channel for non-fatal internal errors.

Everything under the ``rollfile`` logger namespace is routed here. The
namespace never propagates to the root logger, so internal diagnostics can
not loop back into a rolling file sink attached there. Output is discarded
until :func:`enable` attaches a console handler.
"""

from __future__ import annotations

import logging
from typing import TextIO

from ..handlers.console import ConsoleHandlerConfig, build_console_handler

__all__ = ["SELFLOG_NAME", "get_selflog", "enable", "disable", "report"]

SELFLOG_NAME = "rollfile"

_selflog = logging.getLogger(SELFLOG_NAME)
_selflog.propagate = False
_selflog.addHandler(logging.NullHandler())
_active_handler: logging.Handler | None = None


def get_selflog() -> logging.Logger:
    return _selflog


def enable(stream: str | TextIO = "stderr", level: int = logging.WARNING) -> logging.Handler:
    """Send diagnostics to ``stream`` at ``level`` and above."""

    global _active_handler
    disable()
    handler = build_console_handler(ConsoleHandlerConfig(stream=stream, level=level))
    _selflog.addHandler(handler)
    if _selflog.level == logging.NOTSET or _selflog.level > level:
        _selflog.setLevel(level)
    _active_handler = handler
    return handler


def disable() -> None:
    global _active_handler
    if _active_handler is None:
        return
    _selflog.removeHandler(_active_handler)
    _active_handler.close()
    _active_handler = None


def report(message: str, *args: object, exc: BaseException | None = None) -> None:
    """Write an error to the diagnostic channel. Never raises."""

    try:
        if exc is not None:
            _selflog.error(message, *args, exc_info=(type(exc), exc, exc.__traceback__))
        else:
            _selflog.error(message, *args)
    except Exception:  # pragma: no cover - best effort only
        pass

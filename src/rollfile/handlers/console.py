"""Console handler helpers for the diagnostic channel."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from typing import Any, TextIO

__all__ = ["ConsoleHandlerConfig", "build_console_handler"]

_SELFLOG_FMT = "%(asctime)s rollfile[%(threadName)s] %(levelname)s %(message)s"


@dataclass(slots=True)
class ConsoleHandlerConfig:
    """Configuration for console handlers."""

    stream: str | TextIO = "stderr"
    level: int = logging.WARNING
    fmt: str = _SELFLOG_FMT


def build_console_handler(config: ConsoleHandlerConfig | None = None) -> logging.Handler:
    """Construct a :class:`logging.StreamHandler` based on ``config``."""

    cfg = config or ConsoleHandlerConfig()
    stream: Any
    if cfg.stream == "stdout":
        stream = sys.stdout
    elif cfg.stream == "stderr":
        stream = sys.stderr
    elif isinstance(cfg.stream, str):
        stream = None
    else:
        stream = cfg.stream
    handler = logging.StreamHandler(stream=stream)
    handler.setLevel(cfg.level)
    handler.setFormatter(logging.Formatter(cfg.fmt))
    return handler

"""JSON Lines formatter."""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict, Iterable, Mapping, MutableMapping

__all__ = ["JSONLinesFormatter", "extra_fields"]

_STANDARD_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "asctime",
        "message",
        "tzoffset",
    }
)


def extra_fields(record: logging.LogRecord, drop: Iterable[str] = ()) -> Dict[str, Any]:
    """Return the attributes a caller attached to ``record`` through ``extra``."""

    dropped = set(drop)
    data: Mapping[str, Any] = record.__dict__
    return {
        key: value
        for key, value in data.items()
        if key not in _STANDARD_ATTRS and key not in dropped and not key.startswith("_")
    }


class JSONLinesFormatter(logging.Formatter):
    """Render each record as one compact JSON object."""

    def __init__(
        self,
        *,
        whitelist: Iterable[str] | None = None,
        drop_fields: Iterable[str] | None = None,
        datefmt: str | None = "%Y-%m-%dT%H:%M:%S%z",
        utc: bool = True,
    ) -> None:
        super().__init__(datefmt=datefmt)
        self.whitelist = list(whitelist or [])
        self.drop_fields = set(drop_fields or [])
        if utc:
            self.converter = time.gmtime

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: MutableMapping[str, Any] = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }

        if self.whitelist:
            data = record.__dict__
            extra = {key: data[key] for key in self.whitelist if key in data}
        else:
            extra = extra_fields(record, self.drop_fields)
        if extra:
            payload["extra"] = extra

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack_info"] = self.formatStack(record.stack_info)

        return json.dumps(payload, ensure_ascii=False, separators=(",", ":"), default=str)

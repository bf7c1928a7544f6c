"""Human readable text formatter."""

from __future__ import annotations

import logging
import time

from .jsonl import extra_fields

__all__ = ["DEFAULT_OUTPUT_TEMPLATE", "StructuredTextFormatter"]

DEFAULT_OUTPUT_TEMPLATE = "%(asctime)s.%(msecs)03d %(tzoffset)s [%(levelname)s] %(message)s"


class StructuredTextFormatter(logging.Formatter):
    """Formatter with a timestamp offset and optional ``extra`` key/values.

    The default template renders ``2024-01-02 03:04:05.678 +0000 [INFO] message``
    followed by the exception text, if any.
    """

    def __init__(
        self,
        *,
        show_extras: bool = False,
        fmt: str | None = None,
        datefmt: str | None = "%Y-%m-%d %H:%M:%S",
        utc: bool = False,
    ) -> None:
        super().__init__(fmt or DEFAULT_OUTPUT_TEMPLATE, datefmt=datefmt)
        self.show_extras = show_extras
        if utc:
            self.converter = time.gmtime

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        record.tzoffset = time.strftime("%z", self.converter(record.created))
        text = super().format(record)
        if self.show_extras:
            extras = extra_fields(record)
            if extras:
                text += " | " + " ".join(f"{key}={value}" for key, value in sorted(extras.items()))
        return text

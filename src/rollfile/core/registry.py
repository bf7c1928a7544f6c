"""Registry of formatter builders and the rolling handler builder."""

from __future__ import annotations

import logging
from typing import Callable, Dict

from ..config.schema import FormatterSpec, RollfileConfig
from ..formatters.jsonl import JSONLinesFormatter
from ..formatters.text import StructuredTextFormatter
from ..handlers.file_rotating import FileHandlerConfig, RollingFileHandler, build_file_handler
from .errors import ConfigurationError
from .levels import ensure_level

__all__ = ["FORMATTER_BUILDERS", "build_formatter", "build_handler"]

FormatterBuilder = Callable[[FormatterSpec], logging.Formatter]


def _build_text(spec: FormatterSpec) -> logging.Formatter:
    return StructuredTextFormatter(**spec.options)


def _build_jsonl(spec: FormatterSpec) -> logging.Formatter:
    return JSONLinesFormatter(**spec.options)


FORMATTER_BUILDERS: Dict[str, FormatterBuilder] = {
    "text": _build_text,
    "jsonl": _build_jsonl,
}


def build_formatter(spec: FormatterSpec) -> logging.Formatter:
    builder = FORMATTER_BUILDERS.get(spec.kind)
    if builder is None:
        raise ConfigurationError(f"Unknown formatter kind: {spec.kind}")
    try:
        return builder(spec)
    except TypeError as exc:
        raise ConfigurationError(f"Invalid options for formatter '{spec.name}': {exc}") from exc


def build_handler(config: RollfileConfig) -> RollingFileHandler:
    sink = config.sink
    handler_config = FileHandlerConfig(
        path_template=sink.path_template,
        formatter=build_formatter(config.formatter(sink.formatter)),
        file_size_limit_bytes=sink.file_size_limit_bytes,
        retention=config.retention,
        encoding=sink.encoding,
        queue=config.async_config,
        level=ensure_level(sink.level),
    )
    return build_file_handler(handler_config)

"""Configuration validation helpers."""

from __future__ import annotations

from ..config.schema import RollfileConfig
from ..utils.paths import parse_path_template
from .errors import ConfigurationError
from .levels import ensure_level

__all__ = ["ConfigurationError", "validate_configuration"]


def validate_configuration(config: RollfileConfig) -> None:
    """Ensure configuration values are usable before anything is opened."""

    sink = config.sink
    parse_path_template(sink.path_template)

    if sink.file_size_limit_bytes <= 0:
        raise ConfigurationError("sink.file_size_limit_bytes must be positive")

    if sink.formatter not in config.formatters:
        raise ConfigurationError(f"Sink references unknown formatter '{sink.formatter}'")

    try:
        "".encode(sink.encoding)
    except LookupError as exc:
        raise ConfigurationError(f"Unknown encoding '{sink.encoding}'") from exc

    ensure_level(sink.level)
    ensure_level(config.root_level)
    ensure_level(config.selflog.level)

    queue = config.async_config
    if queue.enabled:
        if queue.queue_maxsize <= 0:
            raise ConfigurationError("async.queue_maxsize must be positive")
        if queue.max_retries <= 0:
            raise ConfigurationError("async.max_retries must be positive")
    if queue.retry_interval_s < 0 or queue.poll_interval_s <= 0:
        raise ConfigurationError("async intervals must be positive")

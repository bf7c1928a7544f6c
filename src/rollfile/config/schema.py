"""Configuration schema definition for rollfile."""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

from ..handlers.file_rotating import DEFAULT_FILE_SIZE_LIMIT_BYTES, RetentionPolicy
from ..handlers.queue_async import QueueConfig

DEFAULT_CONFIG: Dict[str, Any] = {
    "sink": {
        "path_template": "logs/app-{Date}.log",
        "file_size_limit_bytes": DEFAULT_FILE_SIZE_LIMIT_BYTES,
        "encoding": "utf-8",
        "formatter": "text.default",
        "level": "NOTSET",
    },
    "retention": {
        "max_days": 7,
    },
    "formatters": {
        "text": {
            "default": {},
        },
        "jsonl": {
            "default": {},
        },
    },
    "async": {
        "enabled": False,
        "queue_maxsize": 1000,
        "max_retries": 3,
        "retry_interval_s": 0.5,
        "poll_interval_s": 0.1,
        "graceful_shutdown_timeout_s": 5.0,
    },
    "logging": {
        "root": {
            "level": "INFO",
        },
        "capture_warnings": True,
    },
    "selflog": {
        "enabled": False,
        "stream": "stderr",
        "level": "WARNING",
    },
}


def default_config() -> Dict[str, Any]:
    """Return a deep copy of the default configuration mapping."""

    return deepcopy(DEFAULT_CONFIG)


@dataclass(slots=True)
class SinkSpec:
    path_template: str
    file_size_limit_bytes: int
    encoding: str
    formatter: str
    level: str | int


@dataclass(slots=True)
class FormatterSpec:
    name: str
    kind: str
    options: Dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class SelflogConfig:
    enabled: bool = False
    stream: str = "stderr"
    level: str | int = "WARNING"


@dataclass(slots=True)
class RollfileConfig:
    sink: SinkSpec
    retention: RetentionPolicy
    formatters: Dict[str, FormatterSpec]
    async_config: QueueConfig
    root_level: str | int
    capture_warnings: bool
    selflog: SelflogConfig
    raw: Dict[str, Any] = field(repr=False)

    def formatter(self, name: str) -> FormatterSpec:
        return self.formatters[name]


def _to_sink(data: Mapping[str, Any]) -> SinkSpec:
    return SinkSpec(
        path_template=str(data.get("path_template", DEFAULT_CONFIG["sink"]["path_template"])),
        file_size_limit_bytes=int(data.get("file_size_limit_bytes", DEFAULT_FILE_SIZE_LIMIT_BYTES)),
        encoding=str(data.get("encoding") or "utf-8"),
        formatter=str(data.get("formatter", "text.default")),
        level=data.get("level", "NOTSET"),
    )


def _to_retention(data: Mapping[str, Any]) -> RetentionPolicy:
    max_days_raw = data.get("max_days")
    if max_days_raw is None or (isinstance(max_days_raw, str) and not max_days_raw.strip()):
        return RetentionPolicy.from_days(None)
    return RetentionPolicy.from_days(float(max_days_raw))


def _to_formatters(data: Mapping[str, Any]) -> Dict[str, FormatterSpec]:
    specs: Dict[str, FormatterSpec] = {}
    for kind, entries in data.items():
        if not isinstance(entries, Mapping):
            continue
        for name, options in entries.items():
            key = f"{kind}.{name}"
            opts = dict(options or {}) if isinstance(options, Mapping) else {}
            specs[key] = FormatterSpec(name=key, kind=kind, options=opts)
    return specs


def _to_async(data: Mapping[str, Any]) -> QueueConfig:
    return QueueConfig(
        enabled=bool(data.get("enabled", False)),
        queue_maxsize=int(data.get("queue_maxsize", 1000)),
        max_retries=int(data.get("max_retries", 3)),
        retry_interval_s=float(data.get("retry_interval_s", 0.5)),
        poll_interval_s=float(data.get("poll_interval_s", 0.1)),
        graceful_shutdown_timeout_s=float(data.get("graceful_shutdown_timeout_s", 5.0)),
    )


def _to_logging(data: Mapping[str, Any]) -> tuple[str | int, bool]:
    root_data = data.get("root", {})
    if not isinstance(root_data, Mapping):
        root_data = {}
    return root_data.get("level", "INFO"), bool(data.get("capture_warnings", True))


def _to_selflog(data: Mapping[str, Any]) -> SelflogConfig:
    return SelflogConfig(
        enabled=bool(data.get("enabled", False)),
        stream=str(data.get("stream", "stderr")),
        level=data.get("level", "WARNING"),
    )


def build_config(data: Mapping[str, Any]) -> RollfileConfig:
    root_level, capture_warnings = _to_logging(data.get("logging", {}))
    raw_copy: Dict[str, Any] = deepcopy({k: v for k, v in data.items()})

    return RollfileConfig(
        sink=_to_sink(data.get("sink", {})),
        retention=_to_retention(data.get("retention", {})),
        formatters=_to_formatters(data.get("formatters", {})),
        async_config=_to_async(data.get("async", {})),
        root_level=root_level,
        capture_warnings=capture_warnings,
        selflog=_to_selflog(data.get("selflog", {})),
        raw=raw_copy,
    )

"""Date, size and level rolling file sink with retention support."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import List

from ..core.errors import ConfigurationError, SinkDisposedError
from ..core.roller import RollingFileDescriptor, TemplatedPathRoller
from ..core.selflog import report
from ..formatters.text import StructuredTextFormatter
from ..utils.paths import level_label
from ..utils.time import Clock, utc_midnight, utcnow
from .file_writer import DEFAULT_ENCODING, FileWriter
from .queue_async import QueueConfig, QueueDispatcher

__all__ = [
    "DEFAULT_FILE_SIZE_LIMIT_BYTES",
    "RetentionPolicy",
    "FileHandlerConfig",
    "RollingFileSink",
    "RollingFileHandler",
    "build_file_handler",
]

DEFAULT_FILE_SIZE_LIMIT_BYTES = 1024 * 1024 * 1024

_LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class RetentionPolicy:
    """Delete rolled files whose date is older than ``max_age``.

    ``max_age=None`` keeps every file.
    """

    max_age: timedelta | None = None

    def __post_init__(self) -> None:
        if self.max_age is not None and self.max_age < timedelta(0):
            raise ConfigurationError(f"max_age must not be negative, got {self.max_age}")

    @classmethod
    def from_days(cls, max_days: float | None) -> "RetentionPolicy":
        if max_days is None or max_days < 0:
            return cls(max_age=None)
        return cls(max_age=timedelta(days=max_days))

    @property
    def enabled(self) -> bool:
        return self.max_age is not None

    def apply(
        self,
        roller: TemplatedPathRoller,
        *,
        now: datetime,
        keep: RollingFileDescriptor | None = None,
    ) -> List[Path]:
        if self.max_age is None:
            return []
        removed: List[Path] = []
        for descriptor in roller.all_files():
            if keep is not None and descriptor.filename == keep.filename:
                continue
            if now - utc_midnight(descriptor.date) <= self.max_age:
                continue
            path = roller.path_for(descriptor)
            try:
                path.unlink(missing_ok=True)
            except OSError as exc:
                report("Error while removing obsolete file %s", path, exc=exc)
                continue
            removed.append(path)
        return removed


@dataclass(slots=True)
class FileHandlerConfig:
    """Aggregate configuration for rolling file handlers."""

    path_template: str | Path
    formatter: logging.Formatter | None = None
    file_size_limit_bytes: int = DEFAULT_FILE_SIZE_LIMIT_BYTES
    retention: RetentionPolicy = field(default_factory=RetentionPolicy)
    encoding: str | None = DEFAULT_ENCODING
    queue: QueueConfig = field(default_factory=QueueConfig)
    level: int = logging.NOTSET

    def __post_init__(self) -> None:
        if self.file_size_limit_bytes <= 0:
            raise ConfigurationError("file_size_limit_bytes must be positive")
        if self.queue.enabled and self.queue.queue_maxsize <= 0:
            raise ConfigurationError("queue_maxsize must be positive when the queue is enabled")


class RollingFileSink:
    """Decide per record whether to keep the active file or roll to the next.

    Rolling happens when the UTC date changes, when the active file grew past
    the size limit, or, for ``{Level}`` templates, when the record's level
    differs from the level of the active file. Retention runs after every
    roll. All decisions and the write itself happen under one lock.
    """

    def __init__(
        self,
        path_template: str | Path,
        formatter: logging.Formatter | None = None,
        *,
        file_size_limit_bytes: int = DEFAULT_FILE_SIZE_LIMIT_BYTES,
        retention: RetentionPolicy | None = None,
        encoding: str | None = DEFAULT_ENCODING,
        queue: QueueConfig | None = None,
        clock: Clock = utcnow,
    ) -> None:
        if file_size_limit_bytes <= 0:
            raise ConfigurationError("file_size_limit_bytes must be positive")
        self._roller = TemplatedPathRoller(path_template, clock=clock)
        self._clock = clock
        self.formatter = formatter or StructuredTextFormatter()
        self.file_size_limit_bytes = file_size_limit_bytes
        self.retention = retention or RetentionPolicy()
        self.encoding = encoding or DEFAULT_ENCODING
        self._lock = threading.Lock()
        self._disposed = False
        self._cancel = threading.Event()
        self._writer: FileWriter | None = None

        latest = self._roller.latest_or_new()
        if latest.filename:
            self._writer = self._new_writer(latest, latest.level)

        self._dispatcher: QueueDispatcher | None = None
        queue_cfg = queue or QueueConfig()
        if queue_cfg.enabled:
            self._dispatcher = QueueDispatcher(config=queue_cfg, consumer=self.write, cancel_event=self._cancel)
            self._dispatcher.start()

    @classmethod
    def from_config(cls, config: FileHandlerConfig, *, clock: Clock = utcnow) -> "RollingFileSink":
        return cls(
            config.path_template,
            config.formatter,
            file_size_limit_bytes=config.file_size_limit_bytes,
            retention=config.retention,
            encoding=config.encoding,
            queue=config.queue,
            clock=clock,
        )

    # ------------------------------------------------------------------
    @property
    def roller(self) -> TemplatedPathRoller:
        return self._roller

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def asynchronous(self) -> bool:
        return self._dispatcher is not None

    @property
    def dispatcher(self) -> QueueDispatcher | None:
        return self._dispatcher

    @property
    def current_descriptor(self) -> RollingFileDescriptor | None:
        with self._lock:
            return self._writer.descriptor if self._writer is not None else None

    # ------------------------------------------------------------------
    def emit(self, record: logging.LogRecord) -> None:
        """Accept one record, queueing it in asynchronous mode."""

        if record is None:
            raise TypeError("record must not be None")
        if self._disposed:
            raise SinkDisposedError("The rolling file sink has been disposed")
        if self._dispatcher is not None:
            self._dispatcher.submit(record)
        else:
            self.write(record)

    def write(self, record: logging.LogRecord) -> None:
        """Roll if needed, then append ``record`` to the active file."""

        with self._lock:
            if self._disposed:
                raise SinkDisposedError("The rolling file sink has been disposed")
            level = level_label(record.levelname)
            if self._writer is None:
                self._writer = self._open_for(level)
            else:
                rolled = False
                date_changed = self._writer.descriptor.date != self._roller.today()
                if self._writer.level_partitioned and self._writer.active_level != level:
                    self._roll(self._writer, date_changed, level)
                    rolled = True
                    date_changed = False
                if self._writer.size_limit_reached or date_changed:
                    self._roll(self._writer, date_changed, level if self._writer.level_partitioned else None)
                    rolled = True
                if rolled:
                    self._apply_retention()

            if self._writer is None:
                return
            self._writer.emit(record)

    def set_formatter(self, formatter: logging.Formatter) -> None:
        """Use ``formatter`` for the active file and every file opened later."""

        with self._lock:
            self.formatter = formatter
            if self._writer is not None:
                self._writer.formatter = formatter

    def dispose(self) -> None:
        with self._lock:
            if self._disposed:
                return
            self._disposed = True
            self._cancel.set()
            writer, self._writer = self._writer, None
            if writer is not None:
                writer.dispose()
        if self._dispatcher is not None:
            self._dispatcher.stop()

    close = dispose

    def __enter__(self) -> "RollingFileSink":
        return self

    def __exit__(self, exc_type, exc: BaseException | None, tb) -> None:  # type: ignore[override]
        self.dispose()

    # ------------------------------------------------------------------
    def _new_writer(self, descriptor: RollingFileDescriptor, level: str | None) -> FileWriter:
        return FileWriter(
            self._roller,
            descriptor,
            formatter=self.formatter,
            file_size_limit_bytes=self.file_size_limit_bytes,
            encoding=self.encoding,
            active_level=level,
        )

    def _open_for(self, level: str) -> FileWriter:
        latest = self._roller.latest_or_new()
        if not latest.filename or (self._roller.level_partitioned and latest.level != level):
            latest = self._roller.next(latest, level)
        return self._new_writer(latest, level)

    def _roll(self, current: FileWriter, date_changed: bool, level: str | None) -> None:
        descriptor = current.descriptor
        if date_changed:
            descriptor = self._roller.reset_sequence(descriptor)
        target = self._roller.next(descriptor, level)
        current.dispose()
        self._writer = None
        self._writer = self._new_writer(target, level)
        _LOGGER.debug("Rolled %s to %s", current.descriptor.filename, self._writer.descriptor.filename)

    def _apply_retention(self) -> None:
        keep = self._writer.descriptor if self._writer is not None else None
        removed = self.retention.apply(self._roller, now=self._clock(), keep=keep)
        for path in removed:
            _LOGGER.debug("Removed obsolete file %s", path)


class RollingFileHandler(logging.Handler):
    """``logging.Handler`` front end for a :class:`RollingFileSink`."""

    def __init__(self, sink: RollingFileSink, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self.sink = sink
        self.formatter = sink.formatter

    def setFormatter(self, fmt: logging.Formatter | None) -> None:  # type: ignore[override]
        super().setFormatter(fmt)
        if fmt is not None:
            self.sink.set_formatter(fmt)

    def emit(self, record: logging.LogRecord) -> None:  # type: ignore[override]
        try:
            self.sink.emit(record)
        except Exception:
            self.handleError(record)

    def close(self) -> None:  # type: ignore[override]
        try:
            self.sink.dispose()
        finally:
            super().close()


def build_file_handler(config: FileHandlerConfig) -> RollingFileHandler:
    """Create a rolling file handler based on ``config``."""

    return RollingFileHandler(RollingFileSink.from_config(config), level=config.level)

"""Append-only writer bound to a single rolled file."""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import TextIO

from ..core.errors import RollingFileOpenError, SinkDisposedError
from ..core.roller import RollingFileDescriptor, TemplatedPathRoller
from ..core.selflog import report
from ..utils.paths import ensure_directory, level_label

__all__ = ["DEFAULT_ENCODING", "MAX_OPEN_ATTEMPTS", "FileWriter"]

DEFAULT_ENCODING = "utf-8"
MAX_OPEN_ATTEMPTS = 32


class FileWriter:
    """Own one open stream for one :class:`RollingFileDescriptor`.

    If the descriptor's file can not be opened, the writer moves on to the
    roller's next descriptor, up to :data:`MAX_OPEN_ATTEMPTS` candidates.
    ``size_limit_reached`` becomes true once the file grows past
    ``file_size_limit_bytes`` and stays true for the life of the writer.
    """

    terminator = "\n"

    def __init__(
        self,
        roller: TemplatedPathRoller,
        descriptor: RollingFileDescriptor,
        *,
        formatter: logging.Formatter,
        file_size_limit_bytes: int,
        encoding: str | None = DEFAULT_ENCODING,
        active_level: str | None = None,
    ) -> None:
        self._roller = roller
        self.formatter = formatter
        self._file_size_limit_bytes = file_size_limit_bytes
        self._encoding = encoding or DEFAULT_ENCODING
        self._lock = threading.Lock()
        self._disposed = False
        self.level_partitioned = roller.level_partitioned
        self.active_level = active_level
        self.size_limit_reached = False
        self.descriptor, self._stream = self._open(descriptor)

    @property
    def path(self) -> Path:
        return self._roller.path_for(self.descriptor)

    @property
    def disposed(self) -> bool:
        return self._disposed

    def _open(self, descriptor: RollingFileDescriptor) -> tuple[RollingFileDescriptor, TextIO]:
        ensure_directory(self._roller.directory)
        candidate = descriptor
        last_error: OSError | None = None
        for _ in range(MAX_OPEN_ATTEMPTS):
            path = self._roller.path_for(candidate)
            try:
                stream = open(path, "a", encoding=self._encoding)
            except OSError as exc:
                report("Error while opening file %s; trying the next file", path, exc=exc)
                last_error = exc
                candidate = self._roller.next(candidate, candidate.level)
                continue
            return candidate, stream
        raise RollingFileOpenError(
            f"Unable to open a log file after {MAX_OPEN_ATTEMPTS} attempts starting at {descriptor.filename}"
        ) from last_error

    def emit(self, record: logging.LogRecord) -> None:
        with self._lock:
            if self._disposed:
                raise SinkDisposedError(f"Cannot write to disposed file {self.descriptor.filename}")
            message = self.formatter.format(record)
            self._stream.write(message + self.terminator)
            self._stream.flush()
            self.active_level = level_label(record.levelname)
            if os.fstat(self._stream.fileno()).st_size > self._file_size_limit_bytes:
                self.size_limit_reached = True

    def dispose(self) -> None:
        with self._lock:
            if self._disposed:
                return
            self._disposed = True
            try:
                self._stream.flush()
            finally:
                self._stream.close()

    def __repr__(self) -> str:
        return f"<FileWriter {self.descriptor.filename!r} disposed={self._disposed}>"

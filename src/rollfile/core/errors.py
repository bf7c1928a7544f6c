"""Exception types raised by rollfile."""

from __future__ import annotations

__all__ = [
    "ConfigurationError",
    "SinkDisposedError",
    "RollingFileOpenError",
    "RetryTimeoutError",
]


class ConfigurationError(ValueError):
    """Raised when configuration validation fails."""


class SinkDisposedError(RuntimeError):
    """Raised when writing to a sink or file writer that has been disposed."""


class RollingFileOpenError(OSError):
    """Raised when no candidate file could be opened for appending."""


class RetryTimeoutError(TimeoutError):
    """Raised when a retry task runs out of attempts or time.

    ``last_exception`` holds the last exception captured while trying, if any.
    """

    def __init__(self, message: str, last_exception: BaseException | None = None) -> None:
        super().__init__(message)
        self.last_exception = last_exception

"""rollfile public API."""

from .api import configure, get_logger, shutdown
from .core.errors import ConfigurationError, RetryTimeoutError, SinkDisposedError
from .core.retry import RetryTask, retry
from .handlers.file_rotating import (
    FileHandlerConfig,
    RetentionPolicy,
    RollingFileHandler,
    RollingFileSink,
    build_file_handler,
)
from .handlers.queue_async import QueueConfig
from .version import __version__

__all__ = [
    "configure",
    "get_logger",
    "shutdown",
    "ConfigurationError",
    "RetryTimeoutError",
    "SinkDisposedError",
    "RetryTask",
    "retry",
    "FileHandlerConfig",
    "RetentionPolicy",
    "RollingFileHandler",
    "RollingFileSink",
    "QueueConfig",
    "build_file_handler",
    "__version__",
]

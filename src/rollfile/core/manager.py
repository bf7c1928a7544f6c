"""Logging manager responsible for runtime configuration and lifecycle."""

from __future__ import annotations

import logging

from ..config.schema import RollfileConfig
from ..handlers.file_rotating import RollingFileHandler
from . import selflog
from .levels import ensure_level
from .registry import build_handler
from .validation import validate_configuration


class LogManager:
    """Attach a rolling file handler to the root logger and tear it down."""

    def __init__(self) -> None:
        self._config: RollfileConfig | None = None
        self._handler: RollingFileHandler | None = None

    @property
    def config(self) -> RollfileConfig | None:
        return self._config

    @property
    def handler(self) -> RollingFileHandler | None:
        return self._handler

    # ------------------------------------------------------------------
    def configure(self, config: RollfileConfig) -> None:
        """Apply the supplied configuration."""

        validate_configuration(config)
        self._teardown()

        if config.selflog.enabled:
            selflog.enable(config.selflog.stream, ensure_level(config.selflog.level))
        else:
            selflog.disable()

        handler = build_handler(config)
        root_logger = logging.getLogger()
        root_logger.setLevel(ensure_level(config.root_level))
        root_logger.addHandler(handler)
        logging.captureWarnings(config.capture_warnings)

        self._handler = handler
        self._config = config

    # ------------------------------------------------------------------
    def shutdown(self) -> None:
        """Detach and dispose the rolling handler."""

        self._teardown()
        self._config = None

    def get_logger(self, name: str) -> logging.Logger:
        return logging.getLogger(name)

    # ------------------------------------------------------------------
    def _teardown(self) -> None:
        handler, self._handler = self._handler, None
        if handler is None:
            return
        logging.getLogger().removeHandler(handler)
        handler.close()


GLOBAL_MANAGER = LogManager()

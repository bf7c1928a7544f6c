from __future__ import annotations

import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterator

import pytest

import rollfile.api as rollfile_api
from rollfile.core import selflog
from rollfile.core.manager import GLOBAL_MANAGER


class ManualClock:
    """UTC clock that only moves when told to."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now += timedelta(**delta)


@pytest.fixture(autouse=True)
def reset_rollfile() -> Iterator[None]:
    yield
    GLOBAL_MANAGER.shutdown()
    rollfile_api._CONFIGURED = False
    selflog.disable()
    root = logging.getLogger()
    root.handlers = []
    root.setLevel(logging.WARNING)
    logging.captureWarnings(False)


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def make_record() -> Callable[..., logging.LogRecord]:
    def _make(message: str, level: int = logging.INFO, name: str = "tests.rollfile") -> logging.LogRecord:
        return logging.LogRecord(name, level, __file__, 0, message, None, None)

    return _make


def wait_until(predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()

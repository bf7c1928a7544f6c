from __future__ import annotations

import io
import logging
import threading
from pathlib import Path

from conftest import wait_until

from rollfile.core import selflog
from rollfile.handlers.file_rotating import RollingFileSink
from rollfile.handlers.queue_async import QueueConfig, QueueDispatcher

_PLAIN = logging.Formatter("%(message)s")


def _line_count(path: Path) -> int:
    if not path.exists():
        return 0
    return len(path.read_text(encoding="utf-8").splitlines())


class _GatedFormatter(logging.Formatter):
    """Blocks on the first record until released."""

    def __init__(self) -> None:
        super().__init__("%(message)s")
        self.entered = threading.Event()
        self.release = threading.Event()

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        if not self.entered.is_set():
            self.entered.set()
            self.release.wait(timeout=5)
        return super().format(record)


def test_async_mode_preserves_submission_order(tmp_path: Path, clock, make_record) -> None:
    sink = RollingFileSink(
        tmp_path / "app-{Date}.log",
        _PLAIN,
        queue=QueueConfig(enabled=True, queue_maxsize=10, poll_interval_s=0.01),
        clock=clock,
    )
    assert sink.asynchronous

    for idx in range(100):
        sink.emit(make_record(f"queued-{idx}"))
    target = tmp_path / "app-20240310.log"
    assert wait_until(lambda: _line_count(target) == 100)
    sink.dispose()

    assert target.read_text(encoding="utf-8").splitlines() == [f"queued-{idx}" for idx in range(100)]


def test_full_queue_blocks_producer(tmp_path: Path, clock, make_record) -> None:
    formatter = _GatedFormatter()
    sink = RollingFileSink(
        tmp_path / "app-{Date}.log",
        formatter,
        queue=QueueConfig(enabled=True, queue_maxsize=1, poll_interval_s=0.01),
        clock=clock,
    )
    sink.emit(make_record("first"))
    assert formatter.entered.wait(timeout=5)
    sink.emit(make_record("second"))

    producer = threading.Thread(target=sink.emit, args=(make_record("third"),))
    producer.start()
    producer.join(timeout=0.2)
    assert producer.is_alive()

    formatter.release.set()
    producer.join(timeout=5)
    assert not producer.is_alive()

    target = tmp_path / "app-20240310.log"
    assert wait_until(lambda: _line_count(target) == 3)
    sink.dispose()
    assert target.read_text(encoding="utf-8").splitlines() == ["first", "second", "third"]


def test_exhausted_consumer_stops_draining(make_record) -> None:
    diagnostics = io.StringIO()
    selflog.enable(diagnostics)
    seen: list[str] = []

    def failing(record: logging.LogRecord) -> None:
        seen.append(record.getMessage())
        raise OSError("disk gone")

    dispatcher = QueueDispatcher(
        config=QueueConfig(enabled=True, queue_maxsize=5, max_retries=2, retry_interval_s=0.0, poll_interval_s=0.01),
        consumer=failing,
    )
    for idx in range(3):
        dispatcher.submit(make_record(f"r{idx}"))
    dispatcher.start()

    assert wait_until(lambda: not dispatcher.alive)
    assert seen == ["r0", "r1"]
    assert dispatcher.queue.qsize() == 1
    output = diagnostics.getvalue()
    assert "attempt 1 failed" in output
    assert "Error occurred in queue consumer thread" in output


def test_dispose_stops_consumer_and_drops_pending(tmp_path: Path, clock, make_record) -> None:
    sink = RollingFileSink(
        tmp_path / "app-{Date}.log",
        _PLAIN,
        queue=QueueConfig(enabled=True, queue_maxsize=10, poll_interval_s=0.01),
        clock=clock,
    )
    dispatcher = sink.dispatcher
    assert dispatcher is not None and dispatcher.alive

    sink.dispose()
    sink.dispose()

    assert dispatcher.cancelled
    assert wait_until(lambda: not dispatcher.alive)

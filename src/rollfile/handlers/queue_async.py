"""Bounded queue with a single background consumer thread."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from queue import Empty, Queue
from typing import Callable

from ..core.errors import SinkDisposedError
from ..core.retry import retry
from ..core.selflog import report

__all__ = ["QueueConfig", "QueueDispatcher"]


@dataclass(slots=True)
class QueueConfig:
    enabled: bool = False
    queue_maxsize: int = 1000
    max_retries: int = 3
    retry_interval_s: float = 0.5
    poll_interval_s: float = 0.1
    graceful_shutdown_timeout_s: float = 5.0


class QueueDispatcher:
    """Decouple producers from a slow consumer.

    ``submit`` blocks while the queue is full. The consumer thread keeps
    draining under a retry task; once ``max_retries`` attempts have failed the
    thread exits and queued records are no longer written.
    """

    def __init__(
        self,
        *,
        config: QueueConfig,
        consumer: Callable[[logging.LogRecord], None],
        cancel_event: threading.Event | None = None,
    ) -> None:
        self.config = config
        self.queue: Queue[logging.LogRecord] = Queue(maxsize=config.queue_maxsize)
        self._consumer = consumer
        self._cancel = cancel_event or threading.Event()
        self._thread = threading.Thread(target=self._process_queue, name="rollfile-consumer", daemon=True)

    @property
    def alive(self) -> bool:
        return self._thread.is_alive()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def start(self) -> None:
        self._thread.start()

    def submit(self, record: logging.LogRecord) -> None:
        self.queue.put(record, block=True)

    def cancel(self) -> None:
        self._cancel.set()

    def stop(self) -> None:
        """Cancel the consumer and wait for an in-flight write to finish."""

        self._cancel.set()
        if self._thread.is_alive() and self._thread is not threading.current_thread():
            self._thread.join(timeout=self.config.graceful_shutdown_timeout_s)

    def _process_queue(self) -> None:
        try:
            (
                retry(self._drain)
                .with_max_try_count(self.config.max_retries)
                .with_try_interval(self.config.retry_interval_s)
                .on_failure(self._report_failure)
                .until_no_exception()
            )
        except Exception as exc:
            report("Error occurred in queue consumer thread %s", self._thread.name, exc=exc)

    def _drain(self) -> None:
        interval = self.config.poll_interval_s
        while not self._cancel.is_set():
            try:
                record = self.queue.get(timeout=interval)
            except Empty:
                continue
            try:
                if self._cancel.is_set():
                    return
                self._consumer(record)
            except SinkDisposedError:
                if self._cancel.is_set():
                    return
                raise
            except Exception as exc:
                report("Error occurred while draining queue in %s", self._thread.name, exc=exc)
                raise
            finally:
                self.queue.task_done()

    def _report_failure(self, result: object, attempts: int) -> None:
        report("Queue consumer attempt %d failed; retrying", attempts)

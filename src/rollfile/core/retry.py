"""Bounded "try until success or give up" executor.

A :class:`RetryTask` is an immutable configuration around a zero-argument
callable. Every ``with_*``/``on_*`` call returns a new task, so a base task
can be shared and specialised safely::

    value = (
        retry(fetch)
        .with_max_try_count(5)
        .with_try_interval(0.2)
        .on_failure(lambda result, attempt: print("attempt", attempt))
        .until(lambda result: result is not None)
    )
"""

from __future__ import annotations

import logging
import math
import sys
import time
from dataclasses import dataclass, replace
from typing import Any, Callable, Generic, Tuple, Type, TypeVar

from .errors import RetryTimeoutError

__all__ = [
    "DEFAULT_MAX_TRY_TIME_S",
    "DEFAULT_MAX_TRY_COUNT",
    "DEFAULT_TRY_INTERVAL_S",
    "RetryTask",
    "retry",
]

T = TypeVar("T")
ResultCallback = Callable[[Any, int], None]

DEFAULT_MAX_TRY_TIME_S = math.inf
DEFAULT_MAX_TRY_COUNT = sys.maxsize
DEFAULT_TRY_INTERVAL_S = 0.5

# never worth another attempt
_FATAL_EXCEPTIONS: Tuple[Type[BaseException], ...] = (MemoryError, SystemError)

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryTask(Generic[T]):
    task: Callable[[], T]
    max_try_time_s: float = DEFAULT_MAX_TRY_TIME_S
    max_try_count: int = DEFAULT_MAX_TRY_COUNT
    try_interval_s: float = DEFAULT_TRY_INTERVAL_S
    success_actions: Tuple[ResultCallback, ...] = ()
    failure_actions: Tuple[ResultCallback, ...] = ()
    timeout_actions: Tuple[ResultCallback, ...] = ()
    sleep_fn: Callable[[float], None] = time.sleep
    clock: Callable[[], float] = time.monotonic

    # -- configuration ---------------------------------------------------
    def with_time_limit(self, seconds: float) -> "RetryTask[T]":
        return replace(self, max_try_time_s=float(seconds))

    def with_try_interval(self, seconds: float) -> "RetryTask[T]":
        return replace(self, try_interval_s=float(seconds))

    def with_max_try_count(self, count: int) -> "RetryTask[T]":
        return replace(self, max_try_count=int(count))

    def on_success(self, action: ResultCallback) -> "RetryTask[T]":
        """Call ``action(result, attempts)`` once the end condition holds."""

        return replace(self, success_actions=self.success_actions + (action,))

    def on_failure(self, action: ResultCallback) -> "RetryTask[T]":
        """Call ``action(result, attempts)`` after each failed attempt that will be retried."""

        return replace(self, failure_actions=self.failure_actions + (action,))

    def on_timeout(self, action: ResultCallback) -> "RetryTask[T]":
        """Call ``action(result, attempts)`` when the time or count budget runs out."""

        return replace(self, timeout_actions=self.timeout_actions + (action,))

    # -- execution -------------------------------------------------------
    def until(self, end_condition: Callable[[T], bool]) -> T:
        """Retry until ``end_condition(result)`` is true. Exceptions propagate."""

        return self._run(end_condition, retry_on_exception=False, expected=Exception)

    def until_condition(self, condition: Callable[[], bool]) -> T:
        """Like :meth:`until`, for a condition that does not look at the result."""

        return self._run(lambda _result: condition(), retry_on_exception=False, expected=Exception)

    def until_no_exception(self, expected: Type[BaseException] = Exception) -> T:
        """Retry until the task stops raising ``expected``.

        Exceptions of any other type are re-raised immediately.
        """

        return self._run(lambda _result: True, retry_on_exception=True, expected=expected)

    def _run(
        self,
        end_condition: Callable[[T], bool],
        *,
        retry_on_exception: bool,
        expected: Type[BaseException],
    ) -> T:
        _LOGGER.debug(
            "Starting trying with max try time %ss and max try count %s",
            self.max_try_time_s,
            self.max_try_count,
        )
        tried = 0
        last_exception: BaseException | None = None
        started = self.clock()
        while True:
            result: Any = None
            try:
                result = self.task()
            except Exception as exc:
                if self._should_raise(exc, retry_on_exception, expected):
                    raise
                last_exception = exc
            else:
                if end_condition(result):
                    _LOGGER.debug(
                        "Trying succeeded after %.3fs and %d attempt(s)",
                        self.clock() - started,
                        tried + 1,
                    )
                    self._fire(self.success_actions, result, tried + 1)
                    return result

            if self.clock() - started >= self.max_try_time_s:
                message = f"The maximum try time {self.max_try_time_s}s for the operation has been exceeded."
                break
            tried += 1
            if tried >= self.max_try_count:
                message = f"The maximum try count {self.max_try_count} for the operation has been exceeded."
                break
            self._fire(self.failure_actions, result, tried)
            self.sleep_fn(self.try_interval_s)

        self._fire(self.timeout_actions, result, tried)
        raise RetryTimeoutError(message, last_exception) from last_exception

    @staticmethod
    def _should_raise(exc: Exception, retry_on_exception: bool, expected: Type[BaseException]) -> bool:
        if isinstance(exc, _FATAL_EXCEPTIONS) or not retry_on_exception or not isinstance(exc, expected):
            _LOGGER.debug("%s detected when trying; raising", type(exc).__name__)
            return True
        _LOGGER.debug("%s detected when trying; continue trying: %s", type(exc).__name__, exc)
        return False

    @staticmethod
    def _fire(actions: Tuple[ResultCallback, ...], result: Any, attempts: int) -> None:
        for action in actions:
            action(result, attempts)


def retry(task: Callable[[], T], **options: Any) -> RetryTask[T]:
    """Start configuring a :class:`RetryTask` for ``task``."""

    return RetryTask(task, **options)

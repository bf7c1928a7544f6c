"""Time utilities for rollfile."""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Callable

__all__ = ["Clock", "utcnow", "utc_midnight"]

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Return a timezone-aware UTC ``datetime`` instance."""

    return datetime.now(timezone.utc)


def utc_midnight(day: date) -> datetime:
    """Return the start of ``day`` as an aware UTC ``datetime``."""

    return datetime.combine(day, time.min, tzinfo=timezone.utc)

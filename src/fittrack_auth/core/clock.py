"""Time sources injected into the login throttle."""

from __future__ import annotations

import time
from datetime import UTC, datetime
from threading import Lock
from typing import Protocol


class Clock(Protocol):
    """Anything that can report the current time as epoch seconds."""

    def now(self) -> float: ...


class SystemClock:
    """Wall-clock time source."""

    def now(self) -> float:
        return time.time()


class ManualClock:
    """Clock that only moves when told to.

    Used to make expiry behaviour deterministic in tests and scripts.
    """

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self._now = float(start)
        self._lock = Lock()

    def now(self) -> float:
        with self._lock:
            return self._now

    def advance(self, seconds: float) -> float:
        """Move the clock forward and return the new time."""
        if seconds < 0:
            raise ValueError("ManualClock cannot move backwards")
        with self._lock:
            self._now += float(seconds)
            return self._now

    def set(self, timestamp: float) -> None:
        with self._lock:
            self._now = float(timestamp)


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(UTC)

"""Clock sources for cache TTL comparisons.

The cache never calls :func:`time.time` directly; it asks a :class:`Clock`.
Production code uses :class:`SystemClock`; tests and deterministic batch
renders use :class:`ManualClock` and advance it explicitly.
"""

from __future__ import annotations

import threading
import time
from typing import Protocol


class Clock(Protocol):
    """Anything with a ``now()`` returning seconds since the epoch."""

    def now(self) -> float: ...


class SystemClock:
    """Wall-clock time from :func:`time.time`."""

    def now(self) -> float:
        return time.time()


class ManualClock:
    """A clock that only moves when told to.

    Args:
        start: Initial reading, in seconds.

    Example::

        clock = ManualClock()
        clock.tick(299.999)
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._lock = threading.Lock()

    def now(self) -> float:
        with self._lock:
            return self._now

    def tick(self, seconds: float) -> None:
        """Advance the clock by *seconds*."""
        with self._lock:
            self._now += seconds

    def set(self, value: float) -> None:
        with self._lock:
            self._now = value

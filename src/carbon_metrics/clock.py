"""Clock capabilities used by meters and reporters."""

from __future__ import annotations
import logging
import threading
import time
from collections.abc import Callable
from typing import Protocol, runtime_checkable


_LOGGER = logging.getLogger(__name__)


@runtime_checkable
class Clock(Protocol):
    """Source of the current time in whole seconds.

    Implementations must never go backwards: the meter tick catch-up relies
    on successive readings being non-decreasing.
    """

    def now(self) -> int:
        """Return the current time in whole seconds."""
        ...  # pragma: no cover


class SystemClock:
    """Wall-clock time, clamped so readings never decrease.

    If the platform clock fails or steps backwards, the last good reading is
    returned instead; the clock itself never raises.
    """

    def __init__(self, time_source: Callable[[], float] = time.time) -> None:
        """Read seconds since the epoch from ``time_source``."""
        self._time_source = time_source
        self._lock = threading.Lock()
        self._last = 0

    def now(self) -> int:
        """Return the current Unix time in seconds."""
        try:
            current = int(self._time_source())
        except (OSError, OverflowError, ValueError) as exc:
            _LOGGER.warning("System clock read failed, reusing last value: %s", exc)
            with self._lock:
                return self._last
        with self._lock:
            if current > self._last:
                self._last = current
            return self._last


class ManualClock:
    """Clock advanced explicitly, for tests and simulations."""

    def __init__(self, start: int = 0) -> None:
        """Start the clock at ``start`` seconds."""
        self._lock = threading.Lock()
        self._now = int(start)

    def now(self) -> int:
        """Return the current manual time."""
        with self._lock:
            return self._now

    def advance(self, seconds: int) -> int:
        """Move the clock forward and return the new time."""
        if seconds < 0:
            msg = "ManualClock cannot move backwards."
            raise ValueError(msg)
        with self._lock:
            self._now += int(seconds)
            return self._now

    def set(self, value: int) -> None:
        """Jump to ``value``, which must not be earlier than the current time."""
        with self._lock:
            if value < self._now:
                msg = "ManualClock cannot move backwards."
                raise ValueError(msg)
            self._now = int(value)


__all__ = ["Clock", "ManualClock", "SystemClock"]

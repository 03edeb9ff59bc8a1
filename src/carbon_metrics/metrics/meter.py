"""Meters measure the rate at which a set of events occur."""

from __future__ import annotations
from carbon_metrics.atomic import AtomicInteger
from carbon_metrics.clock import Clock, SystemClock
from carbon_metrics.ewma import EWMA, TICK_INTERVAL_SECONDS
from carbon_metrics.metrics.base import MeterSnapshot


class Meter:
    """Event counter with mean and one-, five- and fifteen-minute rates.

    The rates behave like the Unix load averages shown by ``top``. Marking
    and reading are safe from any number of threads without a lock held
    across the catch-up: decay is driven lazily by whichever caller first
    notices that one or more
    :data:`~carbon_metrics.ewma.TICK_INTERVAL_SECONDS` intervals have passed.
    That caller claims the elapsed intervals with a compare-and-set on the
    last-tick timestamp and replays exactly one tick per interval; every
    other caller observing the same interval loses the compare-and-set and
    skips ticking.

    The count is a signed 64-bit word and wraps around on overflow.
    """

    def __init__(self, clock: Clock | None = None) -> None:
        """Create a meter reading time from ``clock`` (system time by default)."""
        self._clock: Clock = clock if clock is not None else SystemClock()
        self._birthstamp = self._clock.now()
        self._last_tick = AtomicInteger(self._birthstamp)
        self._count = AtomicInteger()
        self._rates = (EWMA.one_minute(), EWMA.five_minute(), EWMA.fifteen_minute())

    @property
    def clock(self) -> Clock:
        """Clock driving this meter."""
        return self._clock

    def mark(self, value: int = 1) -> None:
        """Record the occurrence of ``value`` events."""
        if value < 0:
            msg = "Meter.mark requires a non-negative number of events."
            raise ValueError(msg)
        self._tick_if_necessary()
        self._count.add_and_get(value)
        for rate in self._rates:
            rate.update(value)

    def count(self) -> int:
        """Return the number of events marked so far."""
        return self._count.get()

    def mean_rate(self) -> float:
        """Return the mean events per second since the meter was created."""
        count = self._count.get()
        if count == 0:
            return 0.0
        elapsed = self._clock.now() - self._birthstamp
        if elapsed <= 0:
            return 0.0
        return count / elapsed

    def m01_rate(self) -> float:
        """Return the one-minute moving average rate."""
        self._tick_if_necessary()
        return self._rates[0].rate()

    def m05_rate(self) -> float:
        """Return the five-minute moving average rate."""
        self._tick_if_necessary()
        return self._rates[1].rate()

    def m15_rate(self) -> float:
        """Return the fifteen-minute moving average rate."""
        self._tick_if_necessary()
        return self._rates[2].rate()

    def snapshot(self) -> MeterSnapshot:
        """Return an immutable copy of the count and all rates."""
        self._tick_if_necessary()
        m01, m05, m15 = (rate.rate() for rate in self._rates)
        return MeterSnapshot(
            count=self._count.get(),
            rates=(m01, m05, m15),
            mean=self.mean_rate(),
        )

    def _tick_if_necessary(self) -> None:
        now = self._clock.now()
        previous = self._last_tick.get()
        elapsed = now - previous
        if elapsed <= TICK_INTERVAL_SECONDS:
            return
        # Readings never decrease, so a stale ``previous`` cannot reappear.
        claimed = now - elapsed % TICK_INTERVAL_SECONDS
        if not self._last_tick.compare_and_set(previous, claimed):
            return
        for _ in range(elapsed // TICK_INTERVAL_SECONDS):
            for rate in self._rates:
                rate.tick()


__all__ = ["Meter"]

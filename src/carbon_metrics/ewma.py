"""Exponentially-weighted moving average rate estimator."""

from __future__ import annotations
import math
from carbon_metrics.atomic import AtomicInteger


TICK_INTERVAL_SECONDS = 5
"""Seconds between two decay steps, matching Unix load averages."""


class EWMA:
    """Decaying events-per-second estimate over a fixed averaging window.

    ``update`` only accumulates events. ``tick`` folds the accumulated events
    into the rate and must be called once every :data:`TICK_INTERVAL_SECONDS`
    by a single caller at a time; the owning meter guarantees that.
    """

    __slots__ = ("_alpha", "_initialized", "_rate", "_uncounted")

    def __init__(self, alpha: float) -> None:
        """Create an estimator with decay constant ``alpha``."""
        if not 0.0 < alpha <= 1.0:
            msg = "EWMA alpha must be in the interval (0, 1]."
            raise ValueError(msg)
        self._alpha = alpha
        self._uncounted = AtomicInteger()
        self._rate = 0.0
        self._initialized = False

    @classmethod
    def for_window(cls, minutes: float) -> EWMA:
        """Return an estimator averaging over ``minutes`` minutes."""
        if minutes <= 0:
            msg = "EWMA window must be a positive number of minutes."
            raise ValueError(msg)
        alpha = 1.0 - math.exp(-TICK_INTERVAL_SECONDS / (minutes * 60.0))
        return cls(alpha)

    @classmethod
    def one_minute(cls) -> EWMA:
        """Return a one-minute estimator."""
        return cls.for_window(1)

    @classmethod
    def five_minute(cls) -> EWMA:
        """Return a five-minute estimator."""
        return cls.for_window(5)

    @classmethod
    def fifteen_minute(cls) -> EWMA:
        """Return a fifteen-minute estimator."""
        return cls.for_window(15)

    @property
    def alpha(self) -> float:
        """Decay constant applied on every tick."""
        return self._alpha

    def update(self, n: int) -> None:
        """Record ``n`` (non-negative) new events for the next tick."""
        self._uncounted.add_and_get(n)

    def tick(self) -> None:
        """Fold the events seen since the previous tick into the rate."""
        count = self._uncounted.get_and_set(0)
        instant_rate = count / TICK_INTERVAL_SECONDS
        if self._initialized:
            self._rate += self._alpha * (instant_rate - self._rate)
        else:
            self._rate = instant_rate
            self._initialized = True

    def rate(self) -> float:
        """Return the decayed rate in events per second."""
        return self._rate


__all__ = ["EWMA", "TICK_INTERVAL_SECONDS"]

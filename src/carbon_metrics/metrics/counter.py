"""Integer counter metric."""

from __future__ import annotations
from carbon_metrics.atomic import AtomicInteger
from carbon_metrics.metrics.base import CounterSnapshot


class Counter:
    """Integer counter that may be incremented and decremented concurrently."""

    def __init__(self) -> None:
        """Create a counter starting at zero."""
        self._count = AtomicInteger()

    def inc(self, n: int = 1) -> int:
        """Increment by ``n`` and return the new count."""
        return self._count.add_and_get(n)

    def dec(self, n: int = 1) -> int:
        """Decrement by ``n`` and return the new count."""
        return self._count.add_and_get(-n)

    def count(self) -> int:
        """Return the current count."""
        return self._count.get()

    def clear(self) -> None:
        """Reset the counter to zero."""
        self._count.set(0)

    def snapshot(self) -> CounterSnapshot:
        """Return the current count as a snapshot."""
        return CounterSnapshot(count=self._count.get())


__all__ = ["Counter"]

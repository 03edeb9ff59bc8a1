"""Metric capability and the immutable snapshots metrics export."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Protocol, TypeAlias, runtime_checkable


@dataclass(frozen=True, slots=True)
class CounterSnapshot:
    """Point-in-time value of a counter."""

    count: int


@dataclass(frozen=True, slots=True)
class GaugeSnapshot:
    """Point-in-time value of a gauge."""

    value: float


@dataclass(frozen=True, slots=True)
class MeterSnapshot:
    """Point-in-time copy of a meter's count and rates.

    ``rates`` holds the one-, five- and fifteen-minute rates in that order.
    """

    count: int
    rates: tuple[float, float, float]
    mean: float

    @property
    def m01_rate(self) -> float:
        """One-minute moving average rate."""
        return self.rates[0]

    @property
    def m05_rate(self) -> float:
        """Five-minute moving average rate."""
        return self.rates[1]

    @property
    def m15_rate(self) -> float:
        """Fifteen-minute moving average rate."""
        return self.rates[2]


MetricSnapshot: TypeAlias = CounterSnapshot | GaugeSnapshot | MeterSnapshot
"""Every snapshot variant a reporter knows how to export."""


@runtime_checkable
class Metric(Protocol):
    """Anything that can export a snapshot of its current value."""

    def snapshot(self) -> MetricSnapshot:
        """Return an immutable snapshot of the metric."""
        ...  # pragma: no cover


__all__ = [
    "CounterSnapshot",
    "GaugeSnapshot",
    "Metric",
    "MeterSnapshot",
    "MetricSnapshot",
]

"""Metric types that can be registered and exported."""

from carbon_metrics.metrics.base import (
    CounterSnapshot,
    GaugeSnapshot,
    MeterSnapshot,
    Metric,
    MetricSnapshot,
)
from carbon_metrics.metrics.counter import Counter
from carbon_metrics.metrics.gauge import Gauge
from carbon_metrics.metrics.meter import Meter


__all__ = [
    "Counter",
    "CounterSnapshot",
    "Gauge",
    "GaugeSnapshot",
    "Meter",
    "MeterSnapshot",
    "Metric",
    "MetricSnapshot",
]

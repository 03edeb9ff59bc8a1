"""In-process metrics with periodic export to Carbon."""

from carbon_metrics.atomic import AtomicInteger
from carbon_metrics.carbon import (
    CarbonError,
    CarbonProtocolError,
    CarbonSendError,
    CarbonSender,
)
from carbon_metrics.clock import Clock, ManualClock, SystemClock
from carbon_metrics.config import ReporterSettings, get_reporter_settings
from carbon_metrics.ewma import EWMA, TICK_INTERVAL_SECONDS
from carbon_metrics.metrics import (
    Counter,
    CounterSnapshot,
    Gauge,
    GaugeSnapshot,
    Meter,
    MeterSnapshot,
    Metric,
    MetricSnapshot,
)
from carbon_metrics.registry import (
    MetricRegistry,
    MetricTypeError,
    NameAlreadyRegisteredError,
    RegistryError,
)
from carbon_metrics.reporter import CarbonReporter, ScheduledReporter


__all__ = [
    "AtomicInteger",
    "CarbonError",
    "CarbonProtocolError",
    "CarbonReporter",
    "CarbonSendError",
    "CarbonSender",
    "Clock",
    "Counter",
    "CounterSnapshot",
    "EWMA",
    "Gauge",
    "GaugeSnapshot",
    "ManualClock",
    "Meter",
    "MeterSnapshot",
    "Metric",
    "MetricRegistry",
    "MetricSnapshot",
    "MetricTypeError",
    "NameAlreadyRegisteredError",
    "RegistryError",
    "ReporterSettings",
    "ScheduledReporter",
    "SystemClock",
    "TICK_INTERVAL_SECONDS",
    "get_reporter_settings",
]

"""Tests for counters and gauges."""

from __future__ import annotations

import pytest

from carbon_metrics.metrics import Counter, CounterSnapshot, Gauge, GaugeSnapshot, Metric


def test_counter_increments_and_decrements() -> None:
    counter = Counter()

    assert counter.inc() == 1
    assert counter.inc(4) == 5
    assert counter.dec(2) == 3
    assert counter.snapshot() == CounterSnapshot(count=3)

    counter.clear()
    assert counter.count() == 0
    assert isinstance(counter, Metric)


def test_gauge_holds_last_value() -> None:
    gauge = Gauge()
    assert gauge.value() == 0

    gauge.set(12.5)

    assert gauge.value() == 12.5
    assert gauge.snapshot() == GaugeSnapshot(value=12.5)


def test_gauge_reads_supplier() -> None:
    depth = [3]
    gauge = Gauge(lambda: depth[0])

    assert gauge.value() == 3
    depth[0] = 7
    assert gauge.snapshot().value == 7

    with pytest.raises(TypeError):
        gauge.set(1)


def test_failing_supplier_reports_last_value(caplog: pytest.LogCaptureFixture) -> None:
    readings = iter([5.0])

    def supplier() -> float:
        return next(readings)

    gauge = Gauge(supplier)

    assert gauge.value() == 5.0
    assert gauge.value() == 5.0
    assert "Gauge supplier failed" in caplog.text

"""Tests for meters and their lock-free tick catch-up."""

from __future__ import annotations

import math
import threading

import pytest

from carbon_metrics.clock import ManualClock
from carbon_metrics.ewma import EWMA
from carbon_metrics.metrics import Meter, MeterSnapshot


class SequenceClock:
    """Returns 0 for the first two readings and 10 afterwards."""

    def __init__(self) -> None:
        self.calls = 0

    def now(self) -> int:
        self.calls += 1
        return 0 if self.calls <= 2 else 10


def _count_ticks(monkeypatch: pytest.MonkeyPatch) -> list[int]:
    ticks: list[int] = []
    lock = threading.Lock()
    original = EWMA.tick

    def counting_tick(self: EWMA) -> None:
        with lock:
            ticks.append(1)
        original(self)

    monkeypatch.setattr(EWMA, "tick", counting_tick)
    return ticks


def test_new_meter_reports_zero() -> None:
    meter = Meter()

    assert meter.count() == 0
    assert meter.mean_rate() == 0.0
    assert meter.m01_rate() == 0.0
    assert meter.m05_rate() == 0.0
    assert meter.m15_rate() == 0.0


def test_marks_without_elapsed_time_only_count() -> None:
    meter = Meter(ManualClock(start=100))
    for value in (1, 2, 3, 10):
        meter.mark(value)

    assert meter.count() == 16
    assert meter.mean_rate() == 0.0
    assert meter.m01_rate() == 0.0
    assert meter.m05_rate() == 0.0
    assert meter.m15_rate() == 0.0


def test_rates_after_two_missed_ticks() -> None:
    clock = SequenceClock()
    meter = Meter(clock)

    meter.mark(1)
    meter.mark(2)

    assert meter.count() == 3
    assert meter.mean_rate() == pytest.approx(0.3, abs=1e-3)
    assert meter.m01_rate() == pytest.approx(0.1840, abs=1e-3)
    assert meter.m05_rate() == pytest.approx(0.1966, abs=1e-3)
    assert meter.m15_rate() == pytest.approx(0.1988, abs=1e-3)
    assert clock.calls == 7


def test_mark_defaults_to_one_event() -> None:
    meter = Meter(ManualClock())
    meter.mark()
    meter.mark()

    assert meter.count() == 2


def test_negative_marks_are_rejected() -> None:
    meter = Meter(ManualClock())

    with pytest.raises(ValueError):
        meter.mark(-1)
    assert meter.count() == 0


def test_no_tick_until_more_than_one_interval_elapsed(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    ticks = _count_ticks(monkeypatch)
    clock = ManualClock()
    meter = Meter(clock)
    meter.mark(5)

    clock.advance(5)
    assert meter.m01_rate() == 0.0
    assert ticks == []

    clock.advance(1)
    assert meter.m01_rate() == pytest.approx(1.0)
    assert len(ticks) == 3


def test_catch_up_keeps_the_remainder(monkeypatch: pytest.MonkeyPatch) -> None:
    ticks = _count_ticks(monkeypatch)
    clock = ManualClock()
    meter = Meter(clock)

    clock.advance(7)
    meter.m01_rate()
    assert len(ticks) == 3

    clock.advance(4)
    meter.m01_rate()
    assert len(ticks) == 6

    clock.advance(19)
    meter.m01_rate()
    assert len(ticks) == 3 * (30 // 5)


def test_idle_period_replays_every_missed_tick() -> None:
    clock = ManualClock()
    meter = Meter(clock)
    meter.mark(10)

    clock.advance(23)

    # First tick sets 2 events/s, the three remaining ticks decay it.
    assert meter.m01_rate() == pytest.approx(2.0 * math.exp(-15 / 60))
    assert meter.m05_rate() == pytest.approx(2.0 * math.exp(-15 / 300))
    assert meter.m15_rate() == pytest.approx(2.0 * math.exp(-15 / 900))


def test_concurrent_readers_apply_each_tick_once(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    ticks = _count_ticks(monkeypatch)
    clock = ManualClock()
    meter = Meter(clock)
    meter.mark(10)
    clock.advance(23)

    workers = 32
    barrier = threading.Barrier(workers)
    rates: list[float] = []
    lock = threading.Lock()

    def read_rate() -> None:
        barrier.wait()
        rate = meter.m01_rate()
        with lock:
            rates.append(rate)

    threads = [threading.Thread(target=read_rate) for _ in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(ticks) == 3 * (23 // 5)
    assert meter.m01_rate() == pytest.approx(2.0 * math.exp(-15 / 60))
    assert len(rates) == workers


def test_concurrent_marks_are_all_counted() -> None:
    clock = ManualClock()
    meter = Meter(clock)
    barrier = threading.Barrier(8)

    def mark_many() -> None:
        barrier.wait()
        for _ in range(500):
            meter.mark(2)

    threads = [threading.Thread(target=mark_many) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert meter.count() == 8000
    clock.advance(6)
    assert meter.m01_rate() == pytest.approx(8000 / 5)


def test_mean_rate_uses_time_since_creation() -> None:
    clock = ManualClock(start=1_000)
    meter = Meter(clock)
    meter.mark(30)
    clock.advance(60)

    assert meter.mean_rate() == pytest.approx(0.5)


def test_snapshot_is_immutable_copy() -> None:
    clock = ManualClock()
    meter = Meter(clock)
    meter.mark(1)
    meter.mark(1)
    clock.advance(10)

    snapshot = meter.snapshot()
    meter.mark(1)

    assert isinstance(snapshot, MeterSnapshot)
    assert snapshot.count == 2
    assert meter.snapshot().count == 3
    assert snapshot.mean == pytest.approx(0.2)
    assert snapshot.m01_rate == pytest.approx(0.4 * math.exp(-5 / 60))
    assert snapshot.rates == (snapshot.m01_rate, snapshot.m05_rate, snapshot.m15_rate)
    with pytest.raises(AttributeError):
        snapshot.count = 10  # type: ignore[misc]

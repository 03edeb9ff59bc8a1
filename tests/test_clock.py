"""Tests for clock implementations."""

from __future__ import annotations

import pytest

from carbon_metrics.clock import Clock, ManualClock, SystemClock


def test_system_clock_reads_wall_time() -> None:
    clock = SystemClock(lambda: 1_700_000_000.9)

    assert clock.now() == 1_700_000_000
    assert isinstance(clock, Clock)


def test_system_clock_defaults_to_current_time() -> None:
    assert SystemClock().now() > 1_600_000_000


def test_system_clock_never_goes_backwards() -> None:
    readings = iter([100.0, 90.0, 101.0])
    clock = SystemClock(lambda: next(readings))

    assert [clock.now(), clock.now(), clock.now()] == [100, 100, 101]


def test_system_clock_reuses_last_value_on_failure(
    caplog: pytest.LogCaptureFixture,
) -> None:
    readings: list[float | None] = [42.0, None]

    def source() -> float:
        value = readings.pop(0)
        if value is None:
            raise OSError("clock unavailable")
        return value

    clock = SystemClock(source)

    assert clock.now() == 42
    assert clock.now() == 42
    assert "System clock read failed" in caplog.text


def test_manual_clock_advances_and_rejects_going_back() -> None:
    clock = ManualClock(start=10)

    assert clock.now() == 10
    assert clock.advance(5) == 15
    clock.set(20)
    assert clock.now() == 20

    with pytest.raises(ValueError):
        clock.set(19)
    with pytest.raises(ValueError):
        clock.advance(-1)
    assert isinstance(clock, Clock)

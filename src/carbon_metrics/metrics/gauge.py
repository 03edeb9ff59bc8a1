"""Gauges report an instantaneous level."""

from __future__ import annotations
import logging
from collections.abc import Callable
from carbon_metrics.metrics.base import GaugeSnapshot


_LOGGER = logging.getLogger(__name__)


class Gauge:
    """Holds the last value set, or reads it from a supplier on demand.

    A gauge built with ``supplier`` calls it on every :meth:`value`; when the
    supplier raises, the failure is logged and the last good value is used.
    """

    def __init__(self, supplier: Callable[[], float] | None = None) -> None:
        """Create a gauge, optionally backed by ``supplier``."""
        self._supplier = supplier
        self._value: float = 0

    def set(self, value: float) -> None:
        """Record a new level."""
        if self._supplier is not None:
            msg = "Cannot set a gauge that reads from a supplier."
            raise TypeError(msg)
        self._value = value

    def value(self) -> float:
        """Return the current level."""
        if self._supplier is None:
            return self._value
        try:
            self._value = self._supplier()
        except Exception:
            _LOGGER.warning("Gauge supplier failed; reporting last value.", exc_info=True)
        return self._value

    def snapshot(self) -> GaugeSnapshot:
        """Return the current level as a snapshot."""
        return GaugeSnapshot(value=self.value())


__all__ = ["Gauge"]

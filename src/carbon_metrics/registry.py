"""Process-local directory of named, exportable metrics."""

from __future__ import annotations
import threading
from collections.abc import Callable
from typing import TypeVar
from carbon_metrics.clock import Clock
from carbon_metrics.metrics import Counter, Gauge, Meter, Metric


class RegistryError(RuntimeError):
    """Base error type for registry operations."""


class NameAlreadyRegisteredError(RegistryError):
    """Raised when a metric name is registered twice."""

    def __init__(self, name: str) -> None:
        """Record the conflicting ``name``."""
        super().__init__(f"A metric named {name!r} is already registered.")
        self.name = name


class MetricTypeError(RegistryError):
    """Raised when a name is bound to a metric of an unexpected type."""


M = TypeVar("M", bound=Metric)


class MetricRegistry:
    """Thread-safe mapping from metric name to metric.

    Registering a name that is already bound raises
    :class:`NameAlreadyRegisteredError`; existing bindings are never
    replaced. The ``counter``, ``gauge`` and ``meter`` helpers instead return
    the metric already bound to the name when its type matches.
    """

    def __init__(self) -> None:
        """Create an empty registry."""
        self._metrics: dict[str, Metric] = {}
        self._lock = threading.Lock()

    def register(self, name: str, metric: M) -> M:
        """Bind ``metric`` to ``name`` and return it."""
        _validate_name(name)
        with self._lock:
            if name in self._metrics:
                raise NameAlreadyRegisteredError(name)
            self._metrics[name] = metric
        return metric

    def get(self, name: str) -> Metric | None:
        """Return the metric bound to ``name`` if any."""
        with self._lock:
            return self._metrics.get(name)

    def remove(self, name: str) -> bool:
        """Unbind ``name``, returning whether it was registered."""
        with self._lock:
            return self._metrics.pop(name, None) is not None

    def each(self) -> list[tuple[str, Metric]]:
        """Return every ``(name, metric)`` pair, sorted by name.

        The pairs are copied while the registry is locked, so the result is a
        consistent view of the bindings even while other threads register or
        remove metrics.
        """
        with self._lock:
            items = list(self._metrics.items())
        items.sort(key=lambda item: item[0])
        return items

    def names(self) -> list[str]:
        """Return the registered names in sorted order."""
        return [name for name, _ in self.each()]

    def clear(self) -> None:
        """Remove every registered metric."""
        with self._lock:
            self._metrics.clear()

    def counter(self, name: str) -> Counter:
        """Return the counter bound to ``name``, creating it if needed."""
        return self._get_or_create(name, Counter, Counter)

    def gauge(self, name: str) -> Gauge:
        """Return the gauge bound to ``name``, creating it if needed."""
        return self._get_or_create(name, Gauge, Gauge)

    def meter(self, name: str, *, clock: Clock | None = None) -> Meter:
        """Return the meter bound to ``name``, creating it if needed."""
        return self._get_or_create(name, Meter, lambda: Meter(clock))

    def _get_or_create(
        self, name: str, kind: type[M], factory: Callable[[], M]
    ) -> M:
        _validate_name(name)
        with self._lock:
            existing = self._metrics.get(name)
            if existing is None:
                created = factory()
                self._metrics[name] = created
                return created
        if not isinstance(existing, kind):
            msg = (
                f"Metric {name!r} is a {type(existing).__name__}, "
                f"not a {kind.__name__}."
            )
            raise MetricTypeError(msg)
        return existing

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._metrics

    def __len__(self) -> int:
        with self._lock:
            return len(self._metrics)


def _validate_name(name: str) -> None:
    if not isinstance(name, str) or not name.strip():
        msg = "Metric names must be non-empty strings."
        raise ValueError(msg)


__all__ = [
    "MetricRegistry",
    "MetricTypeError",
    "NameAlreadyRegisteredError",
    "RegistryError",
]

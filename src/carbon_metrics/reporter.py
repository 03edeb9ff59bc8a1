"""Periodic reporters that export registry snapshots."""

from __future__ import annotations
import logging
import math
import threading
import time
from abc import ABC, abstractmethod
from carbon_metrics.carbon import (
    CarbonSender,
    CarbonSendError,
    Datapoint,
    format_value,
    join_path,
)
from carbon_metrics.clock import Clock, SystemClock
from carbon_metrics.config import ReporterSettings, get_reporter_settings
from carbon_metrics.metrics import (
    CounterSnapshot,
    GaugeSnapshot,
    Metric,
    MeterSnapshot,
    MetricSnapshot,
)
from carbon_metrics.registry import MetricRegistry
from carbon_metrics.tracing import report_span


_LOGGER = logging.getLogger(__name__)


class ScheduledReporter(ABC):
    """Runs :meth:`report` on a background thread at a fixed interval.

    The schedule is fixed-rate: a slow cycle shortens the following wait, and
    cycles that could not start on time are skipped rather than queued.
    Exceptions raised by a cycle are logged and never stop the thread.
    """

    def __init__(self, interval: float, *, name: str | None = None) -> None:
        """Configure the reporting ``interval`` in seconds."""
        if interval <= 0:
            msg = "Reporting interval must be greater than zero."
            raise ValueError(msg)
        self._interval = float(interval)
        self._name = name or type(self).__name__
        self._stop_event: threading.Event | None = None
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()

    @property
    def interval(self) -> float:
        """Seconds between two reporting cycles."""
        return self._interval

    @property
    def running(self) -> bool:
        """Return whether the background thread is alive."""
        thread = self._thread
        return thread is not None and thread.is_alive()

    def start(self) -> None:
        """Start reporting in the background; a no-op when already running.

        Raises:
            RuntimeError: A previous thread was asked to stop but is still
                finishing its cycle.
        """
        with self._lock:
            if self.running:
                stop_event = self._stop_event
                if stop_event is not None and stop_event.is_set():
                    msg = f"{self._name} is still stopping; call stop() again first."
                    raise RuntimeError(msg)
                return
            self._stop_event = threading.Event()
            self._thread = threading.Thread(
                target=self._run,
                args=(self._stop_event,),
                name=self._name,
                daemon=True,
            )
            self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        """Stop scheduling cycles and release resources.

        A cycle already in progress is allowed to finish (its network I/O is
        bounded by the sender timeout); the reporting thread then calls
        :meth:`close` itself before exiting. When ``timeout`` expires first the
        thread stays tracked, so :meth:`start` cannot run a second one beside it.
        """
        with self._lock:
            thread = self._thread
            if self._stop_event is not None:
                self._stop_event.set()
        if thread is None:
            self.close()
            return
        thread.join(timeout)
        if thread.is_alive():
            _LOGGER.warning(
                "%s did not stop within %s seconds; it will close on exit.",
                self._name,
                timeout,
            )
            return
        with self._lock:
            if self._thread is thread:
                self._thread = None

    def report_now(self) -> None:
        """Run one cycle on the calling thread, logging any failure."""
        try:
            self.report()
        except Exception:
            _LOGGER.exception("%s reporting cycle failed.", self._name)

    @abstractmethod
    def report(self) -> object:
        """Export one batch of metrics."""

    def close(self) -> None:
        """Release resources held by the reporter."""

    def _run(self, stop_event: threading.Event) -> None:
        next_run = time.monotonic() + self._interval
        try:
            while not stop_event.wait(max(0.0, next_run - time.monotonic())):
                self.report_now()
                next_run += self._interval
                now = time.monotonic()
                if next_run <= now:
                    skipped = math.floor((now - next_run) / self._interval) + 1
                    next_run += skipped * self._interval
        finally:
            self.close()

    def __enter__(self) -> ScheduledReporter:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()


class CarbonReporter(ScheduledReporter):
    """Sends every registered metric to Carbon on each cycle.

    Datapoint paths are ``<prefix>.<name><suffix>`` with these suffixes:

    * meters: ``.count``, ``.mean_rate``, ``.m1_rate``, ``.m5_rate``, ``.m15_rate``
    * counters: ``.count``
    * gauges: ``.value``

    All datapoints of a cycle share one timestamp. A failed send drops the
    batch; the next cycle reconnects and sends fresh snapshots.
    """

    def __init__(
        self,
        registry: MetricRegistry,
        sender: CarbonSender,
        *,
        prefix: str = "",
        interval: float = 60.0,
        clock: Clock | None = None,
    ) -> None:
        """Report ``registry`` through ``sender`` every ``interval`` seconds."""
        super().__init__(interval)
        self._registry = registry
        self._sender = sender
        self._prefix = prefix.strip().strip(".")
        self._clock: Clock = clock if clock is not None else SystemClock()
        self._consecutive_failures = 0

    @classmethod
    def from_settings(
        cls,
        registry: MetricRegistry,
        settings: ReporterSettings | None = None,
        *,
        clock: Clock | None = None,
    ) -> CarbonReporter:
        """Build a reporter and its sender from configuration."""
        settings = settings or get_reporter_settings()
        sender = CarbonSender(
            settings.carbon_host,
            settings.carbon_port,
            timeout=settings.timeout_seconds,
        )
        return cls(
            registry,
            sender,
            prefix=settings.prefix,
            interval=settings.report_interval_seconds,
            clock=clock,
        )

    @property
    def prefix(self) -> str:
        """Path prefix prepended to every metric name."""
        return self._prefix

    @property
    def consecutive_failures(self) -> int:
        """Number of cycles in a row whose batch was dropped."""
        return self._consecutive_failures

    def datapoints(self, entries: list[tuple[str, Metric]]) -> list[Datapoint]:
        """Snapshot ``entries`` and flatten them into datapoints."""
        points: list[Datapoint] = []
        for name, metric in entries:
            try:
                facets = snapshot_facets(metric.snapshot())
            except Exception:
                _LOGGER.exception("Skipping metric %r: snapshot failed.", name)
                continue
            base = join_path(self._prefix, name)
            for suffix, value in facets:
                if isinstance(value, float) and not math.isfinite(value):
                    _LOGGER.debug("Skipping non-finite value for %s%s", base, suffix)
                    continue
                try:
                    format_value(value)
                except (TypeError, ValueError):
                    _LOGGER.warning(
                        "Skipping %s%s: %r is not a number.", base, suffix, value
                    )
                    continue
                points.append((f"{base}{suffix}", value))
        return points

    def report(self) -> int:
        """Send one batch and return the number of lines written."""
        timestamp = self._clock.now()
        host, port = self._sender.address
        with report_span(self._name, endpoint=f"{host}:{port}") as span:
            entries = self._registry.each()
            points = self.datapoints(entries)
            span.set_batch(
                metrics=len(entries), datapoints=len(points), timestamp=timestamp
            )
            try:
                sent = self._sender.send(points, timestamp)
            except CarbonSendError as exc:
                self._consecutive_failures += 1
                span.mark_failed(exc)
                _LOGGER.warning(
                    "Dropped %d datapoints (%d consecutive failures): %s",
                    len(points),
                    self._consecutive_failures,
                    exc,
                )
                return 0
            span.mark_sent()
        if self._consecutive_failures:
            _LOGGER.info(
                "Carbon reporting recovered after %d failed cycles.",
                self._consecutive_failures,
            )
            self._consecutive_failures = 0
        return sent

    def close(self) -> None:
        """Close the Carbon connection."""
        self._sender.close()


def snapshot_facets(snapshot: MetricSnapshot) -> list[tuple[str, float]]:
    """Return the ``(suffix, value)`` pairs exported for ``snapshot``."""
    if isinstance(snapshot, MeterSnapshot):
        return [
            (".count", snapshot.count),
            (".mean_rate", snapshot.mean),
            (".m1_rate", snapshot.m01_rate),
            (".m5_rate", snapshot.m05_rate),
            (".m15_rate", snapshot.m15_rate),
        ]
    if isinstance(snapshot, CounterSnapshot):
        return [(".count", snapshot.count)]
    if isinstance(snapshot, GaugeSnapshot):
        return [(".value", snapshot.value)]
    msg = f"Unsupported snapshot type: {type(snapshot).__name__}"
    raise TypeError(msg)


__all__ = ["CarbonReporter", "ScheduledReporter", "snapshot_facets"]

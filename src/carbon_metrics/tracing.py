"""OpenTelemetry spans around reporting cycles."""

from __future__ import annotations
from collections.abc import Iterator
from contextlib import contextmanager
from opentelemetry import trace
from opentelemetry.trace import Span, SpanKind, Status, StatusCode


TRACER_NAME = "carbon_metrics.reporter"
REPORT_SPAN_NAME = "carbon_metrics.report"


class ReportTrace:
    """Records the outcome of one reporting cycle on its span."""

    def __init__(self, span: Span) -> None:
        """Wrap the cycle's ``span``."""
        self._span = span

    def set_batch(self, *, metrics: int, datapoints: int, timestamp: int) -> None:
        """Attach the batch size and shared timestamp."""
        self._span.set_attribute("carbon_metrics.metrics", metrics)
        self._span.set_attribute("carbon_metrics.datapoints", datapoints)
        self._span.set_attribute("carbon_metrics.timestamp", timestamp)

    def mark_sent(self) -> None:
        """Flag the batch as delivered."""
        self._span.set_attribute("carbon_metrics.outcome", "sent")
        self._span.set_status(Status(StatusCode.OK))

    def mark_failed(self, exc: BaseException) -> None:
        """Flag the batch as dropped because of ``exc``."""
        self._span.set_attribute("carbon_metrics.outcome", "dropped")
        self._span.record_exception(exc)
        self._span.set_status(Status(StatusCode.ERROR, str(exc)))


@contextmanager
def report_span(reporter: str, *, endpoint: str | None = None) -> Iterator[ReportTrace]:
    """Context manager wrapping one reporting cycle in a span."""
    tracer = trace.get_tracer(TRACER_NAME)
    with tracer.start_as_current_span(
        REPORT_SPAN_NAME,
        kind=SpanKind.CLIENT,
    ) as span:
        span.set_attribute("carbon_metrics.reporter", reporter)
        if endpoint:
            span.set_attribute("carbon_metrics.endpoint", endpoint)
        yield ReportTrace(span)


__all__ = ["REPORT_SPAN_NAME", "ReportTrace", "TRACER_NAME", "report_span"]

"""OpenTelemetry spans around lifecycle operations and remote calls."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import TypeAlias

from opentelemetry import trace

AttributeValue: TypeAlias = str | bool | int | float

_TRACER_NAME = "arubacloud_provider"


@contextmanager
def start_span(
    span_name: str,
    *,
    attributes: Mapping[str, AttributeValue | None] | None = None,
) -> Iterator[trace.Span]:
    """Run the block inside a span; exceptions mark the span as failed.

    Without a configured OpenTelemetry SDK the global tracer is a no-op.
    """
    tracer = trace.get_tracer(_TRACER_NAME)
    with tracer.start_as_current_span(
        span_name,
        record_exception=False,
        set_status_on_exception=False,
    ) as span:
        for key, value in (attributes or {}).items():
            if value is not None:
                span.set_attribute(key, value)
        try:
            yield span
        except Exception as exc:
            span.record_exception(exc)
            span.set_status(trace.Status(trace.StatusCode.ERROR, str(exc)))
            raise

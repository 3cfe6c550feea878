"""Prometheus metrics for resource lifecycle operations, polls and delete retries."""

from __future__ import annotations

import re
from typing import Any, Protocol

from arubacloud_provider.errors import MissingDependencyError

_LABEL_NORMALIZER = re.compile(r"[^a-zA-Z0-9_]+")

# Upper buckets cover waits up to the 10m default resource timeout and beyond.
_LATENCY_BUCKETS = (0.1, 0.5, 1.0, 5.0, 15.0, 30.0, 60.0, 120.0, 300.0, 600.0, 1800.0)

# attribute, collector class, name suffix, help text, label names
_COLLECTORS: tuple[tuple[str, str, str, str, tuple[str, ...]], ...] = (
    (
        "_latency",
        "Histogram",
        "resource_latency_seconds",
        "Duration of lifecycle operations, readiness waits and delete loops.",
        ("resource", "operation", "status"),
    ),
    (
        "_throughput",
        "Counter",
        "resource_throughput_total",
        "Completed lifecycle operations by outcome.",
        ("resource", "operation", "status"),
    ),
    (
        "_errors",
        "Counter",
        "resource_errors_total",
        "Failed lifecycle operations by exception type.",
        ("resource", "operation", "error_type"),
    ),
    (
        "_retries",
        "Counter",
        "resource_retries_total",
        "Extra polls and delete attempts by verdict or reason.",
        ("resource", "operation", "reason"),
    ),
)


def _import_prometheus_client() -> Any:
    try:
        import prometheus_client
    except ImportError as exc:  # pragma: no cover - depends on optional extras
        raise MissingDependencyError(
            "Prometheus metrics require optional dependency 'prometheus-client'. "
            "Install with: pip install arubacloud-provider[metrics]"
        ) from exc
    return prometheus_client


def _sanitize_label(value: str, *, default: str = "unknown") -> str:
    normalized = _LABEL_NORMALIZER.sub("_", value.strip().lower()).strip("_")
    return normalized or default


class MetricsRecorder(Protocol):
    """Observer contract for lifecycle and remote API metrics."""

    def observe_operation(
        self,
        *,
        resource: str,
        operation: str,
        duration_seconds: float,
        success: bool,
    ) -> None:
        """Record operation latency and throughput."""
        ...

    def observe_error(self, *, resource: str, operation: str, error_type: str) -> None:
        """Record operation error counters."""
        ...

    def observe_retry(self, *, resource: str, operation: str, reason: str) -> None:
        """Record one retry (or one extra poll) of an operation."""
        ...


class NoopMetricsRecorder:
    """Recorder used until metrics are configured; every call is ignored."""

    def observe_operation(self, **labels: Any) -> None:
        del labels

    def observe_error(self, **labels: Any) -> None:
        del labels

    def observe_retry(self, **labels: Any) -> None:
        del labels


class PrometheusMetricsRecorder:
    """Recorder exporting ``<prefix>_resource_*`` collectors.

    Recorders built on the same registry share collectors.
    """

    def __init__(self, *, registry: Any | None = None, prefix: str = "arubacloud") -> None:
        prometheus_client = _import_prometheus_client()
        self._registry = prometheus_client.REGISTRY if registry is None else registry
        self._prefix = _sanitize_label(prefix, default="arubacloud")
        for attribute, kind, suffix, help_text, labelnames in _COLLECTORS:
            setattr(
                self,
                attribute,
                self._collector(prometheus_client, kind, suffix, help_text, labelnames),
            )

    def _collector(
        self,
        prometheus_client: Any,
        kind: str,
        suffix: str,
        help_text: str,
        labelnames: tuple[str, ...],
    ) -> Any:
        name = f"{self._prefix}_{suffix}"
        existing = getattr(self._registry, "_names_to_collectors", {}).get(name)
        if existing is not None:
            return existing
        options: dict[str, Any] = {"labelnames": labelnames, "registry": self._registry}
        if kind == "Histogram":
            options["buckets"] = _LATENCY_BUCKETS
        return getattr(prometheus_client, kind)(name, help_text, **options)

    def observe_operation(
        self,
        *,
        resource: str,
        operation: str,
        duration_seconds: float,
        success: bool,
    ) -> None:
        labels = {
            "resource": _sanitize_label(resource),
            "operation": _sanitize_label(operation),
            "status": "success" if success else "error",
        }
        self._latency.labels(**labels).observe(max(0.0, duration_seconds))
        self._throughput.labels(**labels).inc()

    def observe_error(self, *, resource: str, operation: str, error_type: str) -> None:
        self._errors.labels(
            resource=_sanitize_label(resource),
            operation=_sanitize_label(operation),
            error_type=_sanitize_label(error_type),
        ).inc()

    def observe_retry(self, *, resource: str, operation: str, reason: str) -> None:
        self._retries.labels(
            resource=_sanitize_label(resource),
            operation=_sanitize_label(operation),
            reason=_sanitize_label(reason),
        ).inc()


_NOOP_RECORDER = NoopMetricsRecorder()
_DEFAULT_RECORDER: MetricsRecorder = _NOOP_RECORDER


def get_metrics_recorder() -> MetricsRecorder:
    """Return the recorder used by adapters built without an explicit one."""
    return _DEFAULT_RECORDER


def set_metrics_recorder(recorder: MetricsRecorder | None) -> MetricsRecorder:
    """Replace the process-level recorder; ``None`` switches back to no-op."""
    global _DEFAULT_RECORDER
    _DEFAULT_RECORDER = _NOOP_RECORDER if recorder is None else recorder
    return _DEFAULT_RECORDER


def reset_metrics_recorder() -> None:
    set_metrics_recorder(None)


def configure_prometheus_metrics(
    *,
    registry: Any | None = None,
    prefix: str = "arubacloud",
    set_default: bool = True,
) -> PrometheusMetricsRecorder:
    """Build a Prometheus recorder and, by default, make it the process-level one."""
    recorder = PrometheusMetricsRecorder(registry=registry, prefix=prefix)
    if set_default:
        set_metrics_recorder(recorder)
    return recorder

"""Logging, metrics and tracing helpers."""

from arubacloud_provider.observability.logging import (
    JsonFormatter,
    ReconcileFields,
    TextFormatter,
    bootstrap_logging,
    bootstrap_logging_from_settings,
    get_reconcile_fields,
    reconcile_scope,
)
from arubacloud_provider.observability.metrics import (
    MetricsRecorder,
    NoopMetricsRecorder,
    PrometheusMetricsRecorder,
    configure_prometheus_metrics,
    get_metrics_recorder,
    reset_metrics_recorder,
    set_metrics_recorder,
)
from arubacloud_provider.observability.observable import ObservableMixin
from arubacloud_provider.observability.tracing import start_span

__all__ = [
    "JsonFormatter",
    "MetricsRecorder",
    "NoopMetricsRecorder",
    "ObservableMixin",
    "PrometheusMetricsRecorder",
    "ReconcileFields",
    "TextFormatter",
    "bootstrap_logging",
    "bootstrap_logging_from_settings",
    "configure_prometheus_metrics",
    "get_metrics_recorder",
    "get_reconcile_fields",
    "reconcile_scope",
    "reset_metrics_recorder",
    "set_metrics_recorder",
    "start_span",
]

"""Tests for the Prometheus metrics recorder."""

from __future__ import annotations

import pytest

from arubacloud_provider.observability.metrics import (
    NoopMetricsRecorder,
    PrometheusMetricsRecorder,
    configure_prometheus_metrics,
    get_metrics_recorder,
    set_metrics_recorder,
)

prometheus_client = pytest.importorskip("prometheus_client")


def test_prometheus_metrics_registration_and_samples() -> None:
    registry = prometheus_client.CollectorRegistry()
    recorder = PrometheusMetricsRecorder(registry=registry)

    recorder.observe_operation(
        resource="VPC",
        operation="delete_retry",
        duration_seconds=30.0,
        success=True,
    )
    recorder.observe_operation(
        resource="VPC",
        operation="delete_retry",
        duration_seconds=600.0,
        success=False,
    )
    recorder.observe_error(
        resource="VPC",
        operation="delete_retry",
        error_type="DeleteTimeoutError",
    )
    recorder.observe_retry(
        resource="VPC",
        operation="delete_retry",
        reason="retryable_dependency",
    )

    assert registry.get_sample_value(
        "arubacloud_resource_throughput_total",
        {"resource": "vpc", "operation": "delete_retry", "status": "success"},
    ) == 1.0
    assert registry.get_sample_value(
        "arubacloud_resource_throughput_total",
        {"resource": "vpc", "operation": "delete_retry", "status": "error"},
    ) == 1.0
    assert registry.get_sample_value(
        "arubacloud_resource_errors_total",
        {"resource": "vpc", "operation": "delete_retry", "error_type": "deletetimeouterror"},
    ) == 1.0
    assert registry.get_sample_value(
        "arubacloud_resource_retries_total",
        {"resource": "vpc", "operation": "delete_retry", "reason": "retryable_dependency"},
    ) == 1.0
    assert registry.get_sample_value(
        "arubacloud_resource_latency_seconds_count",
        {"resource": "vpc", "operation": "delete_retry", "status": "success"},
    ) == 1.0


def test_recorders_share_collectors_in_one_registry() -> None:
    registry = prometheus_client.CollectorRegistry()
    first = PrometheusMetricsRecorder(registry=registry)
    second = PrometheusMetricsRecorder(registry=registry)

    first.observe_retry(resource="KaaS", operation="wait_ready", reason="transitional")
    second.observe_retry(resource="KaaS", operation="wait_ready", reason="transitional")

    assert registry.get_sample_value(
        "arubacloud_resource_retries_total",
        {"resource": "kaas", "operation": "wait_ready", "reason": "transitional"},
    ) == 2.0


def test_configure_prometheus_metrics_sets_default() -> None:
    previous = get_metrics_recorder()
    registry = prometheus_client.CollectorRegistry()
    try:
        recorder = configure_prometheus_metrics(registry=registry)
        assert get_metrics_recorder() is recorder

        set_metrics_recorder(None)
        assert isinstance(get_metrics_recorder(), NoopMetricsRecorder)
    finally:
        set_metrics_recorder(previous)


def test_custom_prefix_is_sanitized() -> None:
    registry = prometheus_client.CollectorRegistry()
    recorder = configure_prometheus_metrics(
        registry=registry, prefix="Aruba Cloud", set_default=False
    )

    recorder.observe_error(resource="api", operation="get", error_type="TransportError")

    assert isinstance(get_metrics_recorder(), NoopMetricsRecorder)
    assert registry.get_sample_value(
        "aruba_cloud_resource_errors_total",
        {"resource": "api", "operation": "get", "error_type": "transporterror"},
    ) == 1.0

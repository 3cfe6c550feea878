"""Reusable metrics mixin for the client, the core loops and the adapters."""

from __future__ import annotations

from time import perf_counter
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from arubacloud_provider.observability.metrics import MetricsRecorder


class ObservableMixin:
    """Mixin providing ``_observe_operation``, ``_observe_error`` and ``_observe_retry``.

    Subclasses set ``_metrics_resource`` and may provide ``_metrics`` to
    override the process-level recorder.
    """

    _metrics_resource: str
    _metrics: MetricsRecorder | None

    def _metrics_recorder(self) -> MetricsRecorder:
        from arubacloud_provider.observability.metrics import get_metrics_recorder

        return get_metrics_recorder() if self._metrics is None else self._metrics

    def _observe_operation(
        self,
        operation: str,
        started: float,
        *,
        success: bool,
        resource: str | None = None,
    ) -> None:
        self._metrics_recorder().observe_operation(
            resource=resource or self._metrics_resource,
            operation=operation,
            duration_seconds=perf_counter() - started,
            success=success,
        )

    def _observe_error(
        self,
        operation: str,
        started: float,
        exc: BaseException,
        *,
        resource: str | None = None,
    ) -> None:
        self._observe_operation(operation, started, success=False, resource=resource)
        self._metrics_recorder().observe_error(
            resource=resource or self._metrics_resource,
            operation=operation,
            error_type=type(exc).__name__,
        )

    def _observe_retry(self, operation: str, reason: str, *, resource: str | None = None) -> None:
        self._metrics_recorder().observe_retry(
            resource=resource or self._metrics_resource,
            operation=operation,
            reason=reason,
        )

"""Retrying Deleter: drives a DELETE to success under transient and dependency errors."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from time import perf_counter
from typing import ClassVar

from arubacloud_provider.api.envelope import ApiResponse, ErrorInfo, introspect
from arubacloud_provider.core.classifier import (
    Verdict,
    classify,
    classify_transport_error,
    error_message,
)
from arubacloud_provider.core.context import ReconcileContext, format_duration
from arubacloud_provider.errors import DeleteTimeoutError, OperationCancelledError, TransportError
from arubacloud_provider.observability.metrics import MetricsRecorder
from arubacloud_provider.observability.observable import ObservableMixin

logger = logging.getLogger(__name__)

DEFAULT_RETRY_INTERVAL_SECONDS = 5.0
DEFAULT_MAX_RETRY_INTERVAL_SECONDS = 30.0

_OPERATION = "delete_retry"

DeleteCall = Callable[[], Awaitable[ApiResponse]]
Introspector = Callable[[object], ErrorInfo]


@dataclass(slots=True)
class RetryingDeleter(ObservableMixin):
    """Calls a delete closure until it succeeds, the resource is gone, or time runs out.

    Backoff after the n-th failed attempt is ``min(interval * n, max_interval)``,
    i.e. 5, 10, 15, 20, 25, 30, 30, ... seconds with the defaults.
    """

    _metrics_resource: ClassVar[str] = "resource"

    retry_interval_seconds: float = DEFAULT_RETRY_INTERVAL_SECONDS
    max_retry_interval_seconds: float = DEFAULT_MAX_RETRY_INTERVAL_SECONDS
    _metrics: MetricsRecorder | None = None

    def backoff_seconds(self, attempt: int) -> float:
        """Delay before the retry that follows failed attempt number ``attempt``."""
        return min(self.retry_interval_seconds * max(1, attempt), self.max_retry_interval_seconds)

    async def delete(
        self,
        ctx: ReconcileContext,
        delete_call: DeleteCall,
        resource_type: str,
        resource_id: str,
        timeout_seconds: float,
        *,
        introspector: Introspector = introspect,
    ) -> Verdict:
        """Run ``delete_call`` with retries; return ``Verdict.OK`` or ``Verdict.GONE``.

        Only :class:`TransportError` is caught from ``delete_call``; anything
        else propagates.

        Raises:
            DeleteTimeoutError: If the timeout passes while the delete keeps failing.
            OperationCancelledError: If the host cancels before an attempt or
                during a backoff sleep.
        """
        started = perf_counter()
        entered_at = ctx.clock.now()
        deadline = entered_at + max(0.0, timeout_seconds)
        attempt = 0
        last_error: str | None = None
        last_verdict: Verdict | None = None
        log_fields = {"resource_type": resource_type, "resource_id": resource_id}

        logger.info("Attempting to delete %s %s", resource_type, resource_id, extra=log_fields)

        while True:
            if ctx.cancelled:
                raise self._cancelled(
                    f"context cancelled while deleting {resource_type} {resource_id}",
                    ctx,
                    entered_at,
                    started,
                    resource_type,
                )
            if ctx.clock.now() > deadline:
                exc = DeleteTimeoutError(
                    f"timeout waiting to delete {resource_type} {resource_id} "
                    f"(timeout: {format_duration(timeout_seconds)}, attempts: {attempt}): "
                    f"{last_error}",
                    timeout_seconds=timeout_seconds,
                    attempts=attempt,
                    last_error=last_error,
                    last_verdict=last_verdict,
                )
                self._observe_error(_OPERATION, started, exc, resource=resource_type)
                raise exc

            attempt += 1
            try:
                response = await delete_call()
            except TransportError as exc:
                last_error = str(exc)
                last_verdict = classify_transport_error(exc)
                logger.info(
                    "%s %s deletion failed with network/connection error: %s. "
                    "Retrying (attempt %d)...",
                    resource_type,
                    resource_id,
                    last_error,
                    attempt,
                    extra={**log_fields, "attempt": attempt, "verdict": last_verdict.value},
                )
            else:
                info = introspector(response)
                verdict = classify(info)
                if verdict.is_success:
                    message = (
                        "%s %s already deleted (404)"
                        if verdict is Verdict.GONE
                        else "Successfully deleted %s %s"
                    )
                    logger.info(
                        message,
                        resource_type,
                        resource_id,
                        extra={**log_fields, "attempt": attempt},
                    )
                    self._observe_operation(
                        _OPERATION, started, success=True, resource=resource_type
                    )
                    return verdict

                last_error = (
                    error_message(info.title, info.detail)
                    or f"API error (status: {info.status_code})"
                )
                last_verdict = verdict
                hint = ""
                if verdict is Verdict.RETRYABLE_DEPENDENCY:
                    hint = " (dependent resources may still be deleting)"
                logger.info(
                    "%s %s deletion failed: %s%s. Retrying (attempt %d)...",
                    resource_type,
                    resource_id,
                    last_error,
                    hint,
                    attempt,
                    extra={
                        **log_fields,
                        "attempt": attempt,
                        "verdict": verdict.value,
                        "status_code": info.status_code,
                    },
                )

            self._observe_retry(_OPERATION, last_verdict.value, resource=resource_type)
            if not await ctx.sleep(self.backoff_seconds(attempt)):
                raise self._cancelled(
                    f"context cancelled while waiting to delete {resource_type} {resource_id}",
                    ctx,
                    entered_at,
                    started,
                    resource_type,
                )

    def _cancelled(
        self,
        message: str,
        ctx: ReconcileContext,
        entered_at: float,
        started: float,
        resource_type: str,
    ) -> OperationCancelledError:
        exc = OperationCancelledError(message, elapsed_seconds=ctx.clock.now() - entered_at)
        self._observe_error(_OPERATION, started, exc, resource=resource_type)
        return exc

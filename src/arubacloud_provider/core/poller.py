"""Readiness Poller: waits for a resource to leave its transitional states."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from time import perf_counter
from typing import ClassVar

from arubacloud_provider.core.context import ReconcileContext, format_duration
from arubacloud_provider.errors import OperationCancelledError, WaitTimeoutError
from arubacloud_provider.observability.metrics import MetricsRecorder
from arubacloud_provider.observability.observable import ObservableMixin

logger = logging.getLogger(__name__)

TRANSITIONAL_STATES = frozenset({"InCreation", "Creating", "Deleting", "Pending", "Provisioning"})

DEFAULT_POLL_INTERVAL_SECONDS = 5.0

_OPERATION = "wait_ready"

StateChecker = Callable[[], Awaitable[str]]


def is_ready_state(state: str) -> bool:
    """Any state outside :data:`TRANSITIONAL_STATES` is ready ("Active", "InUse", ...)."""
    return state not in TRANSITIONAL_STATES


@dataclass(slots=True)
class ReadinessPoller(ObservableMixin):
    """Polls a state checker at a fixed interval until the state is ready.

    The first check happens one full interval after entry. The deadline is
    evaluated after each sleep and before the check, so a zero timeout fails
    without calling the checker.
    """

    _metrics_resource: ClassVar[str] = "resource"

    interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS
    _metrics: MetricsRecorder | None = None

    async def wait_until_ready(
        self,
        ctx: ReconcileContext,
        checker: StateChecker,
        resource_type: str,
        resource_id: str,
        timeout_seconds: float,
    ) -> str:
        """Return the first ready state reported by ``checker``.

        Checker exceptions are logged and the next tick retries.

        Raises:
            WaitTimeoutError: If the deadline passes before a ready state.
            OperationCancelledError: If the host cancels while polling.
        """
        started = perf_counter()
        entered_at = ctx.clock.now()
        deadline = entered_at + timeout_seconds
        last_state: str | None = None

        logger.info(
            "Waiting for %s %s to become active",
            resource_type,
            resource_id,
            extra={"resource_type": resource_type, "resource_id": resource_id},
        )

        while True:
            if not await ctx.sleep(self.interval_seconds):
                elapsed = ctx.clock.now() - entered_at
                exc = OperationCancelledError(
                    f"context cancelled while waiting for {resource_type} {resource_id}",
                    elapsed_seconds=elapsed,
                )
                self._observe_error(_OPERATION, started, exc, resource=resource_type)
                raise exc

            now = ctx.clock.now()
            if now > deadline:
                elapsed = now - entered_at
                exc = WaitTimeoutError(
                    f"timeout waiting for {resource_type} {resource_id} to become active "
                    f"(timeout: {format_duration(timeout_seconds)}, "
                    f"elapsed: {format_duration(elapsed)})",
                    timeout_seconds=timeout_seconds,
                    elapsed_seconds=elapsed,
                    last_state=last_state,
                )
                self._observe_error(_OPERATION, started, exc, resource=resource_type)
                raise exc

            try:
                state = await checker()
            except Exception as exc:
                logger.warning(
                    "Error checking %s %s status: %s",
                    resource_type,
                    resource_id,
                    exc,
                    extra={"resource_type": resource_type, "resource_id": resource_id},
                )
                self._observe_retry(_OPERATION, "check_error", resource=resource_type)
                continue

            last_state = state
            if is_ready_state(state):
                logger.info(
                    "%s %s is now active (state: %s)",
                    resource_type,
                    resource_id,
                    state,
                    extra={
                        "resource_type": resource_type,
                        "resource_id": resource_id,
                        "state": state,
                        "elapsed_seconds": ctx.clock.now() - entered_at,
                    },
                )
                self._observe_operation(_OPERATION, started, success=True, resource=resource_type)
                return state

            logger.debug(
                "%s %s is still in state: %s, waiting...",
                resource_type,
                resource_id,
                state,
                extra={"resource_type": resource_type, "resource_id": resource_id, "state": state},
            )
            self._observe_retry(_OPERATION, "transitional", resource=resource_type)

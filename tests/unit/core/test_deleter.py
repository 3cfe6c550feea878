"""Tests for the retrying deleter."""

from __future__ import annotations

import logging
from typing import Any

import pytest
from fakes import FakeClock, FakeResponse, FakeSession, error, ok, token_response
from pydantic import SecretStr

from arubacloud_provider.api.client import ArubaCloudClient
from arubacloud_provider.api.envelope import ApiResponse, ErrorInfo
from arubacloud_provider.config import Credentials
from arubacloud_provider.core.classifier import Verdict
from arubacloud_provider.core.context import ReconcileContext
from arubacloud_provider.core.deleter import RetryingDeleter
from arubacloud_provider.errors import (
    DeleteTimeoutError,
    OperationCancelledError,
    TransportError,
)


class ScriptedDelete:
    """Delete closure replaying outcomes; the last one repeats."""

    def __init__(self, clock: FakeClock, *outcomes: Any) -> None:
        self._clock = clock
        self._outcomes = list(outcomes)
        self.calls: list[float] = []

    async def __call__(self) -> ApiResponse:
        self.calls.append(self._clock.now())
        outcome = self._outcomes.pop(0) if len(self._outcomes) > 1 else self._outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class TestBackoff:
    def test_schedule_is_linear_then_capped(self) -> None:
        deleter = RetryingDeleter()
        assert [deleter.backoff_seconds(n) for n in range(1, 9)] == [
            5, 10, 15, 20, 25, 30, 30, 30,
        ]

    def test_custom_intervals(self) -> None:
        deleter = RetryingDeleter(retry_interval_seconds=2, max_retry_interval_seconds=5)
        assert [deleter.backoff_seconds(n) for n in range(1, 5)] == [2, 4, 5, 5]


class TestDelete:
    async def test_success_on_first_attempt(self, clock: FakeClock, ctx: ReconcileContext) -> None:
        call = ScriptedDelete(clock, ok(status=204))

        verdict = await RetryingDeleter().delete(ctx, call, "VPC", "vpc-1", 600)

        assert verdict is Verdict.OK
        assert call.calls == [0.0]
        assert clock.sleeps == []

    async def test_not_found_counts_as_deleted(
        self,
        clock: FakeClock,
        ctx: ReconcileContext,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        call = ScriptedDelete(clock, error(404, "Not Found"))

        with caplog.at_level(logging.INFO, logger="arubacloud_provider.core.deleter"):
            verdict = await RetryingDeleter().delete(ctx, call, "VPC", "vpc-1", 600)

        assert verdict is Verdict.GONE
        assert len(call.calls) == 1
        assert "VPC vpc-1 already deleted (404)" in caplog.text

    async def test_dependency_conflict_retries_with_backoff(
        self,
        clock: FakeClock,
        ctx: ReconcileContext,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        conflict = error(409, "Conflict", "VPC has subnets")
        call = ScriptedDelete(clock, conflict, conflict, conflict, ok(status=204))

        with caplog.at_level(logging.INFO, logger="arubacloud_provider.core.deleter"):
            verdict = await RetryingDeleter().delete(ctx, call, "VPC", "vpc-1", 600)

        assert verdict is Verdict.OK
        assert clock.sleeps == [5, 10, 15]
        assert call.calls == [0.0, 5.0, 15.0, 30.0]
        assert (
            "VPC vpc-1 deletion failed: Conflict: VPC has subnets "
            "(dependent resources may still be deleting). Retrying (attempt 1)..."
        ) in caplog.text

    async def test_timeout_reports_attempts_and_last_error(
        self, clock: FakeClock, ctx: ReconcileContext
    ) -> None:
        call = ScriptedDelete(clock, error(409, "Conflict", "VPC has subnets"))

        with pytest.raises(DeleteTimeoutError) as exc_info:
            await RetryingDeleter().delete(ctx, call, "VPC", "vpc-1", 20)

        exc = exc_info.value
        assert call.calls == [0.0, 5.0, 15.0]
        assert exc.attempts == 3
        assert exc.last_error == "Conflict: VPC has subnets"
        assert exc.last_verdict is Verdict.RETRYABLE_DEPENDENCY
        assert exc.timeout_seconds == 20
        assert str(exc) == (
            "timeout waiting to delete VPC vpc-1 (timeout: 20s, attempts: 3): "
            "Conflict: VPC has subnets"
        )

    async def test_timeout_zero_still_attempts_once(
        self, clock: FakeClock, ctx: ReconcileContext
    ) -> None:
        call = ScriptedDelete(clock, ok(status=204))
        assert await RetryingDeleter().delete(ctx, call, "VPC", "vpc-1", 0) is Verdict.OK
        assert len(call.calls) == 1

    async def test_error_without_details_uses_status(
        self, clock: FakeClock, ctx: ReconcileContext
    ) -> None:
        call = ScriptedDelete(clock, ApiResponse(status_code=503))

        with pytest.raises(DeleteTimeoutError) as exc_info:
            await RetryingDeleter().delete(ctx, call, "VPC", "vpc-1", 4)

        assert exc_info.value.last_error == "API error (status: 503)"
        assert exc_info.value.last_verdict is Verdict.RETRYABLE
        assert exc_info.value.attempts == 1

    async def test_transport_errors_are_retried(
        self, clock: FakeClock, ctx: ReconcileContext
    ) -> None:
        call = ScriptedDelete(
            clock,
            TransportError("delete", "connection reset by peer"),
            ok(status=202),
        )

        verdict = await RetryingDeleter().delete(ctx, call, "Subnet", "sn-1", 600)

        assert verdict is Verdict.OK
        assert call.calls == [0.0, 5.0]

    async def test_token_endpoint_outage_is_retried(
        self, clock: FakeClock, ctx: ReconcileContext
    ) -> None:
        session = FakeSession(
            FakeResponse(503, {"error": "temporarily_unavailable"}),
            token_response(),
            FakeResponse(204),
        )
        client = ArubaCloudClient(
            base_url="https://api.example.test",
            token_url="https://login.example.test/token",
            _credentials=Credentials(api_key=SecretStr("k"), api_secret=SecretStr("s")),
            _session=session,
        )

        verdict = await RetryingDeleter().delete(
            ctx, lambda: client.delete("/vpcs/vpc-1"), "VPC", "vpc-1", 600
        )

        assert verdict is Verdict.OK
        assert clock.sleeps == [5.0]
        assert [request["method"] for request in session.requests] == ["POST", "POST", "DELETE"]

    async def test_other_exceptions_propagate(
        self, clock: FakeClock, ctx: ReconcileContext
    ) -> None:
        call = ScriptedDelete(clock, ValueError("bad path"))

        with pytest.raises(ValueError, match="bad path"):
            await RetryingDeleter().delete(ctx, call, "VPC", "vpc-1", 600)

        assert clock.sleeps == []

    async def test_cancel_during_backoff(self, clock: FakeClock, ctx: ReconcileContext) -> None:
        call = ScriptedDelete(clock, error(500, "Internal Server Error"))
        clock.schedule(7.0, ctx.cancel)

        with pytest.raises(OperationCancelledError) as exc_info:
            await RetryingDeleter().delete(ctx, call, "VPC", "vpc-1", 600)

        assert call.calls == [0.0, 5.0]
        assert clock.now() == 7.0
        assert str(exc_info.value) == "context cancelled while waiting to delete VPC vpc-1"

    async def test_cancelled_before_first_attempt(
        self, clock: FakeClock, ctx: ReconcileContext
    ) -> None:
        ctx.cancel()
        call = ScriptedDelete(clock, ok())

        with pytest.raises(OperationCancelledError, match="context cancelled while deleting"):
            await RetryingDeleter().delete(ctx, call, "VPC", "vpc-1", 600)

        assert call.calls == []

    async def test_custom_introspector(self, clock: FakeClock, ctx: ReconcileContext) -> None:
        seen: list[Any] = []

        def introspector(response: object) -> ErrorInfo:
            seen.append(response)
            return ErrorInfo(404, "Not Found", None, True)

        call = ScriptedDelete(clock, ok())
        verdict = await RetryingDeleter().delete(
            ctx, call, "VPC", "vpc-1", 600, introspector=introspector
        )

        assert verdict is Verdict.GONE
        assert len(seen) == 1

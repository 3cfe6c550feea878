"""Tests for the readiness poller."""

from __future__ import annotations

import logging
from unittest.mock import AsyncMock, MagicMock

import pytest
from fakes import FakeClock

from arubacloud_provider.core.context import ReconcileContext
from arubacloud_provider.core.poller import ReadinessPoller, is_ready_state
from arubacloud_provider.errors import (
    OperationCancelledError,
    ReconcileTimeoutError,
    WaitTimeoutError,
)
from arubacloud_provider.observability.metrics import NoopMetricsRecorder


def scripted_checker(clock: FakeClock, states: list[str]) -> AsyncMock:
    """Checker returning ``states`` in order and recording the virtual time of each call."""
    seen: list[float] = []
    remaining = list(states)

    async def check() -> str:
        seen.append(clock.now())
        return remaining.pop(0) if len(remaining) > 1 else remaining[0]

    checker = AsyncMock(side_effect=check)
    checker.seen = seen
    return checker


class TestIsReadyState:
    @pytest.mark.parametrize(
        "state", ["InCreation", "Creating", "Deleting", "Pending", "Provisioning"]
    )
    def test_transitional_states(self, state: str) -> None:
        assert not is_ready_state(state)

    @pytest.mark.parametrize("state", ["Active", "InUse", "NotUsed", "Unknown", "Failed"])
    def test_everything_else_is_ready(self, state: str) -> None:
        assert is_ready_state(state)


class TestWaitUntilReady:
    async def test_ready_after_three_polls(self, clock: FakeClock, ctx: ReconcileContext) -> None:
        checker = scripted_checker(clock, ["InCreation", "InCreation", "Active"])
        poller = ReadinessPoller()

        state = await poller.wait_until_ready(ctx, checker, "VPC", "vpc-1", 600)

        assert state == "Active"
        assert checker.seen == [5.0, 10.0, 15.0]
        assert clock.now() == 15.0

    async def test_first_check_after_one_interval(
        self, clock: FakeClock, ctx: ReconcileContext
    ) -> None:
        checker = scripted_checker(clock, ["Active"])

        await ReadinessPoller(interval_seconds=2.0).wait_until_ready(
            ctx, checker, "VPC", "vpc-1", 60
        )

        assert checker.seen == [2.0]

    async def test_any_non_transitional_state_is_ready(
        self, clock: FakeClock, ctx: ReconcileContext
    ) -> None:
        checker = scripted_checker(clock, ["Failed"])
        assert await ReadinessPoller().wait_until_ready(ctx, checker, "VPC", "v", 60) == "Failed"

    async def test_cancelled_between_polls(self, clock: FakeClock, ctx: ReconcileContext) -> None:
        checker = scripted_checker(clock, ["InCreation"])
        clock.schedule(7.0, ctx.cancel)

        with pytest.raises(OperationCancelledError) as exc_info:
            await ReadinessPoller().wait_until_ready(ctx, checker, "Subnet", "sn-1", 600)

        assert checker.seen == [5.0]
        assert clock.now() == 7.0
        assert exc_info.value.elapsed_seconds == 7.0
        assert str(exc_info.value) == "context cancelled while waiting for Subnet sn-1"
        assert not isinstance(exc_info.value, ReconcileTimeoutError)

    async def test_already_cancelled_context_makes_no_check(
        self, clock: FakeClock, ctx: ReconcileContext
    ) -> None:
        ctx.cancel()
        checker = scripted_checker(clock, ["Active"])

        with pytest.raises(OperationCancelledError):
            await ReadinessPoller().wait_until_ready(ctx, checker, "VPC", "v", 600)

        checker.assert_not_called()

    async def test_timeout_reports_elapsed_and_last_state(
        self, clock: FakeClock, ctx: ReconcileContext
    ) -> None:
        checker = scripted_checker(clock, ["InCreation"])

        with pytest.raises(WaitTimeoutError) as exc_info:
            await ReadinessPoller().wait_until_ready(ctx, checker, "KaaS", "k-1", 12)

        exc = exc_info.value
        assert checker.seen == [5.0, 10.0]
        assert exc.timeout_seconds == 12
        assert exc.elapsed_seconds == 15.0
        assert exc.last_state == "InCreation"
        assert str(exc) == (
            "timeout waiting for KaaS k-1 to become active (timeout: 12s, elapsed: 15s)"
        )

    async def test_timeout_zero_fails_without_checking(
        self, clock: FakeClock, ctx: ReconcileContext
    ) -> None:
        checker = scripted_checker(clock, ["Active"])

        with pytest.raises(WaitTimeoutError):
            await ReadinessPoller().wait_until_ready(ctx, checker, "VPC", "v", 0)

        checker.assert_not_called()
        assert clock.sleeps == [5.0]

    async def test_checker_errors_are_logged_and_polling_continues(
        self,
        clock: FakeClock,
        ctx: ReconcileContext,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        calls = 0

        async def flaky() -> str:
            nonlocal calls
            calls += 1
            if calls == 1:
                raise RuntimeError("connection refused")
            return "Active"

        with caplog.at_level(logging.WARNING, logger="arubacloud_provider.core.poller"):
            state = await ReadinessPoller().wait_until_ready(ctx, flaky, "VPC", "vpc-1", 600)

        assert state == "Active"
        assert calls == 2
        assert clock.now() == 10.0
        assert "Error checking VPC vpc-1 status: connection refused" in caplog.text

    async def test_ambient_deadline_counts_as_cancellation(self, clock: FakeClock) -> None:
        ctx = ReconcileContext.with_timeout(7.0, clock=clock)
        checker = scripted_checker(clock, ["InCreation"])

        with pytest.raises(OperationCancelledError):
            await ReadinessPoller().wait_until_ready(ctx, checker, "VPC", "v", 600)

        assert clock.now() == 7.0

    async def test_metrics_record_retries_and_success(
        self, clock: FakeClock, ctx: ReconcileContext
    ) -> None:
        recorder = MagicMock(spec=NoopMetricsRecorder)
        checker = scripted_checker(clock, ["Pending", "Active"])

        await ReadinessPoller(_metrics=recorder).wait_until_ready(ctx, checker, "VPC", "v", 60)

        recorder.observe_retry.assert_called_once_with(
            resource="VPC", operation="wait_ready", reason="transitional"
        )
        kwargs = recorder.observe_operation.call_args.kwargs
        assert kwargs["operation"] == "wait_ready"
        assert kwargs["success"] is True

"""Shared fixtures for unit tests."""

from __future__ import annotations

import pytest
from fakes import FakeApi, FakeClock

from arubacloud_provider.core.context import ReconcileContext
from arubacloud_provider.core.deleter import RetryingDeleter
from arubacloud_provider.core.poller import ReadinessPoller
from arubacloud_provider.observability.metrics import reset_metrics_recorder
from arubacloud_provider.provider import ProviderClient

# ── Fixtures ──────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def _reset_metrics() -> None:
    reset_metrics_recorder()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def ctx(clock: FakeClock) -> ReconcileContext:
    return ReconcileContext(clock=clock)


@pytest.fixture()
def api() -> FakeApi:
    return FakeApi()


@pytest.fixture()
def provider_client(api: FakeApi) -> ProviderClient:
    return ProviderClient(
        api=api,  # type: ignore[arg-type]
        resource_timeout_seconds=600.0,
        poller=ReadinessPoller(interval_seconds=5.0),
        deleter=RetryingDeleter(),
    )

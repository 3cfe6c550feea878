"""Tests for ArubaCloudProvider and the adapter registry."""

from __future__ import annotations

import logging

import pytest
from fakes import FakeSession

from arubacloud_provider import ArubaCloudProvider, ProviderClient
from arubacloud_provider.config import ConfigValidationError
from arubacloud_provider.errors import UnknownResourceTypeError
from arubacloud_provider.observability.logging import TextFormatter
from arubacloud_provider.resources import (
    DataSource,
    RestResource,
    VpcModel,
    VpcResource,
    get_factory,
    register_factory,
)
from arubacloud_provider.resources import registry as registry_module

ENVIRON = {"ARUBACLOUD_API_KEY": "key", "ARUBACLOUD_API_SECRET": "secret"}


@pytest.fixture()
def log_target() -> logging.Logger:
    return logging.getLogger("tests.provider.configure")


class TestConfigure:
    async def test_builds_client_from_settings(self, log_target: logging.Logger) -> None:
        session = FakeSession()
        provider = ArubaCloudProvider(version="1.0.0", log_target=log_target)

        client = await provider.configure(
            {"resource_timeout": "5m", "poll_interval_seconds": 2, "base_url": "https://x/"},
            environ=ENVIRON,
            session=session,
        )

        assert isinstance(client, ProviderClient)
        assert client.resource_timeout_seconds == 300.0
        assert client.poller.interval_seconds == 2.0
        assert client.deleter.retry_interval_seconds == 5.0
        assert client.api.base_url == "https://x"
        assert client.api.session is session
        await client.close()
        assert not session.closed

    async def test_default_timeout(self, log_target: logging.Logger) -> None:
        provider = ArubaCloudProvider(log_target=log_target)

        client = await provider.configure(environ=ENVIRON, session=FakeSession())

        assert client.resource_timeout_seconds == 600.0

    async def test_missing_credentials(self, log_target: logging.Logger) -> None:
        with pytest.raises(ConfigValidationError) as exc_info:
            await ArubaCloudProvider(log_target=log_target).configure(
                environ={}, session=FakeSession()
            )

        locations = [error["loc"] for error in exc_info.value.errors]
        assert locations == ["api_key", "api_secret"]

    async def test_applies_logging_settings(self, log_target: logging.Logger) -> None:
        provider = ArubaCloudProvider(log_target=log_target)

        client = await provider.configure(
            {"logging": {"level": "DEBUG", "format": "text"}},
            environ=ENVIRON,
            session=FakeSession(),
        )

        assert log_target.level == logging.DEBUG
        assert len(log_target.handlers) == 1
        assert isinstance(log_target.handlers[0].formatter, TextFormatter)
        await client.close()


class TestResourceLookup:
    def test_type_names(self) -> None:
        names = {factory.type_name for factory in ArubaCloudProvider().resources()}

        assert len(names) == 26
        assert {"vpc", "kaas", "dbaas", "kms_key", "schedulejob", "project"} <= names

    @pytest.mark.parametrize("type_name", ["vpc", "arubacloud_vpc"])
    def test_resource_by_name(self, provider_client: ProviderClient, type_name: str) -> None:
        resource = ArubaCloudProvider().resource(type_name, provider_client)

        assert isinstance(resource, VpcResource)
        assert resource.full_type_name() == "arubacloud_vpc"

    def test_unknown_type(self, provider_client: ProviderClient) -> None:
        with pytest.raises(UnknownResourceTypeError, match="arubacloud_nope"):
            ArubaCloudProvider().resource("arubacloud_nope", provider_client)

    def test_data_source_wraps_resource(self, provider_client: ProviderClient) -> None:
        source = ArubaCloudProvider().data_source("arubacloud_vpc", provider_client)

        assert isinstance(source, DataSource)
        assert source.type_name == "vpc"
        assert source.model is VpcModel


class TestRegisterFactory:
    def test_custom_factory_overrides_builtin(self, monkeypatch: pytest.MonkeyPatch) -> None:
        class CustomVpc(VpcResource):
            pass

        monkeypatch.setattr(registry_module, "_RESOURCE_FACTORIES", {})
        monkeypatch.setattr(registry_module, "_BUILTIN_FACTORIES_REGISTERED", False)

        register_factory(CustomVpc)
        factory: type[RestResource] = get_factory("arubacloud_vpc")

        assert factory is CustomVpc
        assert get_factory("subnet").type_name == "subnet"

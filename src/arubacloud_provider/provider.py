"""Provider entry point: configuration, shared client and adapter lookup."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from arubacloud_provider.api.client import ArubaCloudClient
from arubacloud_provider.config.loader import load_provider_settings, resolve_credentials
from arubacloud_provider.config.models import ProviderSettings
from arubacloud_provider.core.deleter import RetryingDeleter
from arubacloud_provider.core.poller import ReadinessPoller
from arubacloud_provider.observability.logging import bootstrap_logging_from_settings
from arubacloud_provider.observability.metrics import MetricsRecorder
from arubacloud_provider.resources.base import DataSource, RestResource
from arubacloud_provider.resources.registry import (
    ResourceFactory,
    get_factory,
    registered_factories,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ProviderClient:
    """Shared state handed to every adapter after ``configure``."""

    api: ArubaCloudClient
    resource_timeout_seconds: float
    poller: ReadinessPoller = field(default_factory=ReadinessPoller)
    deleter: RetryingDeleter = field(default_factory=RetryingDeleter)
    settings: ProviderSettings | None = None

    async def close(self) -> None:
        await self.api.close()


@dataclass(slots=True)
class ArubaCloudProvider:
    """Declarative provider for the ArubaCloud REST API.

    Example usage::

        provider = ArubaCloudProvider(version="1.0.0")
        client = await provider.configure({"api_key": "...", "api_secret": "..."})

        vpcs = provider.resource("arubacloud_vpc", client)
        state = await vpcs.create(ctx, VpcModel(project_id="p-1", name="main"))

        await client.close()
    """

    version: str = "dev"
    metrics: MetricsRecorder | None = None
    # Receives the handler built from the `logging` settings; defaults to the package logger.
    log_target: logging.Logger | None = None

    type_name: str = field(default="arubacloud", init=False)

    def resources(self) -> list[ResourceFactory]:
        return registered_factories()

    def data_sources(self) -> list[ResourceFactory]:
        return registered_factories()

    async def configure(
        self,
        config: Mapping[str, Any] | None = None,
        *,
        config_file: Path | str | None = None,
        environ: Mapping[str, str] | None = None,
        session: Any | None = None,
    ) -> ProviderClient:
        """Resolve settings and credentials and build the shared client.

        Raises:
            ConfigValidationError: If settings are invalid or credentials are missing.
            ConfigFileNotFoundError: If ``config_file`` does not exist.
        """
        settings = load_provider_settings(config, config_file=config_file)
        credentials = resolve_credentials(settings, environ=environ)
        bootstrap_logging_from_settings(settings, version=self.version, logger=self.log_target)

        api = ArubaCloudClient.create(settings, credentials, session=session, metrics=self.metrics)
        client = ProviderClient(
            api=api,
            resource_timeout_seconds=settings.resource_timeout_seconds,
            poller=ReadinessPoller(
                interval_seconds=settings.poll_interval_seconds,
                _metrics=self.metrics,
            ),
            deleter=RetryingDeleter(
                retry_interval_seconds=settings.delete_retry_interval_seconds,
                max_retry_interval_seconds=settings.delete_retry_max_interval_seconds,
                _metrics=self.metrics,
            ),
            settings=settings,
        )
        logger.info(
            "Configured ArubaCloud provider",
            extra={
                "provider_version": self.version,
                "base_url": settings.base_url,
                "resource_timeout_seconds": settings.resource_timeout_seconds,
            },
        )
        return client

    def resource(self, type_name: str, client: ProviderClient) -> RestResource[Any]:
        """Instantiate the adapter registered as ``type_name``.

        Raises:
            UnknownResourceTypeError: If no adapter is registered under the name.
        """
        return get_factory(type_name)(client, metrics=self.metrics)

    def data_source(self, type_name: str, client: ProviderClient) -> DataSource[Any]:
        return DataSource(self.resource(type_name, client))

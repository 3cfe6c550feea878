"""Tests for structured logging helpers."""

from __future__ import annotations

import json
import logging
from io import StringIO

from arubacloud_provider.config import ProviderSettings
from arubacloud_provider.observability.logging import (
    bootstrap_logging,
    bootstrap_logging_from_settings,
    get_reconcile_fields,
    reconcile_scope,
)


def test_json_logs_include_reconcile_fields() -> None:
    stream = StringIO()
    logger = logging.getLogger("tests.logging.reconcile_fields")

    bootstrap_logging(
        service="arubacloud-provider",
        version="1.2.3",
        level="INFO",
        log_format="json",
        logger=logger,
        stream=stream,
    )

    with reconcile_scope(resource_type="arubacloud_vpc", resource_id="vpc-1", operation="delete"):
        logger.info("Attempting to delete VPC vpc-1", extra={"attempt": 2})

    payload = json.loads(stream.getvalue().strip())

    assert payload["service"] == "arubacloud-provider"
    assert payload["version"] == "1.2.3"
    assert payload["level"] == "INFO"
    assert payload["message"] == "Attempting to delete VPC vpc-1"
    assert payload["resource_type"] == "arubacloud_vpc"
    assert payload["resource_id"] == "vpc-1"
    assert payload["operation"] == "delete"
    assert payload["attempt"] == 2
    assert payload["timestamp"].endswith("Z")


def test_text_format() -> None:
    stream = StringIO()
    logger = logging.getLogger("tests.logging.text")
    bootstrap_logging(log_format="text", logger=logger, stream=stream)

    with reconcile_scope(resource_type="arubacloud_subnet"):
        logger.warning("Error checking Subnet sn-1 status: boom")

    line = stream.getvalue().strip()
    assert "WARNING" in line
    assert "resource_type=arubacloud_subnet" in line
    assert "resource_id=-" in line


def test_reconcile_scope_nests_and_restores() -> None:
    with reconcile_scope(resource_type="arubacloud_vpc", operation="create"):
        with reconcile_scope(resource_id="vpc-9"):
            fields = get_reconcile_fields()
            assert fields.resource_type == "arubacloud_vpc"
            assert fields.resource_id == "vpc-9"
            assert fields.operation == "create"
        assert get_reconcile_fields().resource_id is None

    assert get_reconcile_fields().resource_type is None


def test_bootstrap_from_settings_uses_level_and_format() -> None:
    stream = StringIO()
    logger = logging.getLogger("tests.logging.from_settings")
    settings = ProviderSettings.model_validate({"logging": {"level": "DEBUG", "format": "text"}})

    configured = bootstrap_logging_from_settings(settings, logger=logger, stream=stream)
    configured.debug("still in state: InCreation")

    assert configured.level == logging.DEBUG
    assert "still in state: InCreation" in stream.getvalue()
    assert not stream.getvalue().lstrip().startswith("{")

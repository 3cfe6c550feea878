"""Typed provider settings with Pydantic validation."""

from __future__ import annotations

import logging
import re
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, SecretStr

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.arubacloud.com"
DEFAULT_TOKEN_URL = (
    "https://login.aruba.it/auth/realms/cmp-new-apikey/protocol/openid-connect/token"
)
DEFAULT_RESOURCE_TIMEOUT_SECONDS = 600.0

_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")
_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def parse_duration(value: str) -> float:
    """Parse a duration such as ``"5m"``, ``"1h30m"`` or ``"90s"`` into seconds.

    Raises:
        ValueError: If the value is not a valid duration.
    """
    text = value.strip()
    if text == "0":
        return 0.0
    if not text:
        raise ValueError("empty duration")

    seconds = 0.0
    position = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            break
        amount, unit = match.groups()
        seconds += float(amount) * _DURATION_UNITS[unit]
        position = match.end()

    if position != len(text):
        raise ValueError(f"invalid duration {value!r}")
    return seconds


class LoggingSettings(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(frozen=True)

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    format: Literal["json", "text"] = Field(default="json", description="Log output format")


class ProviderSettings(BaseModel):
    """Provider configuration block as written by the user."""

    model_config = ConfigDict(frozen=True)

    api_key: SecretStr | None = Field(
        default=None,
        description="API key for ArubaCloud; falls back to ARUBACLOUD_API_KEY",
    )
    api_secret: SecretStr | None = Field(
        default=None,
        description="API secret for ArubaCloud; falls back to ARUBACLOUD_API_SECRET",
    )
    resource_timeout: str | None = Field(
        default=None,
        description=(
            "Timeout for waiting for resources to become active after creation and "
            'for retried deletes (e.g. "5m", "10m"). Default: "10m"'
        ),
    )
    base_url: str = Field(default=DEFAULT_BASE_URL, min_length=1, description="API base URL")
    token_url: str = Field(
        default=DEFAULT_TOKEN_URL,
        min_length=1,
        description="OAuth2 token endpoint used with the API key and secret",
    )
    request_timeout_seconds: float = Field(
        default=30.0, gt=0.0, description="Timeout of a single HTTP request in seconds"
    )
    poll_interval_seconds: float = Field(
        default=5.0, gt=0.0, description="Interval between readiness checks in seconds"
    )
    delete_retry_interval_seconds: float = Field(
        default=5.0, gt=0.0, description="Backoff step between delete attempts in seconds"
    )
    delete_retry_max_interval_seconds: float = Field(
        default=30.0, gt=0.0, description="Upper bound of the delete backoff in seconds"
    )
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @property
    def resource_timeout_seconds(self) -> float:
        """Resolved resource timeout; invalid or missing values use the default."""
        if self.resource_timeout is None or self.resource_timeout.strip() == "":
            return DEFAULT_RESOURCE_TIMEOUT_SECONDS
        try:
            return parse_duration(self.resource_timeout)
        except ValueError:
            logger.warning(
                "Invalid resource_timeout %r, using default of %ss",
                self.resource_timeout,
                DEFAULT_RESOURCE_TIMEOUT_SECONDS,
            )
            return DEFAULT_RESOURCE_TIMEOUT_SECONDS

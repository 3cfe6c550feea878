"""Provider configuration loading and validation."""

from arubacloud_provider.config.errors import (
    ConfigError,
    ConfigFileNotFoundError,
    ConfigValidationError,
)
from arubacloud_provider.config.loader import (
    API_KEY_ENV_VAR,
    API_SECRET_ENV_VAR,
    Credentials,
    deep_merge,
    load_provider_settings,
    resolve_credentials,
)
from arubacloud_provider.config.models import (
    DEFAULT_RESOURCE_TIMEOUT_SECONDS,
    LoggingSettings,
    ProviderSettings,
    parse_duration,
)

__all__ = [
    "API_KEY_ENV_VAR",
    "API_SECRET_ENV_VAR",
    "ConfigError",
    "ConfigFileNotFoundError",
    "ConfigValidationError",
    "Credentials",
    "DEFAULT_RESOURCE_TIMEOUT_SECONDS",
    "LoggingSettings",
    "ProviderSettings",
    "deep_merge",
    "load_provider_settings",
    "parse_duration",
    "resolve_credentials",
]

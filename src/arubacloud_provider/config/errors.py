"""Configuration-specific exceptions."""

from __future__ import annotations

from arubacloud_provider.errors import ArubaCloudProviderError


class ConfigError(ArubaCloudProviderError):
    """Base exception for configuration errors."""


class ConfigFileNotFoundError(ConfigError):
    """Raised when a provider settings file is not found."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Provider settings file not found: {path}")


class ConfigValidationError(ConfigError):
    """Raised when provider configuration is invalid or incomplete.

    Each entry of ``errors`` is rooted at the configuration attribute that
    caused it, e.g. ``{"loc": "api_key", "msg": "..."}``.
    """

    def __init__(self, errors: list[dict[str, str]]) -> None:
        self.errors = errors
        messages = []
        for err in errors:
            loc = err.get("loc", "unknown")
            msg = err.get("msg", "validation error")
            messages.append(f"  - {loc}: {msg}")
        detail = "\n".join(messages)
        super().__init__(f"Provider configuration is invalid:\n{detail}")

    @property
    def paths(self) -> list[str]:
        """Configuration paths that failed validation, in report order."""
        return [err.get("loc", "unknown") for err in self.errors]

"""Provider settings loader and credential resolution."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import SecretStr, ValidationError

from arubacloud_provider.config.errors import ConfigFileNotFoundError, ConfigValidationError
from arubacloud_provider.config.models import ProviderSettings

API_KEY_ENV_VAR = "ARUBACLOUD_API_KEY"
API_SECRET_ENV_VAR = "ARUBACLOUD_API_SECRET"


@dataclass(frozen=True, slots=True)
class Credentials:
    """API key and secret after configuration/environment resolution."""

    api_key: SecretStr = field(repr=False)
    api_secret: SecretStr = field(repr=False)


def deep_merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries. Override values take precedence."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, Mapping):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def load_json_file(path: Path) -> dict[str, Any]:
    """Load and parse a JSON settings file.

    Raises:
        ConfigFileNotFoundError: If the file does not exist.
    """
    if not path.exists():
        raise ConfigFileNotFoundError(str(path))

    with path.open(encoding="utf-8") as f:
        return json.load(f)


def load_provider_settings(
    config: Mapping[str, Any] | None = None,
    *,
    config_file: Path | str | None = None,
) -> ProviderSettings:
    """Build validated provider settings.

    Values from ``config_file`` (a JSON object) are loaded first; the explicit
    ``config`` mapping, as handed over by the host runtime, overrides them.
    Attributes explicitly set to ``None`` are treated as absent.

    Raises:
        ConfigFileNotFoundError: If ``config_file`` does not exist.
        ConfigValidationError: If settings validation fails.
    """
    merged: dict[str, Any] = {}
    if config_file is not None:
        merged = load_json_file(Path(config_file))
    if config:
        explicit = {key: value for key, value in config.items() if value is not None}
        merged = deep_merge(merged, explicit)

    try:
        return ProviderSettings.model_validate(merged)
    except ValidationError as e:
        errors = [
            {"loc": ".".join(str(loc) for loc in err["loc"]), "msg": err["msg"]}
            for err in e.errors()
        ]
        raise ConfigValidationError(errors) from e


def resolve_credentials(
    settings: ProviderSettings,
    *,
    environ: Mapping[str, str] | None = None,
) -> Credentials:
    """Resolve credentials: explicit configuration first, then environment variables.

    Raises:
        ConfigValidationError: With one entry per attribute that is still empty,
            rooted at ``api_key`` / ``api_secret``.
    """
    env = os.environ if environ is None else environ

    api_key = _secret_value(settings.api_key) or env.get(API_KEY_ENV_VAR, "")
    api_secret = _secret_value(settings.api_secret) or env.get(API_SECRET_ENV_VAR, "")

    errors: list[dict[str, str]] = []
    if not api_key:
        errors.append(
            {
                "loc": "api_key",
                "msg": (
                    "Unknown ArubaCloud API Key. Set the value statically in the "
                    f"configuration or use the {API_KEY_ENV_VAR} environment variable."
                ),
            }
        )
    if not api_secret:
        errors.append(
            {
                "loc": "api_secret",
                "msg": (
                    "Unknown ArubaCloud API Secret. Set the value statically in the "
                    f"configuration or use the {API_SECRET_ENV_VAR} environment variable."
                ),
            }
        )
    if errors:
        raise ConfigValidationError(errors)

    return Credentials(api_key=SecretStr(api_key), api_secret=SecretStr(api_secret))


def _secret_value(value: SecretStr | None) -> str:
    if value is None:
        return ""
    return value.get_secret_value()

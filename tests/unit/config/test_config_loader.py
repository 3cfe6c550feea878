"""Tests for provider settings loading and credential resolution."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from arubacloud_provider.config import (
    API_KEY_ENV_VAR,
    API_SECRET_ENV_VAR,
    ConfigFileNotFoundError,
    ConfigValidationError,
    ProviderSettings,
    deep_merge,
    load_provider_settings,
    parse_duration,
    resolve_credentials,
)


class TestDeepMerge:
    """Tests for deep_merge function."""

    def test_nested_merge(self) -> None:
        base = {"a": {"x": 1, "y": 2}, "b": 3}
        override = {"a": {"y": 10, "z": 20}}
        assert deep_merge(base, override) == {"a": {"x": 1, "y": 10, "z": 20}, "b": 3}

    def test_override_dict_with_scalar(self) -> None:
        assert deep_merge({"a": {"x": 1}}, {"a": "replaced"}) == {"a": "replaced"}

    def test_does_not_mutate_original(self) -> None:
        base = {"a": {"x": 1}}
        deep_merge(base, {"a": {"y": 2}})
        assert base == {"a": {"x": 1}}


class TestParseDuration:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("5m", 300.0),
            ("10m", 600.0),
            ("90s", 90.0),
            ("1h30m", 5400.0),
            ("1.5h", 5400.0),
            ("500ms", 0.5),
            ("0", 0.0),
        ],
    )
    def test_valid(self, value: str, expected: float) -> None:
        assert parse_duration(value) == pytest.approx(expected)

    @pytest.mark.parametrize("value", ["", "10", "5x", "m5", "5m garbage"])
    def test_invalid(self, value: str) -> None:
        with pytest.raises(ValueError):
            parse_duration(value)


class TestProviderSettings:
    def test_defaults(self) -> None:
        settings = ProviderSettings()
        assert settings.resource_timeout_seconds == 600.0
        assert settings.poll_interval_seconds == 5.0
        assert settings.delete_retry_interval_seconds == 5.0
        assert settings.delete_retry_max_interval_seconds == 30.0
        assert settings.logging.format == "json"

    def test_resource_timeout_parsed(self) -> None:
        assert ProviderSettings(resource_timeout="15m").resource_timeout_seconds == 900.0

    def test_invalid_resource_timeout_falls_back(self, caplog: pytest.LogCaptureFixture) -> None:
        settings = ProviderSettings(resource_timeout="soon")
        assert settings.resource_timeout_seconds == 600.0
        assert "Invalid resource_timeout" in caplog.text

    def test_secrets_are_masked(self) -> None:
        settings = ProviderSettings(api_key="key-123", api_secret="hunter2")
        assert "hunter2" not in repr(settings)
        assert "key-123" not in repr(settings)


class TestLoadProviderSettings:
    def test_explicit_config(self) -> None:
        settings = load_provider_settings({"resource_timeout": "5m", "api_key": None})
        assert settings.resource_timeout_seconds == 300.0
        assert settings.api_key is None

    def test_file_merged_with_explicit_values(self, tmp_path: Path) -> None:
        config_file = tmp_path / "provider.json"
        config_file.write_text(
            json.dumps(
                {
                    "base_url": "https://api.example.test",
                    "logging": {"level": "DEBUG", "format": "text"},
                }
            )
        )

        settings = load_provider_settings(
            {"logging": {"format": "json"}}, config_file=config_file
        )

        assert settings.base_url == "https://api.example.test"
        assert settings.logging.level == "DEBUG"
        assert settings.logging.format == "json"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigFileNotFoundError):
            load_provider_settings(config_file=tmp_path / "missing.json")

    def test_validation_errors_are_translated(self) -> None:
        with pytest.raises(ConfigValidationError) as exc_info:
            load_provider_settings({"poll_interval_seconds": -1, "logging": {"level": "LOUD"}})

        assert set(exc_info.value.paths) == {"poll_interval_seconds", "logging.level"}
        assert "  - poll_interval_seconds:" in str(exc_info.value)


class TestResolveCredentials:
    def test_explicit_values_win_over_environment(self) -> None:
        settings = ProviderSettings(api_key="cfg-key", api_secret="cfg-secret")
        credentials = resolve_credentials(
            settings, environ={API_KEY_ENV_VAR: "env-key", API_SECRET_ENV_VAR: "env-secret"}
        )
        assert credentials.api_key.get_secret_value() == "cfg-key"
        assert credentials.api_secret.get_secret_value() == "cfg-secret"

    def test_environment_fallback(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(API_KEY_ENV_VAR, "env-key")
        monkeypatch.setenv(API_SECRET_ENV_VAR, "env-secret")

        credentials = resolve_credentials(ProviderSettings())

        assert credentials.api_key.get_secret_value() == "env-key"
        assert credentials.api_secret.get_secret_value() == "env-secret"

    def test_both_missing_attributes_reported(self) -> None:
        with pytest.raises(ConfigValidationError) as exc_info:
            resolve_credentials(ProviderSettings(), environ={})

        assert exc_info.value.paths == ["api_key", "api_secret"]
        assert API_KEY_ENV_VAR in str(exc_info.value)
        assert API_SECRET_ENV_VAR in str(exc_info.value)

    def test_only_missing_secret_reported(self) -> None:
        with pytest.raises(ConfigValidationError) as exc_info:
            resolve_credentials(ProviderSettings(api_key="k"), environ={})

        assert exc_info.value.paths == ["api_secret"]

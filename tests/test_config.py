# Tests for config.py
# Created: 2026-10-18

import pytest

from spotsession.config import (
    CREDENTIALS_KEY,
    DEFAULT_CALLBACK_URL,
    DEFAULT_SCOPES,
    Settings,
    get_config_dir,
    get_settings,
)
from spotsession.errors import ConfigurationError


class TestSettingsFromEnv:
    def test_defaults(self):
        settings = Settings.from_env({"client_id": "id", "client_secret": "secret"})
        assert settings.client_id == "id"
        assert settings.client_secret == "secret"
        assert settings.callback_url == DEFAULT_CALLBACK_URL
        assert settings.callback_scheme == "spotify-api-example-app"
        assert settings.scopes == DEFAULT_SCOPES
        assert settings.credentials_key == CREDENTIALS_KEY

    def test_missing_client_id(self):
        with pytest.raises(ConfigurationError, match="client_id"):
            Settings.from_env({"client_secret": "secret"})

    def test_missing_both(self):
        with pytest.raises(ConfigurationError, match="client_secret"):
            Settings.from_env({})

    def test_blank_client_secret(self):
        with pytest.raises(ConfigurationError):
            Settings.from_env({"client_id": "id", "client_secret": "   "})

    def test_overrides(self):
        settings = Settings.from_env(
            {
                "client_id": "id",
                "client_secret": "secret",
                "SPOTSESSION_CALLBACK_URL": "my-app://callback",
                "SPOTSESSION_SCOPES": "user-read-email streaming",
                "SPOTSESSION_LOG_LEVEL": "debug",
            }
        )
        assert settings.callback_scheme == "my-app"
        assert settings.scopes == ["user-read-email", "streaming"]
        assert settings.log_level == "DEBUG"

    def test_callback_without_scheme(self):
        with pytest.raises(ConfigurationError):
            Settings.from_env(
                {"client_id": "id", "client_secret": "s", "SPOTSESSION_CALLBACK_URL": "callback"}
            )


class TestGetSettings:
    def test_cached(self, monkeypatch):
        monkeypatch.setenv("client_id", "env-id")
        monkeypatch.setenv("client_secret", "env-secret")
        get_settings.cache_clear()
        try:
            first = get_settings()
            assert first.client_id == "env-id"
            assert get_settings() is first
        finally:
            get_settings.cache_clear()

    def test_missing_env(self, monkeypatch):
        monkeypatch.delenv("client_id", raising=False)
        monkeypatch.delenv("client_secret", raising=False)
        get_settings.cache_clear()
        try:
            with pytest.raises(ConfigurationError):
                get_settings()
        finally:
            get_settings.cache_clear()


def test_config_dir_override(tmp_path, monkeypatch):
    target = tmp_path / "cfg"
    monkeypatch.setenv("SPOTSESSION_CONFIG_DIR", str(target))
    assert get_config_dir() == target
    assert target.is_dir()

"""Settings for the Spotify authorization session.

Client credentials come from the ``client_id`` / ``client_secret``
environment variables; everything else has a default and may be overridden
with ``SPOTSESSION_*`` variables.

Created: 2026-10-18
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator

from spotsession.errors import ConfigurationError

DEFAULT_CALLBACK_URL = "spotify-api-example-app://login-callback"

DEFAULT_SCOPES = [
    "user-read-playback-state",
    "user-read-email",
    "user-library-modify",
    "user-library-read",
    "user-modify-playback-state",
]

# Single key under which the serialized credentials are stored.
CREDENTIALS_KEY = "authorizationManager"


def get_config_dir() -> Path:
    """Get/create the config directory (~/.spotsession by default)."""
    override = os.environ.get("SPOTSESSION_CONFIG_DIR")
    d = Path(override).expanduser() if override else Path.home() / ".spotsession"
    d.mkdir(parents=True, exist_ok=True)
    return d


class Settings(BaseModel):
    """Spotify client + session configuration."""

    client_id: str
    client_secret: str
    callback_url: str = DEFAULT_CALLBACK_URL
    scopes: list[str] = Field(default_factory=lambda: list(DEFAULT_SCOPES))
    credentials_key: str = CREDENTIALS_KEY
    log_level: str = "INFO"

    @field_validator("client_id", "client_secret")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v.strip()

    @field_validator("callback_url")
    @classmethod
    def _has_scheme(cls, v: str) -> str:
        if not urlparse(v).scheme:
            raise ValueError(f"callback URL has no scheme: {v!r}")
        return v

    @property
    def callback_scheme(self) -> str:
        return urlparse(self.callback_url).scheme

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> Settings:
        """Build settings from environment variables.

        Raises:
            ConfigurationError: ``client_id`` or ``client_secret`` is missing.
        """
        env = os.environ if environ is None else environ

        missing = [name for name in ("client_id", "client_secret") if not env.get(name)]
        if missing:
            raise ConfigurationError(
                f"Could not find {', '.join(repr(m) for m in missing)} in environment variables"
            )

        values: dict = {
            "client_id": env["client_id"],
            "client_secret": env["client_secret"],
        }
        if env.get("SPOTSESSION_CALLBACK_URL"):
            values["callback_url"] = env["SPOTSESSION_CALLBACK_URL"]
        if env.get("SPOTSESSION_SCOPES"):
            values["scopes"] = env["SPOTSESSION_SCOPES"].split()
        if env.get("SPOTSESSION_LOG_LEVEL"):
            values["log_level"] = env["SPOTSESSION_LOG_LEVEL"].upper()

        try:
            return cls(**values)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e


@lru_cache
def get_settings() -> Settings:
    """Load settings from the environment once per process."""
    return Settings.from_env()

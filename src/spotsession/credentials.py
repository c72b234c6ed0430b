# Credentials - Spotify OAuth token set and its serialized form.
# Created: 2026-10-18

from __future__ import annotations

import json
import time
from dataclasses import asdict, dataclass, field, fields
from functools import lru_cache
from typing import Any

from pydantic import TypeAdapter, ValidationError

from spotsession.errors import DecodeFailure

# Seconds before the real expiry at which a token counts as expired
EXPIRY_SKEW = 60


@dataclass
class Credentials:
    """Access + refresh token set for one authenticated Spotify account."""

    access_token: str | None = None
    refresh_token: str | None = None
    token_type: str = "Bearer"
    expires_at: float | None = None  # Unix timestamp
    scopes: list[str] = field(default_factory=list)
    requested_scopes: list[str] = field(default_factory=list)

    @classmethod
    def from_token_response(
        cls,
        payload: dict[str, Any],
        requested_scopes: list[str] | None = None,
        now: float | None = None,
    ) -> Credentials:
        """Convert Spotify's token endpoint JSON into Credentials.

        Spotify returns ``access_token``, ``token_type``, ``expires_in``
        (seconds), an optional ``refresh_token`` and ``scope`` as a
        space-delimited string.
        """
        now_ts = time.time() if now is None else now
        expires_in = float(payload.get("expires_in", 3600))
        return cls(
            access_token=payload.get("access_token"),
            refresh_token=payload.get("refresh_token"),
            token_type=payload.get("token_type", "Bearer"),
            expires_at=now_ts + expires_in,
            scopes=(payload.get("scope") or "").split(),
            requested_scopes=list(requested_scopes or []),
        )

    def is_authorized(self) -> bool:
        """True when an access token exists and every requested scope was granted."""
        if not self.access_token:
            return False
        return set(self.requested_scopes).issubset(self.scopes)

    def is_expired(self, skew: int = EXPIRY_SKEW) -> bool:
        if self.expires_at is None:
            return False
        return time.time() >= self.expires_at - skew

    def to_bytes(self) -> bytes:
        return json.dumps(asdict(self), sort_keys=True).encode("utf-8")

    @classmethod
    def from_bytes(cls, data: bytes) -> Credentials:
        """Decode credentials written by :meth:`to_bytes`.

        Raises:
            DecodeFailure: The blob is not a valid credentials document.
        """
        try:
            raw = json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise DecodeFailure(f"Stored credentials are not valid JSON: {e}") from e

        if not isinstance(raw, dict):
            raise DecodeFailure("Stored credentials are not a JSON object")

        unknown = set(raw) - {f.name for f in fields(cls)}
        if unknown:
            raise DecodeFailure(f"Unexpected credentials fields: {sorted(unknown)}")

        try:
            return _credentials_adapter().validate_python(raw)
        except ValidationError as e:
            raise DecodeFailure(f"Invalid credentials fields: {e}") from e

    def __repr__(self) -> str:
        # Never leak tokens into logs
        return (
            f"Credentials(token_type={self.token_type!r}, expires_at={self.expires_at!r}, "
            f"scopes={self.scopes!r}, has_refresh_token={self.refresh_token is not None})"
        )


@lru_cache
def _credentials_adapter() -> TypeAdapter[Credentials]:
    return TypeAdapter(Credentials)

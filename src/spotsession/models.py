# Session models - user profile and observable session status.
# Created: 2026-10-18

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from spotsession.credentials import Credentials


@dataclass(frozen=True)
class User:
    """Spotify profile of the authorized user (``GET /v1/me``)."""

    id: str
    display_name: str | None = None
    email: str | None = None
    country: str | None = None
    product: str | None = None
    uri: str = ""
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> User:
        return cls(
            id=data["id"],
            display_name=data.get("display_name"),
            email=data.get("email"),
            country=data.get("country"),
            product=data.get("product"),
            uri=data.get("uri", ""),
            raw=data,
        )

    @property
    def name(self) -> str:
        return self.display_name or self.id


@dataclass(frozen=True)
class SessionStatus:
    """Read-only snapshot of the session state."""

    is_authorized: bool = False
    is_retrieving_tokens: bool = False
    current_user: User | None = None


@dataclass
class Account:
    """A known Spotify account: its profile plus the credentials that unlock it."""

    user: User
    credentials: Credentials

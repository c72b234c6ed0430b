# Shared fixtures: fake Spotify accounts/API server behind httpx.MockTransport.
# Created: 2026-10-18

from __future__ import annotations

import urllib.parse

import httpx
import pytest

from spotsession.client import AuthorizationClient
from spotsession.config import DEFAULT_SCOPES, Settings
from spotsession.session import AuthorizationSession
from spotsession.store import MemoryCredentialStore

PROFILE = {
    "id": "wizzler",
    "display_name": "Wizzler",
    "email": "wizzler@example.com",
    "country": "SE",
    "product": "premium",
    "uri": "spotify:user:wizzler",
}


class FakeSpotify:
    """Minimal stand-in for accounts.spotify.com and api.spotify.com."""

    def __init__(self):
        self.token_calls: list[dict[str, str]] = []
        self.token_auth: list[str | None] = []
        self.profile_calls = 0
        self.token_status = 200
        self.profile_status = 200
        self.scope = " ".join(DEFAULT_SCOPES)
        self.refresh_returns_new_refresh_token = False
        self.profile_body: object = PROFILE

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/token":
            form = dict(urllib.parse.parse_qsl(request.read().decode()))
            self.token_calls.append(form)
            self.token_auth.append(request.headers.get("authorization"))
            if self.token_status != 200:
                return httpx.Response(self.token_status, json={"error": "invalid_grant"})

            body = {
                "access_token": f"access-{len(self.token_calls)}",
                "token_type": "Bearer",
                "expires_in": 3600,
                "scope": self.scope,
            }
            if form["grant_type"] == "authorization_code":
                body["refresh_token"] = "refresh-1"
            elif self.refresh_returns_new_refresh_token:
                body["refresh_token"] = f"refresh-{len(self.token_calls)}"
            return httpx.Response(200, json=body)

        if request.url.path == "/v1/me":
            self.profile_calls += 1
            if self.profile_status != 200:
                return httpx.Response(
                    self.profile_status, json={"error": {"status": self.profile_status}}
                )
            return httpx.Response(200, json=self.profile_body)

        return httpx.Response(404)


def redirect_from(auth_url: str, code: str = "auth-code", state: str | None = None) -> str:
    """Build the redirect Spotify would send back for *auth_url*."""
    query = urllib.parse.parse_qs(urllib.parse.urlparse(auth_url).query)
    if state is None:
        state = query["state"][0]
    params = urllib.parse.urlencode({"code": code, "state": state})
    return f"{query['redirect_uri'][0]}?{params}"


@pytest.fixture
def settings():
    return Settings(client_id="test-client-id", client_secret="test-client-secret")


@pytest.fixture
def spotify():
    return FakeSpotify()


@pytest.fixture
def make_client(settings, spotify):
    def factory() -> AuthorizationClient:
        return AuthorizationClient(
            settings.client_id,
            settings.client_secret,
            http=httpx.AsyncClient(transport=httpx.MockTransport(spotify)),
        )

    return factory


@pytest.fixture
def client(make_client):
    return make_client()


@pytest.fixture
def store():
    return MemoryCredentialStore()


@pytest.fixture
def session(settings, client, store):
    return AuthorizationSession(settings, client=client, store=store)


@pytest.fixture
def redirect_for():
    return redirect_from

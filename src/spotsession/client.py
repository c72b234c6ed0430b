# Authorization Client - Spotify authorization code flow + token refresh.
# Created: 2026-10-18
#
# Owns the in-memory Credentials and notifies subscribers whenever they
# change or are cleared. Notifications run synchronously, in subscription
# order, right after the assignment that caused them.

from __future__ import annotations

import logging
import urllib.parse
from collections.abc import Callable
from typing import Any

import httpx

from spotsession.credentials import Credentials
from spotsession.errors import ProfileFetchFailure, StateMismatch, TokenExchangeFailure
from spotsession.models import User

logger = logging.getLogger(__name__)

ACCOUNTS_URL = "https://accounts.spotify.com"
API_URL = "https://api.spotify.com/v1"

Listener = Callable[[], Any]


class AuthorizationClient:
    """Spotify authorization-code-flow manager.

    Supports:
    - Authorization URL generation
    - Code exchange for tokens (with state validation)
    - Token refresh
    - Authenticated Web API requests
    - Change / deauthorization notifications
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        *,
        http: httpx.AsyncClient | None = None,
        accounts_url: str = ACCOUNTS_URL,
        api_url: str = API_URL,
    ):
        self.client_id = client_id
        self._client_secret = client_secret
        self._http = http or httpx.AsyncClient(timeout=15)
        self._accounts_url = accounts_url.rstrip("/")
        self._api_url = api_url.rstrip("/")
        self._credentials = Credentials()
        self._redirect_uri: str | None = None
        self._requested_scopes: list[str] = []
        self._changed: list[Listener] = []
        self._deauthorized: list[Listener] = []

    # -- notifications -------------------------------------------------------

    def subscribe_changed(self, listener: Listener) -> Callable[[], None]:
        """Register *listener* for credential changes. Returns an unsubscribe callable."""
        return self._subscribe(self._changed, listener)

    def subscribe_deauthorized(self, listener: Listener) -> Callable[[], None]:
        """Register *listener* for deauthorization. Returns an unsubscribe callable."""
        return self._subscribe(self._deauthorized, listener)

    @staticmethod
    def _subscribe(listeners: list[Listener], listener: Listener) -> Callable[[], None]:
        listeners.append(listener)

        def unsubscribe() -> None:
            if listener in listeners:
                listeners.remove(listener)

        return unsubscribe

    @staticmethod
    def _emit(listeners: list[Listener], kind: str) -> None:
        for listener in list(listeners):
            try:
                listener()
            except Exception:
                logger.warning("Error in %s listener %r", kind, listener, exc_info=True)

    # -- credentials ---------------------------------------------------------

    @property
    def credentials(self) -> Credentials:
        return self._credentials

    @credentials.setter
    def credentials(self, value: Credentials) -> None:
        self._credentials = value
        self._emit(self._changed, "change")

    def is_authorized(self) -> bool:
        return self._credentials.is_authorized()

    def deauthorize(self) -> None:
        """Drop the in-memory credentials and notify deauthorization listeners."""
        self._credentials = Credentials()
        self._redirect_uri = None
        logger.info("Spotify credentials cleared")
        self._emit(self._deauthorized, "deauthorization")

    # -- authorization code flow ---------------------------------------------

    def make_authorization_url(
        self,
        redirect_uri: str,
        show_dialog: bool,
        state: str,
        scopes: list[str],
    ) -> str:
        """Generate the Spotify authorization URL.

        Args:
            redirect_uri: Where Spotify redirects after the user decides.
            show_dialog: Force the consent dialog even if already approved.
            state: Anti-CSRF token echoed back in the redirect.
            scopes: Scopes to request.
        """
        params = {
            "client_id": self.client_id,
            "response_type": "code",
            "redirect_uri": redirect_uri,
            "scope": " ".join(scopes),
            "show_dialog": "true" if show_dialog else "false",
            "state": state,
        }
        self._redirect_uri = redirect_uri
        self._requested_scopes = list(scopes)
        return f"{self._accounts_url}/authorize?{urllib.parse.urlencode(params)}"

    async def request_tokens(self, redirect_url: str, state: str) -> Credentials:
        """Exchange the code in *redirect_url* for access + refresh tokens.

        Raises:
            StateMismatch: The redirect's state differs from *state*.
            TokenExchangeFailure: Spotify reported an error or the request failed.
        """
        parsed = urllib.parse.urlparse(redirect_url)
        query = urllib.parse.parse_qs(parsed.query)

        returned_state = query.get("state", [None])[0]
        if returned_state != state:
            raise StateMismatch("State parameter in redirect does not match the one sent")

        if "error" in query:
            raise TokenExchangeFailure(f"Authorization denied: {query['error'][0]}")

        code = query.get("code", [None])[0]
        if not code:
            raise TokenExchangeFailure("Redirect URL carries no authorization code")

        redirect_uri = self._redirect_uri or urllib.parse.urlunparse(
            parsed._replace(query="", fragment="")
        )
        data = await self._token_request(
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": redirect_uri,
            }
        )
        self.credentials = Credentials.from_token_response(
            data, requested_scopes=self._requested_scopes
        )
        logger.info("Spotify tokens obtained (scopes: %s)", " ".join(self._credentials.scopes))
        return self._credentials

    async def refresh_tokens(self) -> Credentials:
        """Refresh the access token using the stored refresh token."""
        current = self._credentials
        if not current.refresh_token:
            raise TokenExchangeFailure("No refresh token available")

        data = await self._token_request(
            {"grant_type": "refresh_token", "refresh_token": current.refresh_token}
        )
        refreshed = Credentials.from_token_response(
            data, requested_scopes=current.requested_scopes
        )
        # Spotify may omit refresh_token and scope on refresh; keep existing.
        if not refreshed.refresh_token:
            refreshed.refresh_token = current.refresh_token
        if not refreshed.scopes:
            refreshed.scopes = list(current.scopes)

        self.credentials = refreshed
        logger.info("Refreshed Spotify access token")
        return refreshed

    async def _token_request(self, form: dict[str, str]) -> dict[str, Any]:
        try:
            resp = await self._http.post(
                f"{self._accounts_url}/api/token",
                data=form,
                auth=(self.client_id, self._client_secret),
            )
        except httpx.HTTPError as e:
            raise TokenExchangeFailure(f"Spotify token request failed: {e}") from e

        if resp.status_code >= 400:
            raise TokenExchangeFailure(
                f"Spotify token request failed (HTTP {resp.status_code}): {resp.text}",
                status_code=resp.status_code,
            )

        try:
            payload = resp.json()
        except ValueError as e:
            raise TokenExchangeFailure(f"Spotify token response was not JSON: {resp.text}") from e

        if not isinstance(payload, dict) or not payload.get("access_token"):
            raise TokenExchangeFailure(f"Spotify token response has no access token: {payload}")
        return payload

    # -- Web API -------------------------------------------------------------

    async def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Perform an authenticated Web API request, refreshing an expired token first."""
        if not self._credentials.access_token:
            raise RuntimeError("Spotify not authenticated. Complete the authorization flow first.")

        if self._credentials.is_expired() and self._credentials.refresh_token:
            await self.refresh_tokens()

        headers = dict(kwargs.pop("headers", None) or {})
        headers["Authorization"] = f"Bearer {self._credentials.access_token}"
        return await self._http.request(
            method, f"{self._api_url}/{path.lstrip('/')}", headers=headers, **kwargs
        )

    async def current_user_profile(self) -> User:
        """Fetch the profile of the authorized user."""
        try:
            resp = await self.request("GET", "/me")
            resp.raise_for_status()
            user = User.from_api(resp.json())
        except (
            httpx.HTTPError,
            RuntimeError,
            TokenExchangeFailure,
            KeyError,
            TypeError,
            ValueError,
        ) as e:
            raise ProfileFetchFailure(f"Could not fetch current user profile: {e}") from e
        logger.debug("Fetched profile %s", user.id)
        return user

    async def aclose(self) -> None:
        await self._http.aclose()

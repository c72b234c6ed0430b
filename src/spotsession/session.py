# Authorization Session - Spotify login lifecycle for one process.
# Created: 2026-10-18
#
# Generates state tokens, builds the authorization URL, exchanges the
# redirect for tokens and keeps SessionStatus in sync with the client's
# credentials. Stored credentials are restored by initialize().

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable
from urllib.parse import urlparse

from spotsession.bridge import SessionEventBridge
from spotsession.client import AuthorizationClient
from spotsession.config import Settings
from spotsession.credentials import Credentials
from spotsession.errors import (
    AuthorizationInProgress,
    DecodeFailure,
    InvalidRedirect,
    ProfileFetchFailure,
    StoreError,
)
from spotsession.models import Account, SessionStatus, User
from spotsession.state import generate_state
from spotsession.store import FileCredentialStore, SecureCredentialStore

logger = logging.getLogger(__name__)

StatusListener = Callable[[SessionStatus], None]


class AuthorizationSession:
    """Authorization code flow session with persisted credentials.

    All methods are expected to run on a single event loop; status
    listeners are called synchronously on every status change.
    """

    def __init__(
        self,
        settings: Settings,
        client: AuthorizationClient | None = None,
        store: SecureCredentialStore | None = None,
    ):
        self.settings = settings
        self.client = client or AuthorizationClient(settings.client_id, settings.client_secret)
        self.store: SecureCredentialStore = store if store is not None else FileCredentialStore()
        self._status = SessionStatus()
        self._state = generate_state()
        self._status_listeners: list[StatusListener] = []
        self._bridge = SessionEventBridge(self)

    @classmethod
    def from_settings(cls, settings: Settings) -> AuthorizationSession:
        return cls(settings)

    # -- status --------------------------------------------------------------

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def is_authorized(self) -> bool:
        return self._status.is_authorized

    @property
    def is_retrieving_tokens(self) -> bool:
        return self._status.is_retrieving_tokens

    @property
    def current_user(self) -> User | None:
        return self._status.current_user

    @property
    def current_account(self) -> Account | None:
        """The signed-in account, once its profile is known."""
        user = self._status.current_user
        if user is None or not self._status.is_authorized:
            return None
        return Account(user=user, credentials=self.client.credentials)

    @property
    def authorization_state(self) -> str:
        """The state token the next redirect must carry."""
        return self._state

    @property
    def bridge(self) -> SessionEventBridge:
        return self._bridge

    def add_status_listener(self, listener: StatusListener) -> Callable[[], None]:
        """Call *listener* with the new status on every change. Returns an unsubscribe callable."""
        self._status_listeners.append(listener)

        def remove() -> None:
            if listener in self._status_listeners:
                self._status_listeners.remove(listener)

        return remove

    def _set_status(self, **changes) -> None:
        new = dataclasses.replace(self._status, **changes)
        if new == self._status:
            return
        self._status = new
        for listener in list(self._status_listeners):
            try:
                listener(new)
            except Exception:
                logger.warning("Error in status listener %r", listener, exc_info=True)

    # -- lifecycle -----------------------------------------------------------

    def initialize(self) -> None:
        """Subscribe to client notifications, then restore stored credentials.

        Subscribing first guarantees that installing the restored
        credentials updates the status. Calling this twice is a no-op.
        """
        if self._bridge.attached:
            return
        self._bridge.attach(self.client)

        key = self.settings.credentials_key
        try:
            data = self.store.get(key)
        except StoreError:
            logger.warning("Could not read stored credentials", exc_info=True)
            return

        if data is None:
            logger.info("Did not find stored authorization info")
            return

        try:
            credentials = Credentials.from_bytes(data)
        except DecodeFailure as e:
            logger.warning("Could not decode stored credentials: %s", e)
            return

        logger.info("Found stored authorization info")
        # Fires the change notification, which re-derives is_authorized.
        self.client.credentials = credentials

    def build_authorization_request(self) -> str:
        """Rotate the state token and return the URL to open in a browser."""
        self._state = generate_state()
        return self.client.make_authorization_url(
            redirect_uri=self.settings.callback_url,
            show_dialog=True,
            state=self._state,
            scopes=list(self.settings.scopes),
        )

    async def complete_authorization(self, redirect_url: str) -> User | None:
        """Exchange the redirect URL for tokens and fetch the user profile.

        Returns the fetched profile, or None if only the profile fetch failed.

        Raises:
            InvalidRedirect: Wrong URL scheme; nothing is changed.
            AuthorizationInProgress: Another exchange is still outstanding.
            StateMismatch: The redirect's state is not the last one issued.
            TokenExchangeFailure: Spotify rejected the code or was unreachable.
        """
        scheme = urlparse(redirect_url).scheme
        if scheme != self.settings.callback_scheme:
            raise InvalidRedirect(redirect_url, self.settings.callback_scheme)

        if self._status.is_retrieving_tokens:
            raise AuthorizationInProgress("A token exchange is already in progress")

        self._set_status(is_retrieving_tokens=True)
        user: User | None = None
        try:
            with self._bridge.deferred_persistence():
                await self.client.request_tokens(redirect_url, self._state)
                try:
                    user = await self.client.current_user_profile()
                except ProfileFetchFailure as e:
                    logger.warning("Authorized, but the profile fetch failed: %s", e)
        finally:
            # Single use: never accept the same state twice.
            self._state = generate_state()
            self._set_status(is_retrieving_tokens=False)

        self._set_status(current_user=user)
        self._bridge.persist_credentials()
        return user

    def deauthorize(self) -> None:
        """Forget the credentials; the deauthorization handler clears the store."""
        self.client.deauthorize()
        if not self._bridge.attached:
            # Nobody is subscribed before initialize(); clean up directly.
            self._bridge.on_deauthorized()

    def switch_credentials(self, credentials: Credentials) -> None:
        """Install another account's credentials in place of the current ones."""
        self._set_status(current_user=None)
        self.client.credentials = credentials

    def switch_account(self, account: Account) -> None:
        """Make *account* the current one without refetching its profile."""
        self._set_status(current_user=account.user)
        self.client.credentials = account.credentials

    async def refresh(self) -> None:
        """Force an access token refresh; the change handler persists the result."""
        await self.client.refresh_tokens()

    async def aclose(self) -> None:
        self._bridge.detach()
        await self.client.aclose()

    async def __aenter__(self) -> AuthorizationSession:
        self.initialize()
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

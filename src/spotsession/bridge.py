# Session Event Bridge - turns client notifications into session state.
# Created: 2026-10-18

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from spotsession.errors import ProfileFetchFailure, StoreError

if TYPE_CHECKING:
    from spotsession.client import AuthorizationClient
    from spotsession.session import AuthorizationSession

logger = logging.getLogger(__name__)


class SessionEventBridge:
    """Handles change / deauthorization notifications for one session.

    Every change is persisted to the credential store, except while a
    :meth:`deferred_persistence` block is open; whoever opened it is
    responsible for calling :meth:`persist_credentials` afterwards.
    """

    def __init__(self, session: AuthorizationSession):
        self._session = session
        self._deferred = 0
        self._profile_task: asyncio.Task | None = None
        self._unsubscribers: list[Callable[[], None]] = []

    @property
    def attached(self) -> bool:
        return bool(self._unsubscribers)

    def attach(self, client: AuthorizationClient) -> None:
        if self.attached:
            return
        self._unsubscribers = [
            client.subscribe_changed(self.on_authorization_changed),
            client.subscribe_deauthorized(self.on_deauthorized),
        ]

    def detach(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        self._cancel_profile_fetch()

    @property
    def persistence_deferred(self) -> bool:
        return self._deferred > 0

    @contextmanager
    def deferred_persistence(self) -> Iterator[None]:
        """Skip change-triggered saves for the duration of the block."""
        self._deferred += 1
        try:
            yield
        finally:
            self._deferred -= 1

    # -- handlers ------------------------------------------------------------

    def on_authorization_changed(self) -> None:
        session = self._session
        authorized = session.client.is_authorized()
        session._set_status(is_authorized=authorized)
        logger.info("Authorization changed: is_authorized=%s", authorized)

        if self.persistence_deferred:
            # The token exchange fetches the profile and persists itself.
            logger.debug("Token exchange in progress; not saving credentials")
            return

        if authorized and session.current_user is None:
            self._schedule_profile_fetch()

        self.persist_credentials()

    def on_deauthorized(self) -> None:
        self._cancel_profile_fetch()
        session = self._session
        session._set_status(is_authorized=False, current_user=None)
        logger.info("Deauthorized; removing stored credentials")

        try:
            session.store.delete(session.settings.credentials_key)
        except StoreError:
            logger.warning("Could not delete stored credentials", exc_info=True)

    # -- persistence ---------------------------------------------------------

    def persist_credentials(self) -> bool:
        """Write the client's current credentials to the store.

        Returns True on success; failures are logged and leave the
        previously stored value untouched.
        """
        session = self._session
        try:
            data = session.client.credentials.to_bytes()
        except (TypeError, ValueError):
            logger.warning("Could not encode credentials for storage", exc_info=True)
            return False

        try:
            session.store.set(session.settings.credentials_key, data)
        except StoreError:
            logger.warning("Could not save credentials to the store", exc_info=True)
            return False
        return True

    # -- profile -------------------------------------------------------------

    def _schedule_profile_fetch(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; profile fetch waits for the next change")
            return

        if self._profile_task is not None and not self._profile_task.done():
            return
        self._profile_task = loop.create_task(self._fetch_profile())

    async def _fetch_profile(self) -> None:
        session = self._session
        try:
            user = await session.client.current_user_profile()
        except ProfileFetchFailure as e:
            logger.warning("Profile fetch failed: %s", e)
            return

        if session.client.is_authorized():
            session._set_status(current_user=user)
            logger.info("Signed in as %s", user.name)

    def _cancel_profile_fetch(self) -> None:
        if self._profile_task is not None and not self._profile_task.done():
            self._profile_task.cancel()
        self._profile_task = None

    async def wait_for_profile(self) -> None:
        """Wait for an in-flight background profile fetch, if any."""
        task = self._profile_task
        if task is not None:
            await asyncio.wait([task])

# Session errors - outcome errors are raised, bookkeeping errors are logged.
# Created: 2026-10-18

from __future__ import annotations


class SessionError(Exception):
    """Base class for every error raised by spotsession."""


class ConfigurationError(SessionError):
    """Required client configuration is missing or invalid."""


class AuthError(SessionError):
    """The authorization outcome failed."""


class InvalidRedirect(AuthError):
    """The redirect URL does not use the configured callback scheme."""

    def __init__(self, url: str, expected_scheme: str):
        self.url = url
        self.expected_scheme = expected_scheme
        super().__init__(f"Redirect URL scheme does not match '{expected_scheme}': {url}")


class StateMismatch(AuthError):
    """The state parameter of the redirect differs from the one sent."""


class TokenExchangeFailure(AuthError):
    """Exchanging the authorization code (or refresh token) failed."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class AuthorizationInProgress(AuthError):
    """A token exchange is already outstanding for this session."""


class ProfileFetchFailure(AuthError):
    """Fetching the current user profile failed."""


class StoreError(SessionError):
    """The secure credential store could not complete an operation."""


class StorePersistFailure(StoreError):
    """Writing credentials to the store failed."""


class StoreDeleteFailure(StoreError):
    """Deleting credentials from the store failed."""


class DecodeFailure(SessionError):
    """Stored credentials could not be decoded."""

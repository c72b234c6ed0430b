"""Spotify authorization session: OAuth2 code flow, persisted credentials, observable status."""

from spotsession.bridge import SessionEventBridge
from spotsession.client import AuthorizationClient
from spotsession.config import Settings, get_settings
from spotsession.credentials import Credentials
from spotsession.errors import (
    AuthError,
    AuthorizationInProgress,
    ConfigurationError,
    DecodeFailure,
    InvalidRedirect,
    ProfileFetchFailure,
    SessionError,
    StateMismatch,
    StoreDeleteFailure,
    StoreError,
    StorePersistFailure,
    TokenExchangeFailure,
)
from spotsession.models import Account, SessionStatus, User
from spotsession.session import AuthorizationSession
from spotsession.store import FileCredentialStore, MemoryCredentialStore, SecureCredentialStore

__all__ = [
    "Account",
    "AuthError",
    "AuthorizationClient",
    "AuthorizationInProgress",
    "AuthorizationSession",
    "ConfigurationError",
    "Credentials",
    "DecodeFailure",
    "FileCredentialStore",
    "InvalidRedirect",
    "MemoryCredentialStore",
    "ProfileFetchFailure",
    "SecureCredentialStore",
    "SessionError",
    "SessionEventBridge",
    "SessionStatus",
    "Settings",
    "StateMismatch",
    "StoreDeleteFailure",
    "StoreError",
    "StorePersistFailure",
    "TokenExchangeFailure",
    "User",
    "get_settings",
]

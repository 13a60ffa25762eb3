"""
Twitter login coordinator.

This module manages a single "Log in with Twitter" session: it allows
at most one interactive OAuth 1.0a authorization at a time, turns the
provider's asynchronous outcome into one deterministic response, and
keeps the active session record across process restarts.

Public API:
    LoginCoordinator: Serializes logins and owns the session lifecycle
    LoginMethodHandler: Request channel binding (getCurrentSession, authorize, logOut)
    SessionManager: Current session record
    SessionRecord: Token, secret, user id and username
    FileSessionStorage / MemorySessionStorage: Session persistence
    TwitterAuthorizationProvider: tweepy-backed OAuth 1.0a handshake
    PlatformResultBus: Fan-out of raw platform results

Exceptions:
    TwitterLoginError: Base exception
    ConfigurationError: Configuration error
    AuthorizationError: Handshake could not be started
    LoginInProgressError: authorize called while a login was running
    InvalidSessionError: Partial session record
    SessionStorageError: Storage operation failed
    ResponderAlreadyUsedError: Second response on a single-use responder
"""

from .auth_server import AuthorizationResult, OAuthCallbackServer
from .channel import CHANNEL_NAME, LoginMethodHandler, MethodCall
from .config import ConsumerCredentials, TwitterLoginConfig
from .coordinator import AttemptState, AuthorizationAttempt, LoginCoordinator
from .events import PlatformResult, PlatformResultBus
from .exceptions import (
    LOGIN_IN_PROGRESS,
    AuthorizationError,
    ConfigurationError,
    InvalidSessionError,
    LoginInProgressError,
    ResponderAlreadyUsedError,
    SessionStorageError,
    TwitterLoginError,
)
from .provider import AuthorizationCallback, AuthorizationProvider
from .responder import BlockingResponder, ChannelReply, Responder, SingleUseResponder
from .session import LoginResult, LoginStatus, SessionRecord
from .session_manager import SessionManager
from .session_storage import FileSessionStorage, MemorySessionStorage, SessionStorage
from .twitter_provider import TwitterAuthorizationProvider

__all__ = [
    # Configuration
    "ConsumerCredentials",
    "TwitterLoginConfig",
    # Session
    "SessionRecord",
    "LoginResult",
    "LoginStatus",
    "SessionStorage",
    "FileSessionStorage",
    "MemorySessionStorage",
    "SessionManager",
    # Providers
    "AuthorizationCallback",
    "AuthorizationProvider",
    "TwitterAuthorizationProvider",
    "OAuthCallbackServer",
    "AuthorizationResult",
    # Coordinator
    "AttemptState",
    "AuthorizationAttempt",
    "LoginCoordinator",
    # Channel
    "CHANNEL_NAME",
    "MethodCall",
    "LoginMethodHandler",
    "Responder",
    "SingleUseResponder",
    "BlockingResponder",
    "ChannelReply",
    "PlatformResult",
    "PlatformResultBus",
    # Exceptions
    "LOGIN_IN_PROGRESS",
    "TwitterLoginError",
    "ConfigurationError",
    "AuthorizationError",
    "LoginInProgressError",
    "InvalidSessionError",
    "SessionStorageError",
    "ResponderAlreadyUsedError",
]

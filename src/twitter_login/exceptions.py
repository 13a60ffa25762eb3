"""
Exception classes for the Twitter login coordinator.

This module defines the exception hierarchy for all login-related errors.
Handshake failures (user cancelled, network error, provider rejected) are
NOT raised; they travel back to the caller as an error result envelope.
"""

LOGIN_IN_PROGRESS = "LOGIN_IN_PROGRESS"


class TwitterLoginError(Exception):
    """Base exception for all Twitter login errors."""

    pass


class ConfigurationError(TwitterLoginError):
    """Login configuration error (missing or invalid configuration)."""

    pass


class AuthorizationError(TwitterLoginError):
    """The authorization provider could not start a handshake."""

    pass


class LoginInProgressError(TwitterLoginError):
    """
    An authorize call arrived while another login was still running.

    Attributes:
        code: Machine-readable error code sent over the request channel
        method: Name of the method that was rejected
    """

    code = LOGIN_IN_PROGRESS

    def __init__(self, method: str = "authorize"):
        self.method = method
        super().__init__(
            f"{method} called while another login operation was in progress."
        )


class InvalidSessionError(TwitterLoginError):
    """Session record is missing one of its fields."""

    pass


class SessionStorageError(TwitterLoginError):
    """Session storage operation failed (file I/O error)."""

    pass


class ResponderAlreadyUsedError(TwitterLoginError):
    """A single-use responder was asked to answer a second time."""

    pass

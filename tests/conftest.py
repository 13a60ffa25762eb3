"""Shared test doubles for the login coordinator and the HTTP channel."""

from typing import Any, List, Optional

import pytest

from src.twitter_login.config import ConsumerCredentials
from src.twitter_login.provider import AuthorizationCallback, AuthorizationProvider
from src.twitter_login.responder import ChannelReply, Responder
from src.twitter_login.session import SessionRecord


class FakeAuthorizationProvider(AuthorizationProvider):
    """Provider that records calls and lets tests finish handshakes by hand."""

    def __init__(self):
        self.configured_with: List[ConsumerCredentials] = []
        self.callbacks: List[AuthorizationCallback] = []
        self.platform_results: List[tuple] = []
        self.cookies_cleared = 0
        self.authorize_error: Optional[Exception] = None

    @property
    def is_configured(self) -> bool:
        return bool(self.configured_with)

    def configure(self, credentials: ConsumerCredentials) -> None:
        self.configured_with.append(credentials)

    def authorize(self, callback: AuthorizationCallback) -> None:
        if self.authorize_error is not None:
            raise self.authorize_error
        self.callbacks.append(callback)

    def handle_platform_result(self, request_code: int, result_code: int, payload: Any) -> None:
        self.platform_results.append((request_code, result_code, payload))

    def clear_session_cookies(self) -> None:
        self.cookies_cleared += 1

    @property
    def last_callback(self) -> AuthorizationCallback:
        return self.callbacks[-1]


class RecordingResponder(Responder):
    """Responder that keeps every reply it is given."""

    def __init__(self):
        self.replies: List[ChannelReply] = []

    def success(self, result: Any) -> None:
        self.replies.append(ChannelReply(kind="success", result=result))

    def error(self, code: str, message: str, details: Any = None) -> None:
        self.replies.append(ChannelReply(kind="error", code=code, message=message, details=details))

    def not_implemented(self) -> None:
        self.replies.append(ChannelReply(kind="not_implemented"))

    @property
    def last(self) -> ChannelReply:
        return self.replies[-1]


@pytest.fixture
def provider() -> FakeAuthorizationProvider:
    """Create a fake authorization provider."""
    return FakeAuthorizationProvider()


@pytest.fixture
def responder() -> RecordingResponder:
    """Create a recording responder."""
    return RecordingResponder()


@pytest.fixture
def credentials() -> ConsumerCredentials:
    """Create test consumer credentials."""
    return ConsumerCredentials(consumer_key="test_key", consumer_secret="test_secret")


@pytest.fixture
def identity() -> SessionRecord:
    """Create the session record a successful login produces."""
    return SessionRecord(token="t1", secret="s1", user_id="42", username="alice")


@pytest.fixture
def make_responder():
    """Factory for extra recording responders."""
    return RecordingResponder

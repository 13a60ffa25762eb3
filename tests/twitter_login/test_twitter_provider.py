"""Tests for Twitter authorization provider."""

from unittest import mock

import pytest
import tweepy

from src.twitter_login.auth_server import AuthorizationResult, OAuthCallbackServer
from src.twitter_login.config import ConsumerCredentials, TwitterLoginConfig
from src.twitter_login.coordinator import LoginCoordinator
from src.twitter_login.exceptions import AuthorizationError
from src.twitter_login.responder import Responder
from src.twitter_login.session import SessionRecord
from src.twitter_login.session_manager import SessionManager
from src.twitter_login.session_storage import MemorySessionStorage
from src.twitter_login.twitter_provider import (
    RESULT_CANCELED,
    RESULT_OK,
    TwitterAuthorizationProvider,
)

AUTH_URL = "https://api.twitter.com/oauth/authorize?oauth_token=req_token"


@pytest.fixture
def config(tmp_path) -> TwitterLoginConfig:
    """Create test login config."""
    return TwitterLoginConfig(
        session_file=str(tmp_path / "session.json"),
        callback_host="localhost",
        callback_port=9876,
        authorization_timeout_seconds=30,
    )


@pytest.fixture
def server():
    """Create a callback server double that returns an approved redirect."""
    server = mock.Mock(spec=OAuthCallbackServer)
    server.wait_for_callback.return_value = AuthorizationResult(
        success=True, oauth_token="req_token", oauth_verifier="verifier"
    )
    return server


@pytest.fixture
def handler():
    """Create an OAuth1UserHandler double."""
    handler = mock.Mock()
    handler.get_authorization_url.return_value = AUTH_URL
    handler.request_token = {"oauth_token": "req_token", "oauth_token_secret": "req_secret"}
    handler.get_access_token.return_value = ("t1", "s1")
    return handler


@pytest.fixture
def client_factory():
    """Create a tweepy.Client factory whose get_me returns @alice."""
    factory = mock.Mock()
    factory.return_value.get_me.return_value = mock.Mock(
        data=mock.Mock(id=42, username="alice")
    )
    return factory


@pytest.fixture
def browser():
    """Create a browser opener double."""
    return mock.Mock()


@pytest.fixture
def twitter_provider(config, server, handler, client_factory, browser):
    """Create a configured provider wired to test doubles."""
    provider = TwitterAuthorizationProvider(
        config,
        handler_factory=mock.Mock(return_value=handler),
        client_factory=client_factory,
        browser=browser,
        server_factory=mock.Mock(return_value=server),
    )
    provider.configure(ConsumerCredentials("consumer_key", "consumer_secret"))
    return provider


def run(provider: TwitterAuthorizationProvider, callback) -> None:
    provider.authorize(callback)
    provider._thread.join(timeout=5)
    assert not provider.is_running


class TestConfiguration:
    """Tests for provider configuration."""

    def test_not_configured_initially(self, config):
        """A new provider is not configured."""
        assert TwitterAuthorizationProvider(config).is_configured is False

    def test_configure(self, twitter_provider):
        """configure stores the credentials."""
        assert twitter_provider.is_configured is True

    def test_authorize_requires_configuration(self, config):
        """authorize before configure raises AuthorizationError."""
        provider = TwitterAuthorizationProvider(config)

        with pytest.raises(AuthorizationError, match="not configured"):
            provider.authorize(mock.Mock())


class TestHandshake:
    """Tests for the OAuth 1.0a handshake."""

    def test_successful_handshake(
        self, twitter_provider, server, handler, client_factory, browser
    ):
        """A full handshake reports the new session record."""
        callback = mock.Mock()

        run(twitter_provider, callback)

        callback.success.assert_called_once_with(
            SessionRecord(token="t1", secret="s1", user_id="42", username="alice")
        )
        callback.failure.assert_not_called()
        server.start.assert_called_once()
        server.wait_for_callback.assert_called_once_with(30)
        server.stop.assert_called_once()
        browser.assert_called_once_with(AUTH_URL)
        handler.get_access_token.assert_called_once_with("verifier")
        client_factory.assert_called_once_with(
            consumer_key="consumer_key",
            consumer_secret="consumer_secret",
            access_token="t1",
            access_token_secret="s1",
        )
        client_factory.return_value.get_me.assert_called_once_with(user_auth=True)

    def test_handler_built_with_callback_url(self, config, twitter_provider):
        """The request token is fetched with the local callback URL."""
        run(twitter_provider, mock.Mock())

        twitter_provider._handler_factory.assert_called_once_with(
            "consumer_key", "consumer_secret", callback="http://localhost:9876/oauth/callback"
        )

    def test_handler_shares_cookie_jar(self, twitter_provider, handler):
        """The OAuth session uses the provider's cookie jar."""
        run(twitter_provider, mock.Mock())

        assert handler.oauth.cookies is twitter_provider.cookies

    def test_authorization_url_hook(self, twitter_provider):
        """on_authorization_url receives the authorization URL."""
        seen = []
        twitter_provider.on_authorization_url = seen.append

        run(twitter_provider, mock.Mock())

        assert seen == [AUTH_URL]

    def test_browser_disabled(self, tmp_path, server, handler, client_factory, browser):
        """open_browser=False never launches the browser."""
        config = TwitterLoginConfig(session_file=str(tmp_path / "s.json"), open_browser=False)
        provider = TwitterAuthorizationProvider(
            config,
            handler_factory=mock.Mock(return_value=handler),
            client_factory=client_factory,
            browser=browser,
            server_factory=mock.Mock(return_value=server),
        )
        provider.configure(ConsumerCredentials("k", "s"))
        callback = mock.Mock()

        run(provider, callback)

        browser.assert_not_called()
        callback.success.assert_called_once()

    def test_user_denied(self, twitter_provider, server, handler):
        """A denied redirect is reported as failure."""
        server.wait_for_callback.return_value = AuthorizationResult.from_query({"denied": "x"})
        callback = mock.Mock()

        run(twitter_provider, callback)

        callback.failure.assert_called_once_with("User denied authorization")
        callback.success.assert_not_called()
        handler.get_access_token.assert_not_called()
        server.stop.assert_called_once()

    def test_token_mismatch(self, twitter_provider, server, handler):
        """A redirect for a different request token is rejected."""
        server.wait_for_callback.return_value = AuthorizationResult(
            success=True, oauth_token="other", oauth_verifier="verifier"
        )
        callback = mock.Mock()

        run(twitter_provider, callback)

        callback.failure.assert_called_once()
        assert "does not match" in callback.failure.call_args[0][0]
        handler.get_access_token.assert_not_called()

    def test_tweepy_error(self, twitter_provider, handler):
        """tweepy errors are reported as failure."""
        handler.get_authorization_url.side_effect = tweepy.TweepyException("401 Unauthorized")
        callback = mock.Mock()

        run(twitter_provider, callback)

        callback.failure.assert_called_once_with("Twitter request failed: 401 Unauthorized")

    def test_server_bind_failure(self, twitter_provider, server):
        """A callback server that cannot start is reported as failure."""
        server.start.side_effect = OSError("Address already in use")
        callback = mock.Mock()

        run(twitter_provider, callback)

        callback.failure.assert_called_once()
        assert "Address already in use" in callback.failure.call_args[0][0]

    def test_missing_profile(self, twitter_provider, client_factory):
        """An empty get_me response is reported as failure."""
        client_factory.return_value.get_me.return_value = mock.Mock(data=None)
        callback = mock.Mock()

        run(twitter_provider, callback)

        callback.failure.assert_called_once_with("Could not read the authorized user's profile")

    def test_unexpected_error(self, twitter_provider, handler):
        """Any other error still produces exactly one failure."""
        handler.get_access_token.side_effect = ValueError("bad response")
        callback = mock.Mock()

        run(twitter_provider, callback)

        callback.failure.assert_called_once()
        assert "bad response" in callback.failure.call_args[0][0]
        callback.success.assert_not_called()

    def test_server_stop_failure_still_reports(self, twitter_provider, server):
        """An error while stopping the server does not swallow the outcome."""
        server.stop.side_effect = RuntimeError("shutdown failed")
        callback = mock.Mock()

        run(twitter_provider, callback)

        callback.success.assert_called_once()
        callback.failure.assert_not_called()

    def test_slot_free_when_callback_runs(self, twitter_provider):
        """The provider is idle by the time the outcome is reported."""
        seen = []
        callback = mock.Mock()
        callback.success.side_effect = lambda identity: seen.append(twitter_provider.is_running)

        run(twitter_provider, callback)

        assert seen == [False]


class RetryingResponder(Responder):
    """Starts a new login from inside the first reply it receives."""

    def __init__(self, coordinator: LoginCoordinator, credentials: ConsumerCredentials):
        self.coordinator = coordinator
        self.credentials = credentials
        self.results = []

    def success(self, result) -> None:
        self.results.append(result)
        if len(self.results) == 1:
            self.coordinator.authorize(self.credentials, self)

    def error(self, code, message, details=None) -> None:
        self.results.append({"code": code, "message": message})

    def not_implemented(self) -> None:
        self.results.append("not_implemented")


class TestRetryAfterFailure:
    """Tests for logging in again right after a failed login."""

    def test_retry_from_failure_reply_starts_new_handshake(
        self, config, server, handler, client_factory, browser
    ):
        """A retry issued while the failure is delivered runs a real handshake."""
        denied = mock.Mock(spec=OAuthCallbackServer)
        denied.wait_for_callback.return_value = AuthorizationResult.from_query({"denied": "x"})
        provider = TwitterAuthorizationProvider(
            config,
            handler_factory=mock.Mock(return_value=handler),
            client_factory=client_factory,
            browser=browser,
            server_factory=mock.Mock(side_effect=[denied, server]),
        )
        coordinator = LoginCoordinator(provider, SessionManager(MemorySessionStorage()))
        credentials = ConsumerCredentials("consumer_key", "consumer_secret")
        responder = RetryingResponder(coordinator, credentials)

        coordinator.authorize(credentials, responder)
        first_thread = provider._thread
        first_thread.join(timeout=5)
        provider._thread.join(timeout=5)

        assert provider._thread is not first_thread
        assert responder.results == [
            {"status": "error", "errorMessage": "User denied authorization"},
            {
                "status": "loggedIn",
                "session": {
                    "secret": "s1",
                    "token": "t1",
                    "userId": "42",
                    "username": "alice",
                },
            },
        ]
        server.start.assert_called_once()
        assert coordinator.current_attempt is None


class TestPlatformResults:
    """Tests for handle_platform_result."""

    @pytest.fixture
    def waiting(self, config, twitter_provider):
        """Attach a real, unstarted callback server as the waiting handshake."""
        callback_server = OAuthCallbackServer(config)
        twitter_provider._server = callback_server
        return callback_server

    def test_ok_delivers_redirect(self, twitter_provider, waiting):
        """RESULT_OK delivers the redirect parameters."""
        twitter_provider.handle_platform_result(
            140, RESULT_OK, {"oauth_token": "req_token", "oauth_verifier": "verifier"}
        )

        assert waiting.result.success is True
        assert waiting.result.oauth_verifier == "verifier"

    def test_cancelled(self, twitter_provider, waiting):
        """RESULT_CANCELED delivers a cancellation."""
        twitter_provider.handle_platform_result(140, RESULT_CANCELED, None)

        assert waiting.result.success is False
        assert waiting.result.reason == "Authorization cancelled"

    def test_unknown_result_code(self, twitter_provider, waiting):
        """Other result codes are failures."""
        twitter_provider.handle_platform_result(140, 7, None)

        assert waiting.result.error == "unknown_result"

    def test_ok_with_non_mapping_payload(self, twitter_provider, waiting):
        """A payload that is not a mapping counts as a missing verifier."""
        twitter_provider.handle_platform_result(140, RESULT_OK, "garbage")

        assert waiting.result.error == "missing_verifier"

    def test_other_request_code_ignored(self, twitter_provider, waiting):
        """Results for other request codes are ignored."""
        twitter_provider.handle_platform_result(99, RESULT_OK, {"oauth_verifier": "v"})

        assert waiting.result is None

    def test_ignored_without_handshake(self, twitter_provider):
        """Results arriving with no handshake waiting are dropped."""
        twitter_provider.handle_platform_result(140, RESULT_CANCELED, None)


class TestCookies:
    """Tests for session cookie handling."""

    def test_clear_session_cookies(self, config):
        """clear_session_cookies drops session cookies and keeps persistent ones."""
        provider = TwitterAuthorizationProvider(config)
        provider.cookies.set("auth_token", "abc", domain="twitter.com")
        provider.cookies.set(
            "guest_id", "v1", domain="twitter.com", expires=4102444800, discard=False
        )

        provider.clear_session_cookies()

        assert provider.cookies.get("auth_token") is None
        assert provider.cookies.get("guest_id") == "v1"

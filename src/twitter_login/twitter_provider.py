"""
Twitter OAuth 1.0a authorization provider.

This module implements the three-legged "Log in with Twitter" handshake:

1. Fetch a request token and build the authorization URL
2. Send the user to Twitter in their browser
3. Receive the redirect (oauth_token + oauth_verifier) on the local
   callback server, or from the host platform via the result hook
4. Exchange the verifier for the access token pair
5. Look up the user id and handle for the new credentials

The handshake runs on its own thread; the outcome is reported through
the AuthorizationCallback passed to authorize().
"""

import logging
import threading
import webbrowser
from collections.abc import Mapping
from typing import Any, Callable, Optional

import tweepy
from requests.cookies import RequestsCookieJar

from .auth_server import AuthorizationResult, OAuthCallbackServer
from .config import ConsumerCredentials, TwitterLoginConfig
from .exceptions import AuthorizationError, InvalidSessionError
from .provider import AuthorizationCallback, AuthorizationProvider
from .session import SessionRecord

logger = logging.getLogger(__name__)

# Platform result codes
RESULT_OK = -1
RESULT_CANCELED = 0


class TwitterAuthorizationProvider(AuthorizationProvider):
    """
    Authorization provider backed by tweepy's OAuth 1.0a user handler.

    Example:
        provider = TwitterAuthorizationProvider(TwitterLoginConfig.from_env())
        provider.configure(ConsumerCredentials.from_env())
        provider.authorize(callback)  # returns immediately
    """

    def __init__(
        self,
        config: TwitterLoginConfig,
        handler_factory: Callable[..., Any] = tweepy.OAuth1UserHandler,
        client_factory: Callable[..., Any] = tweepy.Client,
        browser: Callable[[str], Any] = webbrowser.open,
        server_factory: Callable[[TwitterLoginConfig], OAuthCallbackServer] = OAuthCallbackServer,
    ):
        """
        Initialize Twitter provider.

        Args:
            config: Login configuration (callback server, timeout, browser)
            handler_factory: Builds the OAuth 1.0a user handler
            client_factory: Builds the API client used to look up the user
            browser: Opens the authorization URL
            server_factory: Builds the callback server for one handshake
        """
        self.config = config
        self.cookies = RequestsCookieJar()
        self.on_authorization_url: Optional[Callable[[str], None]] = None
        self._handler_factory = handler_factory
        self._client_factory = client_factory
        self._browser = browser
        self._server_factory = server_factory
        self._credentials: Optional[ConsumerCredentials] = None
        self._server: Optional[OAuthCallbackServer] = None
        self._thread: Optional[threading.Thread] = None
        self._busy = False
        self._lock = threading.Lock()

    @property
    def is_configured(self) -> bool:
        return self._credentials is not None

    @property
    def is_running(self) -> bool:
        return self._busy

    def configure(self, credentials: ConsumerCredentials) -> None:
        self._credentials = credentials
        logger.debug(f"Twitter provider configured with {credentials!r}")

    def authorize(self, callback: AuthorizationCallback) -> None:
        """
        Start the handshake on a background thread.

        Args:
            callback: Receives the SessionRecord or the failure reason

        Raises:
            AuthorizationError: If not configured or a handshake is already running
        """
        if self._credentials is None:
            raise AuthorizationError("Twitter provider is not configured")

        with self._lock:
            if self.is_running:
                raise AuthorizationError("A Twitter handshake is already running")

            server = self._server_factory(self.config)
            self._server = server
            self._busy = True
            self._thread = threading.Thread(
                target=self._run_handshake,
                args=(server, callback),
                name="twitter-login-handshake",
                daemon=True,
            )
            self._thread.start()

    def _run_handshake(self, server: OAuthCallbackServer, callback: AuthorizationCallback) -> None:
        identity: Optional[SessionRecord] = None
        reason = "Authorization failed"

        try:
            identity = self._handshake(server)
        except AuthorizationError as e:
            reason = str(e)
        except tweepy.TweepyException as e:
            logger.error(f"Twitter request failed: {e}")
            reason = f"Twitter request failed: {e}"
        except InvalidSessionError as e:
            logger.error(f"Twitter returned an incomplete identity: {e}")
            reason = str(e)
        except OSError as e:
            logger.error(f"Could not start OAuth callback server: {e}")
            reason = f"Could not start OAuth callback server: {e}"
        except Exception as e:
            # Last stop on this thread: the attempt must still get an answer
            logger.error(f"Unexpected error during authorization: {e}", exc_info=True)
            reason = f"Unexpected error during authorization: {e}"
        finally:
            try:
                server.stop()
            except Exception as e:
                logger.warning(f"Could not stop OAuth callback server: {e}")
            # Free the slot before reporting so the caller can retry at once
            with self._lock:
                if self._server is server:
                    self._server = None
                self._busy = False

        if identity is not None:
            callback.success(identity)
        else:
            logger.warning(f"Twitter authorization failed: {reason}")
            callback.failure(reason)

    def _handshake(self, server: OAuthCallbackServer) -> SessionRecord:
        server.start()

        handler = self._handler_factory(
            self._credentials.consumer_key,
            self._credentials.consumer_secret,
            callback=self.config.callback_url,
        )
        oauth_session = getattr(handler, "oauth", None)
        if oauth_session is not None:
            oauth_session.cookies = self.cookies

        auth_url = handler.get_authorization_url(
            signin_with_twitter=self.config.signin_with_twitter
        )
        self._open_authorization_url(auth_url)

        result = server.wait_for_callback(self.config.authorization_timeout_seconds)
        if not result.success:
            raise AuthorizationError(result.reason)

        expected_token = (handler.request_token or {}).get("oauth_token")
        if expected_token and result.oauth_token != expected_token:
            raise AuthorizationError("Callback oauth_token does not match the request token")

        access_token, access_token_secret = handler.get_access_token(result.oauth_verifier)

        client = self._client_factory(
            consumer_key=self._credentials.consumer_key,
            consumer_secret=self._credentials.consumer_secret,
            access_token=access_token,
            access_token_secret=access_token_secret,
        )
        me = client.get_me(user_auth=True)
        if not me.data:
            raise AuthorizationError("Could not read the authorized user's profile")

        return SessionRecord(
            token=access_token,
            secret=access_token_secret,
            user_id=str(me.data.id),
            username=me.data.username,
        )

    def _open_authorization_url(self, auth_url: str) -> None:
        if self.on_authorization_url is not None:
            self.on_authorization_url(auth_url)

        if not self.config.open_browser:
            logger.info(f"Open this URL to authorize the app: {auth_url}")
            return

        try:
            self._browser(auth_url)
        except webbrowser.Error as e:
            logger.warning(f"Could not open browser automatically: {e}")
            logger.info(f"Open this URL to authorize the app: {auth_url}")

    def handle_platform_result(self, request_code: int, result_code: int, payload: Any) -> None:
        """
        Feed a redirect captured by the host platform into the waiting handshake.

        Args:
            request_code: Must equal config.auth_request_code, otherwise ignored
            result_code: RESULT_OK delivers the payload, RESULT_CANCELED cancels
            payload: Mapping of redirect query parameters
        """
        if request_code != self.config.auth_request_code:
            logger.debug(f"Ignoring platform result for request code {request_code}")
            return

        with self._lock:
            server = self._server
        if server is None:
            logger.debug("Ignoring platform result: no handshake waiting")
            return

        if result_code == RESULT_CANCELED:
            result = AuthorizationResult(
                success=False, error="cancelled", error_description="Authorization cancelled"
            )
        elif result_code == RESULT_OK:
            result = AuthorizationResult.from_query(payload if isinstance(payload, Mapping) else {})
        else:
            result = AuthorizationResult(
                success=False,
                error="unknown_result",
                error_description=f"Unexpected platform result code {result_code}",
            )

        server.deliver(result)

    def clear_session_cookies(self) -> None:
        self.cookies.clear_session_cookies()
        logger.debug("Cleared Twitter session cookies")

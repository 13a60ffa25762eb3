"""
OAuth 1.0a callback server for the Twitter login flow.

This module provides a small local server that receives Twitter's
redirect after the user approves (or denies) the app. It runs on a
background thread for the duration of one handshake and shuts down
after the first result.

A result can also be injected with deliver(), which is how results
captured by the host platform reach a waiting handshake.
"""

import logging
import ssl
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from flask import Flask, Response, request
from werkzeug.serving import BaseWSGIServer, make_server

from .config import TwitterLoginConfig

logger = logging.getLogger(__name__)

_PAGE = """<html>
<head><title>{title}</title></head>
<body style="font-family: Arial, sans-serif; max-width: 600px; margin: 50px auto; padding: 20px;">
    <h1 style="color: {color};">{title}</h1>
    <p>{body}</p>
    <p style="margin-top: 30px; color: #666;">You can close this window.</p>
</body>
</html>"""


@dataclass
class AuthorizationResult:
    """
    Result of the browser leg of the OAuth 1.0a flow.

    Attributes:
        success: Whether the user approved the app
        oauth_token: Request token echoed back by Twitter (if successful)
        oauth_verifier: Verifier to exchange for the access token (if successful)
        error: Error code (if failed)
        error_description: Human-readable error description (if failed)
    """

    success: bool
    oauth_token: Optional[str] = None
    oauth_verifier: Optional[str] = None
    error: Optional[str] = None
    error_description: Optional[str] = None

    @classmethod
    def from_query(cls, params) -> "AuthorizationResult":
        """
        Build a result from redirect query parameters.

        Args:
            params: Mapping with oauth_token and oauth_verifier, or denied

        Returns:
            AuthorizationResult
        """
        if params.get("denied"):
            return cls(
                success=False,
                error="access_denied",
                error_description="User denied authorization",
            )

        token = params.get("oauth_token")
        verifier = params.get("oauth_verifier")
        if not token or not verifier:
            return cls(
                success=False,
                error="missing_verifier",
                error_description="No oauth_token/oauth_verifier received",
            )

        return cls(success=True, oauth_token=token, oauth_verifier=verifier)

    @property
    def reason(self) -> str:
        """Failure reason suitable for an error envelope."""
        return self.error_description or self.error or "Authorization failed"


class OAuthCallbackServer:
    """
    Local server to handle the OAuth redirect.

    The server:
    1. Starts listening on the configured host/port (HTTPS when SSL paths are set)
    2. Waits for Twitter's redirect (or an injected result)
    3. Keeps the first result and ignores any later one
    4. Shuts down when stop() is called
    """

    def __init__(self, config: TwitterLoginConfig):
        """
        Initialize callback server.

        Args:
            config: Login configuration with callback host, port and path
        """
        self.config = config
        self.app = Flask(__name__)
        self.app.logger.setLevel(logging.WARNING)  # Suppress Flask logs
        self.server: Optional[BaseWSGIServer] = None
        self.result: Optional[AuthorizationResult] = None
        self._thread: Optional[threading.Thread] = None
        self._result_lock = threading.Lock()
        self._done = threading.Event()

        self.app.add_url_rule(
            self.config.callback_path,
            "oauth_callback",
            self._handle_callback,
            methods=["GET"],
        )

        self.app.add_url_rule(
            "/oauth/status", "oauth_status", self._handle_status, methods=["GET"]
        )

    def deliver(self, result: AuthorizationResult) -> bool:
        """
        Record a result and wake up the waiting handshake.

        Args:
            result: Outcome of the browser leg

        Returns:
            True if this was the first result, False if one was already recorded
        """
        with self._result_lock:
            if self.result is not None:
                logger.debug("Ignoring second authorization result")
                return False
            self.result = result
        self._done.set()
        return True

    def _handle_callback(self) -> Response:
        """Handle the OAuth redirect from Twitter."""
        logger.info("Received OAuth callback")
        result = AuthorizationResult.from_query(request.args)
        self.deliver(result)

        if not result.success:
            logger.error(f"OAuth error: {result.error} - {result.error_description}")
            return Response(
                _PAGE.format(
                    title="Authorization Failed",
                    color="#d32f2f",
                    body=result.error_description,
                ),
                status=400,
                content_type="text/html",
            )

        logger.info("OAuth verifier received successfully")
        return Response(
            _PAGE.format(
                title="Authorization Successful",
                color="#4caf50",
                body="The application has been authorized to access your Twitter account.",
            ),
            status=200,
            content_type="text/html",
        )

    def _handle_status(self) -> Response:
        """Status endpoint for debugging."""
        return Response(
            '{"status": "running", "waiting_for": "oauth_callback"}',
            status=200,
            content_type="application/json",
        )

    def _ssl_context(self) -> Optional[ssl.SSLContext]:
        if not self.config.use_ssl:
            return None

        cert_path = Path(self.config.ssl_cert_path)
        key_path = Path(self.config.ssl_key_path)

        if not cert_path.exists():
            raise FileNotFoundError(f"SSL certificate not found at {cert_path}")

        if not key_path.exists():
            raise FileNotFoundError(f"SSL key not found at {key_path}")

        ssl_context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
        ssl_context.load_cert_chain(str(cert_path), str(key_path))
        return ssl_context

    def start(self) -> None:
        """
        Start the callback server in a background thread.

        Raises:
            FileNotFoundError: If configured SSL files are missing
            OSError: If the port cannot be bound
        """
        self.server = make_server(
            self.config.callback_host,
            self.config.callback_port,
            self.app,
            threaded=True,
            ssl_context=self._ssl_context(),
        )

        self._thread = threading.Thread(
            target=self.server.serve_forever, name="oauth-callback-server", daemon=True
        )
        self._thread.start()

        logger.info(f"OAuth callback server listening on {self.config.callback_url}")

    def wait_for_callback(self, timeout: int = 300) -> AuthorizationResult:
        """
        Wait for the OAuth redirect.

        Args:
            timeout: Maximum seconds to wait (default: 300 = 5 minutes)

        Returns:
            AuthorizationResult with verifier or error
        """
        logger.info(f"Waiting for OAuth callback (timeout: {timeout}s)")

        if self._done.wait(timeout=timeout):
            return self.result

        logger.warning(f"Timeout waiting for callback after {timeout}s")
        timed_out = AuthorizationResult(
            success=False,
            error="timeout",
            error_description=f"No authorization received within {timeout} seconds",
        )
        # A late redirect loses to the timeout
        if not self.deliver(timed_out):
            return self.result
        return timed_out

    def stop(self) -> None:
        """Stop the callback server."""
        if self.server:
            logger.info("OAuth callback server shutting down")
            self.server.shutdown()
            self.server.server_close()
            self.server = None

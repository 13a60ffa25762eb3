"""
Configuration for the Twitter login coordinator.

This module provides the consumer credentials supplied by callers on
every request, and the application configuration for the local OAuth
callback server and session storage. Configuration can be loaded from
environment variables or provided programmatically.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .exceptions import ConfigurationError

DEFAULT_SESSION_FILE = "~/.twitter_login/session.json"


@dataclass(frozen=True)
class ConsumerCredentials:
    """
    Twitter app consumer key pair.

    The provider is configured with the first pair it sees and keeps it
    for the rest of the process lifetime. No validation is applied:
    empty values are passed through as supplied.

    Attributes:
        consumer_key: Twitter app API key
        consumer_secret: Twitter app API secret
    """

    consumer_key: str = ""
    consumer_secret: str = ""

    @classmethod
    def from_arguments(cls, arguments: Optional[Mapping]) -> "ConsumerCredentials":
        """
        Build credentials from request channel arguments.

        Args:
            arguments: Mapping with optional consumerKey and consumerSecret

        Returns:
            ConsumerCredentials (missing values become empty strings)
        """
        arguments = arguments or {}
        return cls(
            consumer_key=arguments.get("consumerKey") or "",
            consumer_secret=arguments.get("consumerSecret") or "",
        )

    @classmethod
    def from_env(cls) -> "ConsumerCredentials":
        """
        Load credentials from TWITTER_CONSUMER_KEY and TWITTER_CONSUMER_SECRET.

        Returns:
            ConsumerCredentials (missing variables become empty strings)
        """
        return cls(
            consumer_key=os.environ.get("TWITTER_CONSUMER_KEY", ""),
            consumer_secret=os.environ.get("TWITTER_CONSUMER_SECRET", ""),
        )

    def __repr__(self) -> str:
        return f"ConsumerCredentials(consumer_key={self.consumer_key[:4]!r}...)"


@dataclass
class TwitterLoginConfig:
    """
    Configuration for the login coordinator and its Twitter provider.

    Attributes:
        session_file: Path to the session storage file
        callback_host: Host the local OAuth callback server binds and redirects to
        callback_port: Port for the callback server
        callback_path: URL path for the callback
        ssl_cert_path: SSL certificate (callback server runs HTTPS when set with key)
        ssl_key_path: SSL private key
        authorization_timeout_seconds: How long a handshake may wait for the redirect
        signin_with_twitter: Use the authenticate endpoint instead of authorize
        open_browser: Open the authorization URL in the system browser
        auth_request_code: Request code accepted by the platform result hook
    """

    session_file: str = DEFAULT_SESSION_FILE

    # Callback configuration
    callback_host: str = "127.0.0.1"
    callback_port: int = 8976
    callback_path: str = "/oauth/callback"

    # Optional SSL for the callback server
    ssl_cert_path: Optional[str] = None
    ssl_key_path: Optional[str] = None

    # Handshake behaviour
    authorization_timeout_seconds: int = 300
    signin_with_twitter: bool = False
    open_browser: bool = True
    auth_request_code: int = 140

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.session_file:
            raise ConfigurationError("session_file cannot be empty")

        if not isinstance(self.callback_port, int) or not (
            1 <= self.callback_port <= 65535
        ):
            raise ConfigurationError(
                f"callback_port must be between 1 and 65535, got {self.callback_port}"
            )

        if not self.callback_path.startswith("/"):
            raise ConfigurationError(
                f"callback_path must start with '/', got {self.callback_path!r}"
            )

        if self.authorization_timeout_seconds <= 0:
            raise ConfigurationError("authorization_timeout_seconds must be positive")

        if bool(self.ssl_cert_path) != bool(self.ssl_key_path):
            raise ConfigurationError(
                "ssl_cert_path and ssl_key_path must be set together"
            )

    @property
    def use_ssl(self) -> bool:
        """Whether the callback server serves HTTPS."""
        return bool(self.ssl_cert_path and self.ssl_key_path)

    @property
    def callback_url(self) -> str:
        """
        Full callback URL registered with Twitter as the OAuth redirect.

        Returns:
            Complete callback URL (e.g., http://127.0.0.1:8976/oauth/callback)
        """
        scheme = "https" if self.use_ssl else "http"
        return f"{scheme}://{self.callback_host}:{self.callback_port}{self.callback_path}"

    @property
    def session_path(self) -> str:
        """Session file path with ~ expanded."""
        return os.path.expanduser(self.session_file)

    @classmethod
    def from_env(cls) -> "TwitterLoginConfig":
        """
        Load configuration from environment variables.

        Optional environment variables:
            TWITTER_LOGIN_SESSION_FILE: Session file path (default: ~/.twitter_login/session.json)
            TWITTER_LOGIN_CALLBACK_HOST: Callback host (default: 127.0.0.1)
            TWITTER_LOGIN_CALLBACK_PORT: Callback port (default: 8976)
            TWITTER_LOGIN_CALLBACK_PATH: Callback path (default: /oauth/callback)
            TWITTER_LOGIN_SSL_CERT_PATH: SSL certificate path
            TWITTER_LOGIN_SSL_KEY_PATH: SSL private key path
            TWITTER_LOGIN_TIMEOUT: Handshake timeout in seconds (default: 300)
            TWITTER_LOGIN_OPEN_BROWSER: "0"/"false" to only print the URL
            TWITTER_LOGIN_SIGNIN_WITH_TWITTER: "1"/"true" to use the authenticate endpoint
            TWITTER_LOGIN_AUTH_REQUEST_CODE: Platform result request code (default: 140)

        Returns:
            TwitterLoginConfig instance

        Raises:
            ConfigurationError: If a numeric variable cannot be parsed
        """
        try:
            callback_port = int(os.environ.get("TWITTER_LOGIN_CALLBACK_PORT", "8976"))
            timeout = int(os.environ.get("TWITTER_LOGIN_TIMEOUT", "300"))
            auth_request_code = int(os.environ.get("TWITTER_LOGIN_AUTH_REQUEST_CODE", "140"))
        except ValueError as e:
            raise ConfigurationError(f"Invalid numeric setting: {e}") from e

        open_browser = os.environ.get("TWITTER_LOGIN_OPEN_BROWSER", "1").lower()
        signin = os.environ.get("TWITTER_LOGIN_SIGNIN_WITH_TWITTER", "0").lower()

        return cls(
            session_file=os.environ.get("TWITTER_LOGIN_SESSION_FILE", DEFAULT_SESSION_FILE),
            callback_host=os.environ.get("TWITTER_LOGIN_CALLBACK_HOST", "127.0.0.1"),
            callback_port=callback_port,
            callback_path=os.environ.get("TWITTER_LOGIN_CALLBACK_PATH", "/oauth/callback"),
            ssl_cert_path=os.environ.get("TWITTER_LOGIN_SSL_CERT_PATH") or None,
            ssl_key_path=os.environ.get("TWITTER_LOGIN_SSL_KEY_PATH") or None,
            authorization_timeout_seconds=timeout,
            signin_with_twitter=signin in ("1", "true", "yes"),
            open_browser=open_browser not in ("0", "false", "no"),
            auth_request_code=auth_request_code,
        )

"""Configuration management for the FastAPI server.

This module handles configuration loading from environment variables,
providing sensible defaults for local development.
"""

import logging
from typing import Optional

from pydantic_settings import BaseSettings

from src.twitter_login.config import DEFAULT_SESSION_FILE, TwitterLoginConfig

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application configuration settings.

    Attributes:
        app_name: Application name
        version: Application version
        debug: Debug mode flag
        session_file: Session storage file path
        callback_host: OAuth callback server host
        callback_port: OAuth callback server port
        callback_path: OAuth callback URL path
        authorization_timeout_seconds: Handshake timeout enforced by the provider
        channel_timeout_seconds: How long an HTTP caller waits for authorize
        open_browser: Open the authorization URL on the server machine
        signin_with_twitter: Use the authenticate endpoint instead of authorize
        auth_request_code: Request code accepted by the platform result hook
        cors_origins: List of allowed CORS origins
        host: Server host address
        port: Server port number
    """

    app_name: str = "Twitter Login API"
    version: str = "1.0.0"
    debug: bool = False

    # Session storage
    session_file: str = DEFAULT_SESSION_FILE

    # OAuth callback server
    callback_host: str = "127.0.0.1"
    callback_port: int = 8976
    callback_path: str = "/oauth/callback"
    ssl_cert_path: Optional[str] = None
    ssl_key_path: Optional[str] = None
    authorization_timeout_seconds: int = 300
    open_browser: bool = True
    signin_with_twitter: bool = False
    auth_request_code: int = 140

    # Caller-side wait for authorize; the attempt itself keeps running
    channel_timeout_seconds: float = 330.0

    # CORS configuration - allow local development origins
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]

    # Server configuration
    host: str = "127.0.0.1"
    port: int = 8000

    class Config:
        """Pydantic configuration."""
        env_prefix = "TWITTER_LOGIN_"
        case_sensitive = False

    def login_config(self) -> TwitterLoginConfig:
        """Build the coordinator configuration from these settings.

        Returns:
            TwitterLoginConfig for the coordinator and Twitter provider
        """
        return TwitterLoginConfig(
            session_file=self.session_file,
            callback_host=self.callback_host,
            callback_port=self.callback_port,
            callback_path=self.callback_path,
            ssl_cert_path=self.ssl_cert_path,
            ssl_key_path=self.ssl_key_path,
            authorization_timeout_seconds=self.authorization_timeout_seconds,
            signin_with_twitter=self.signin_with_twitter,
            open_browser=self.open_browser,
            auth_request_code=self.auth_request_code,
        )


# Global settings instance
settings = Settings()

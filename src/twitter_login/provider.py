"""
Authorization provider interface.

The provider performs the actual OAuth handshake on an execution context
it manages itself and reports back through an AuthorizationCallback. It
must report success or failure at most once per authorize call.
"""

from abc import ABC, abstractmethod
from typing import Any

from .config import ConsumerCredentials
from .session import SessionRecord


class AuthorizationCallback(ABC):
    """Receives the outcome of one handshake."""

    @abstractmethod
    def success(self, identity: SessionRecord) -> None:
        """Handshake completed; identity holds the new credentials."""
        pass

    @abstractmethod
    def failure(self, reason: str) -> None:
        """Handshake failed (cancelled, denied, network error, ...)."""
        pass


class AuthorizationProvider(ABC):
    """
    Base class for OAuth handshake providers.

    Example:
        >>> class MyProvider(AuthorizationProvider):
        >>>     def configure(self, credentials):
        >>>         self._credentials = credentials
        >>>
        >>>     def authorize(self, callback):
        >>>         start_browser_flow(on_done=callback.success,
        >>>                            on_error=callback.failure)
    """

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        pass

    @abstractmethod
    def configure(self, credentials: ConsumerCredentials) -> None:
        """
        Configure the provider with the app's consumer credentials.

        Args:
            credentials: Consumer key pair supplied by the caller
        """
        pass

    @abstractmethod
    def authorize(self, callback: AuthorizationCallback) -> None:
        """
        Begin an interactive handshake and return immediately.

        Args:
            callback: Receives exactly one of success or failure later

        Raises:
            AuthorizationError: If the handshake cannot be started
        """
        pass

    def handle_platform_result(
        self, request_code: int, result_code: int, payload: Any
    ) -> None:
        """
        Parse a raw result delivered by the host platform.

        The default implementation ignores it.

        Args:
            request_code: Code identifying which request the result belongs to
            result_code: Platform result code (OK, cancelled, ...)
            payload: Opaque result data
        """
        pass

    def clear_session_cookies(self) -> None:
        """Drop ambient browser/session cookies. The default does nothing."""
        pass

"""
Login coordinator for high-level login operations.

This module is the main interface behind the request channel. It
serializes interactive authorization attempts (at most one in flight),
turns the provider's asynchronous callback into exactly one response,
and keeps the session manager up to date on every outcome.

State machine (one coordinator per process):

    IDLE --authorize accepted--> IN_PROGRESS --success or failure--> IDLE

An authorize call while IN_PROGRESS is rejected with LoginInProgressError
and leaves the running attempt untouched.
"""

import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Optional

from .config import ConsumerCredentials, TwitterLoginConfig
from .events import PlatformResult, PlatformResultBus
from .exceptions import AuthorizationError, LoginInProgressError, SessionStorageError
from .provider import AuthorizationCallback, AuthorizationProvider
from .responder import Responder, SingleUseResponder
from .session import LoginResult, SessionRecord
from .session_manager import SessionManager
from .session_storage import FileSessionStorage, SessionStorage
from .twitter_provider import TwitterAuthorizationProvider

logger = logging.getLogger(__name__)


class AttemptState(Enum):
    """Whether an authorization attempt is currently running."""

    IDLE = "idle"
    IN_PROGRESS = "in_progress"


@dataclass(frozen=True)
class AuthorizationAttempt:
    """
    One in-flight interactive login.

    Attributes:
        request_id: Correlation handle passed to the provider callback
        responder: Single-use capability to answer the authorize call
        started_at: When the attempt was accepted (UTC)
    """

    request_id: str
    responder: SingleUseResponder
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class _AttemptCallback(AuthorizationCallback):
    """Routes a provider outcome back to the attempt that started it."""

    def __init__(self, coordinator: "LoginCoordinator", request_id: str):
        self._coordinator = coordinator
        self.request_id = request_id

    def success(self, identity: SessionRecord) -> None:
        self._coordinator.on_authorization_succeeded(identity, request_id=self.request_id)

    def failure(self, reason: str) -> None:
        self._coordinator.on_authorization_failed(reason, request_id=self.request_id)


class LoginCoordinator:
    """
    Serializes login attempts and owns the session lifecycle.

    Example:
        coordinator = LoginCoordinator(provider, SessionManager(storage))
        coordinator.authorize(credentials, responder)
        # ... later, the provider calls back and responder receives
        # {"status": "loggedIn", "session": {...}}
    """

    def __init__(self, provider: AuthorizationProvider, session_manager: SessionManager):
        """
        Initialize login coordinator.

        Args:
            provider: Authorization provider performing the handshake
            session_manager: Holder of the current session record
        """
        self.provider = provider
        self.session_manager = session_manager
        self._attempt: Optional[AuthorizationAttempt] = None
        self._lock = threading.Lock()
        self._configure_lock = threading.Lock()
        self._credentials: Optional[ConsumerCredentials] = None

    @classmethod
    def from_config(
        cls,
        config: Optional[TwitterLoginConfig] = None,
        provider: Optional[AuthorizationProvider] = None,
        storage: Optional[SessionStorage] = None,
    ) -> "LoginCoordinator":
        """
        Build a coordinator with file storage and the Twitter provider.

        Args:
            config: Login configuration (loads from environment if not provided)
            provider: Authorization provider (Twitter provider if not provided)
            storage: Session storage (file storage at config.session_file if not provided)

        Returns:
            LoginCoordinator instance
        """
        config = config or TwitterLoginConfig.from_env()
        storage = storage or FileSessionStorage(config.session_file)
        provider = provider or TwitterAuthorizationProvider(config)
        return cls(provider, SessionManager(storage))

    @property
    def state(self) -> AttemptState:
        return AttemptState.IN_PROGRESS if self._attempt else AttemptState.IDLE

    @property
    def current_attempt(self) -> Optional[AuthorizationAttempt]:
        return self._attempt

    @property
    def is_configured(self) -> bool:
        return self._credentials is not None

    def _ensure_configured(self, credentials: ConsumerCredentials) -> None:
        """
        Configure the provider on first use.

        Later calls keep the first configuration. Rotating the consumer
        credentials requires a new process.
        """
        with self._configure_lock:
            if self._credentials is None:
                self.provider.configure(credentials)
                self._credentials = credentials
                logger.info("Authorization provider configured")
            elif credentials != self._credentials:
                logger.warning(
                    "Ignoring different consumer credentials; the provider keeps "
                    "the configuration from its first use"
                )

    def get_current_session(self, credentials: ConsumerCredentials) -> Optional[SessionRecord]:
        """
        Get the active session record.

        Args:
            credentials: Consumer credentials (used only to configure on first call)

        Returns:
            SessionRecord if logged in, None otherwise
        """
        self._ensure_configured(credentials)
        return self.session_manager.get()

    def authorize(self, credentials: ConsumerCredentials, responder: Responder) -> None:
        """
        Start an interactive login.

        The call returns immediately; the responder is answered later,
        exactly once, with the LoginResult of the handshake.

        Args:
            credentials: Consumer credentials (used only to configure on first call)
            responder: Where the result envelope is sent

        Raises:
            LoginInProgressError: If another attempt is still running. The
                responder is left unanswered so the caller can report it.
        """
        with self._lock:
            if self._attempt is not None:
                logger.warning(
                    f"authorize rejected: attempt {self._attempt.request_id} is still running"
                )
                raise LoginInProgressError("authorize")

            attempt = AuthorizationAttempt(
                request_id=uuid.uuid4().hex, responder=SingleUseResponder(responder)
            )
            self._attempt = attempt

        logger.info(f"Starting authorization attempt {attempt.request_id}")

        try:
            self._ensure_configured(credentials)
            self.provider.authorize(_AttemptCallback(self, attempt.request_id))
        except AuthorizationError as e:
            logger.error(f"Could not start authorization: {e}")
            self.on_authorization_failed(str(e), request_id=attempt.request_id)
        except Exception:
            # Release the slot so the next authorize is not locked out
            self._take_attempt(attempt.request_id)
            raise

    def log_out(self, credentials: ConsumerCredentials) -> None:
        """
        Log out and remove the session record.

        Always succeeds, whether or not a session existed. A session file
        that cannot be removed is logged; the session is still gone for
        this process.

        Args:
            credentials: Consumer credentials (used only to configure on first call)
        """
        self.provider.clear_session_cookies()
        self._ensure_configured(credentials)
        try:
            self.session_manager.clear()
        except SessionStorageError as e:
            logger.error(f"Logged out, but the stored session was not removed: {e}")
            return
        logger.info("Logged out")

    def _take_attempt(self, request_id: Optional[str]) -> Optional[AuthorizationAttempt]:
        """
        Atomically detach the running attempt.

        Returns:
            The attempt, or None when there is none or request_id belongs
            to an attempt that already finished
        """
        with self._lock:
            attempt = self._attempt
            if attempt is None:
                return None
            if request_id is not None and attempt.request_id != request_id:
                return None
            self._attempt = None
            return attempt

    def on_authorization_succeeded(
        self, identity: SessionRecord, request_id: Optional[str] = None
    ) -> None:
        """
        Handle a successful handshake.

        Stores the new session and sends {"status": "loggedIn", ...} once.
        Does nothing for a stale or duplicate callback.

        Args:
            identity: Credentials and user of the authorized account
            request_id: Attempt the outcome belongs to (None means the current one)
        """
        attempt = self._take_attempt(request_id)
        if attempt is None:
            logger.debug("Dropping success callback: no matching attempt in progress")
            return

        try:
            self.session_manager.set(identity)
        except SessionStorageError as e:
            logger.error(f"Attempt {attempt.request_id} succeeded but session was not saved: {e}")
            attempt.responder.success(LoginResult.failed(str(e)).to_dict())
            return

        logger.info(f"Attempt {attempt.request_id} logged in as @{identity.username}")
        attempt.responder.success(LoginResult.logged_in(identity).to_dict())

    def on_authorization_failed(self, reason: str, request_id: Optional[str] = None) -> None:
        """
        Handle a failed handshake.

        Sends {"status": "error", "errorMessage": reason} once and leaves
        the session record unchanged. Does nothing for a stale callback.

        Args:
            reason: Human-readable failure reason
            request_id: Attempt the outcome belongs to (None means the current one)
        """
        attempt = self._take_attempt(request_id)
        if attempt is None:
            logger.debug("Dropping failure callback: no matching attempt in progress")
            return

        logger.info(f"Attempt {attempt.request_id} failed: {reason}")
        attempt.responder.success(LoginResult.failed(reason).to_dict())

    def deliver_platform_result(self, request_code: int, result_code: int, payload: Any) -> bool:
        """
        Forward a raw platform result to the provider while a login runs.

        Returns:
            Always False: the result is never claimed exclusively
        """
        if self._attempt is not None:
            self.provider.handle_platform_result(request_code, result_code, payload)
        return False

    def _on_platform_result(self, result: PlatformResult) -> None:
        self.deliver_platform_result(result.request_code, result.result_code, result.payload)

    def subscribe_to(self, bus: PlatformResultBus) -> Callable[[], None]:
        """
        Listen for platform results published on bus.

        Returns:
            Callable that stops listening
        """
        return bus.subscribe(self._on_platform_result)

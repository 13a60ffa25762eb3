"""
Request channel binding for the login coordinator.

Inbound commands arrive as MethodCall objects (method name plus an
argument mapping) and are answered through a Responder. The binding is
transport agnostic: the HTTP server and the CLI both drive it.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict

from .config import ConsumerCredentials
from .coordinator import LoginCoordinator
from .exceptions import LoginInProgressError
from .responder import Responder

logger = logging.getLogger(__name__)

CHANNEL_NAME = "com.roughike/flutter_twitter_login"

METHOD_GET_CURRENT_SESSION = "getCurrentSession"
METHOD_AUTHORIZE = "authorize"
METHOD_LOG_OUT = "logOut"


@dataclass
class MethodCall:
    """
    One inbound command.

    Attributes:
        method: Command name (getCurrentSession, authorize, logOut)
        arguments: Command arguments (consumerKey, consumerSecret)
    """

    method: str
    arguments: Dict[str, Any] = field(default_factory=dict)


class LoginMethodHandler:
    """Dispatches channel commands to the login coordinator."""

    def __init__(self, coordinator: LoginCoordinator):
        self.coordinator = coordinator
        self._methods: Dict[str, Callable[[ConsumerCredentials, Responder], None]] = {
            METHOD_GET_CURRENT_SESSION: self._get_current_session,
            METHOD_AUTHORIZE: self._authorize,
            METHOD_LOG_OUT: self._log_out,
        }

    @property
    def methods(self) -> list[str]:
        return list(self._methods)

    def on_method_call(self, call: MethodCall, responder: Responder) -> None:
        """
        Handle one command.

        Unknown commands are answered with not_implemented. A login that
        is already running is reported as a transport-level error; every
        handshake outcome arrives as a success envelope.

        Args:
            call: Inbound command
            responder: Where the response is sent
        """
        handler = self._methods.get(call.method)
        if handler is None:
            logger.warning(f"Unknown channel method: {call.method}")
            responder.not_implemented()
            return

        logger.debug(f"Channel call: {call.method}")
        credentials = ConsumerCredentials.from_arguments(call.arguments)

        try:
            handler(credentials, responder)
        except LoginInProgressError as e:
            responder.error(e.code, str(e), None)

    def _get_current_session(self, credentials: ConsumerCredentials, responder: Responder) -> None:
        record = self.coordinator.get_current_session(credentials)
        responder.success(record.to_dict() if record else None)

    def _authorize(self, credentials: ConsumerCredentials, responder: Responder) -> None:
        # Answered later by the coordinator
        self.coordinator.authorize(credentials, responder)

    def _log_out(self, credentials: ConsumerCredentials, responder: Responder) -> None:
        self.coordinator.log_out(credentials)
        responder.success(None)

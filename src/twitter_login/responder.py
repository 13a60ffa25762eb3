"""
Outbound responders for the request channel.

A responder is the capability to answer one inbound command. Transports
(HTTP, CLI, tests) implement Responder; the coordinator wraps it in a
SingleUseResponder so an authorization attempt can answer only once.
"""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

from .exceptions import ResponderAlreadyUsedError

logger = logging.getLogger(__name__)


class Responder(ABC):
    """Sends the response for one command back over the request channel."""

    @abstractmethod
    def success(self, result: Any) -> None:
        """Send a success envelope carrying result (may be None)."""
        pass

    @abstractmethod
    def error(self, code: str, message: str, details: Any = None) -> None:
        """Send a transport-level error."""
        pass

    @abstractmethod
    def not_implemented(self) -> None:
        """Signal that the command is not recognised."""
        pass


class SingleUseResponder(Responder):
    """
    Forwards the first response to a delegate and refuses any other.

    Raises:
        ResponderAlreadyUsedError: On the second and later responses
    """

    def __init__(self, delegate: Responder):
        self._delegate = delegate
        self._used = False
        self._lock = threading.Lock()

    @property
    def used(self) -> bool:
        return self._used

    def _claim(self) -> None:
        with self._lock:
            if self._used:
                raise ResponderAlreadyUsedError("A response was already sent")
            self._used = True

    def success(self, result: Any) -> None:
        self._claim()
        self._delegate.success(result)

    def error(self, code: str, message: str, details: Any = None) -> None:
        self._claim()
        self._delegate.error(code, message, details)

    def not_implemented(self) -> None:
        self._claim()
        self._delegate.not_implemented()


@dataclass
class ChannelReply:
    """
    A response as seen by the transport.

    Attributes:
        kind: "success", "error" or "not_implemented"
        result: Success payload
        code: Error code (for errors)
        message: Error message (for errors)
        details: Error details (for errors)
    """

    kind: str
    result: Any = None
    code: Optional[str] = None
    message: Optional[str] = None
    details: Any = None

    @property
    def is_success(self) -> bool:
        return self.kind == "success"


class BlockingResponder(Responder):
    """
    Responder a synchronous caller can wait on.

    Example:
        responder = BlockingResponder()
        handler.on_method_call(MethodCall("authorize", args), responder)
        reply = responder.wait(timeout=300)
    """

    def __init__(self):
        self._event = threading.Event()
        self.reply: Optional[ChannelReply] = None

    def _set(self, reply: ChannelReply) -> None:
        self.reply = reply
        self._event.set()

    def success(self, result: Any) -> None:
        self._set(ChannelReply(kind="success", result=result))

    def error(self, code: str, message: str, details: Any = None) -> None:
        self._set(ChannelReply(kind="error", code=code, message=message, details=details))

    def not_implemented(self) -> None:
        self._set(ChannelReply(kind="not_implemented"))

    def wait(self, timeout: Optional[float] = None) -> Optional[ChannelReply]:
        """
        Block until a response arrives.

        Args:
            timeout: Maximum seconds to wait (None waits forever)

        Returns:
            The reply, or None on timeout
        """
        if not self._event.wait(timeout=timeout):
            logger.warning(f"No response received within {timeout}s")
            return None
        return self.reply

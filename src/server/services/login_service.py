"""Login service wiring the coordinator into the FastAPI server.

Holds the process-wide coordinator, its channel handler and the platform
result bus, and adapts channel responses to asyncio futures so endpoint
handlers can await a login that finishes on the provider's thread.
"""

import asyncio
import logging
from typing import Any, Optional

from src.server.config import settings
from src.twitter_login.channel import LoginMethodHandler, MethodCall
from src.twitter_login.coordinator import LoginCoordinator
from src.twitter_login.events import PlatformResultBus
from src.twitter_login.responder import ChannelReply, Responder

logger = logging.getLogger(__name__)


class AsyncioResponder(Responder):
    """Resolves an asyncio future from whichever thread answers."""

    def __init__(self, loop: asyncio.AbstractEventLoop):
        """Initialize responder.

        Args:
            loop: Event loop that owns the future
        """
        self._loop = loop
        self.future: asyncio.Future = loop.create_future()

    def _resolve(self, reply: ChannelReply) -> None:
        def _set() -> None:
            # The caller may have given up waiting
            if not self.future.done():
                self.future.set_result(reply)

        try:
            self._loop.call_soon_threadsafe(_set)
        except RuntimeError as e:
            logger.warning(f"Dropping channel reply, event loop is gone: {e}")

    def success(self, result: Any) -> None:
        self._resolve(ChannelReply(kind="success", result=result))

    def error(self, code: str, message: str, details: Any = None) -> None:
        self._resolve(ChannelReply(kind="error", code=code, message=message, details=details))

    def not_implemented(self) -> None:
        self._resolve(ChannelReply(kind="not_implemented"))


class LoginService:
    """Process-wide login state for the HTTP channel.

    Attributes:
        coordinator: Login coordinator
        handler: Channel method handler
        platform_results: Bus that platform results are published on
    """

    def __init__(self, coordinator: LoginCoordinator):
        """Initialize login service.

        Args:
            coordinator: Login coordinator to expose over HTTP
        """
        self.coordinator = coordinator
        self.handler = LoginMethodHandler(coordinator)
        self.platform_results = PlatformResultBus()
        self._unsubscribe = coordinator.subscribe_to(self.platform_results)

    async def call(self, method: str, arguments: dict, timeout: Optional[float] = None) -> ChannelReply:
        """Run one channel method and wait for its reply.

        Args:
            method: Channel method name
            arguments: Channel arguments (consumerKey, consumerSecret)
            timeout: Seconds to wait for the reply (None waits forever)

        Returns:
            The channel reply

        Raises:
            asyncio.TimeoutError: If no reply arrives in time; a running
                login keeps going and resolves on its own
        """
        responder = AsyncioResponder(asyncio.get_running_loop())
        self.handler.on_method_call(MethodCall(method, arguments), responder)
        return await asyncio.wait_for(responder.future, timeout)

    def publish_platform_result(self, request_code: int, result_code: int, payload: Any) -> int:
        """Publish a raw platform result to every listener.

        Returns:
            Number of listeners notified
        """
        return self.platform_results.publish(request_code, result_code, payload)

    def close(self) -> None:
        self._unsubscribe()


# Global login service instance
_login_service: Optional[LoginService] = None


def get_login_service() -> LoginService:
    """Get the global login service instance.

    Returns:
        LoginService instance
    """
    global _login_service
    if _login_service is None:
        coordinator = LoginCoordinator.from_config(settings.login_config())
        _login_service = LoginService(coordinator)
    return _login_service

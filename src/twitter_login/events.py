"""Publish/subscribe for raw platform results.

Every subscriber sees every result. None of them can claim it.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, List

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlatformResult:
    """A raw result delivered by the host platform (e.g. a browser redirect)."""

    request_code: int
    result_code: int
    payload: Any = None


PlatformResultListener = Callable[[PlatformResult], None]


class PlatformResultBus:
    """Fans platform results out to all subscribed listeners."""

    def __init__(self):
        self._listeners: List[PlatformResultListener] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: PlatformResultListener) -> Callable[[], None]:
        """
        Register a listener.

        Args:
            listener: Called with each published PlatformResult

        Returns:
            Callable that removes the listener again
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def publish(self, request_code: int, result_code: int, payload: Any = None) -> int:
        """
        Deliver a result to every listener.

        A failing listener is logged and does not stop delivery to the rest.

        Returns:
            Number of listeners the result was delivered to
        """
        result = PlatformResult(request_code, result_code, payload)
        with self._lock:
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(result)
            except Exception as e:
                logger.error(f"Platform result listener {listener!r} failed: {e}", exc_info=True)

        return len(listeners)

    def __len__(self) -> int:
        return len(self._listeners)

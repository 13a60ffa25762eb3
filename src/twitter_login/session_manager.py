"""
Session manager for the Twitter login coordinator.

Single source of truth for the current session record. There is no
locking here: the login coordinator only lets one authorization resolve
at a time, and it is the only writer.
"""

import logging
from typing import Optional

from .session import SessionRecord
from .session_storage import SessionStorage

logger = logging.getLogger(__name__)


class SessionManager:
    """
    Owns the lifecycle of the single active session record.

    Responsibilities:
    - Load the record from storage on first access
    - Replace it after a successful login
    - Remove it on log out
    """

    def __init__(self, storage: SessionStorage):
        """
        Initialize session manager.

        Args:
            storage: Token store the record is persisted to
        """
        self.storage = storage
        self._cached_record: Optional[SessionRecord] = None
        self._loaded = False

    def get(self) -> Optional[SessionRecord]:
        """
        Get the current session record from cache or storage.

        Returns:
            SessionRecord if logged in, None otherwise
        """
        if not self._loaded:
            self._cached_record = self.storage.load()
            self._loaded = True
        return self._cached_record

    def set(self, record: SessionRecord) -> None:
        """
        Replace the current session record.

        Any previous session is overwritten, never merged.

        Args:
            record: New session record
        """
        self.storage.save(record)
        self._cached_record = record
        self._loaded = True
        logger.info(f"Active session set for @{record.username} (id {record.user_id})")

    def clear(self) -> None:
        """
        Remove the current session record. Safe to call when logged out.

        The in-memory record is dropped even when storage fails.

        Raises:
            SessionStorageError: If the stored record cannot be removed
        """
        self._cached_record = None
        self._loaded = True
        self.storage.delete()
        logger.info("Active session cleared")

    def is_logged_in(self) -> bool:
        return self.get() is not None

"""
Session storage for the Twitter login coordinator.

This module provides persistence for the single active session record.
The file-based store keeps the record as plaintext JSON with user-only
permissions so it survives process restarts.
"""

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from .exceptions import InvalidSessionError, SessionStorageError
from .session import SessionRecord

logger = logging.getLogger(__name__)


class SessionStorage(ABC):
    """Token store interface: persists and retrieves the session record."""

    @abstractmethod
    def load(self) -> Optional[SessionRecord]:
        """Return the stored record, or None if there is none."""
        pass

    @abstractmethod
    def save(self, record: SessionRecord) -> None:
        """Persist the record, replacing any previous one."""
        pass

    @abstractmethod
    def delete(self) -> bool:
        """Remove the stored record. Returns True if one existed."""
        pass

    @abstractmethod
    def exists(self) -> bool:
        pass


class MemorySessionStorage(SessionStorage):
    """In-process session storage. Nothing survives a restart."""

    def __init__(self, record: Optional[SessionRecord] = None):
        self._record = record

    def load(self) -> Optional[SessionRecord]:
        return self._record

    def save(self, record: SessionRecord) -> None:
        self._record = record

    def delete(self) -> bool:
        existed = self._record is not None
        self._record = None
        return existed

    def exists(self) -> bool:
        return self._record is not None


class FileSessionStorage(SessionStorage):
    """
    File-based session storage (plaintext JSON).

    The record is written to a temporary file in the same directory and
    moved into place, so a reader never observes a half-written record.
    """

    def __init__(self, session_file: str):
        """
        Initialize session storage.

        Args:
            session_file: Path to session storage file
                         (e.g., ~/.twitter_login/session.json)
        """
        self.session_file = Path(os.path.expanduser(session_file))
        self._ensure_directory()

    def _ensure_directory(self) -> None:
        """Create parent directory if needed."""
        self.session_file.parent.mkdir(parents=True, exist_ok=True)

    def _set_secure_permissions(self) -> None:
        """Set file permissions to user-only read/write (600)."""
        try:
            self.session_file.chmod(0o600)
            logger.debug(f"Set secure permissions (600) on {self.session_file}")
        except (OSError, PermissionError) as e:
            logger.warning(f"Could not set secure permissions: {e}")

    def save(self, record: SessionRecord) -> None:
        """
        Save the session record to file.

        Args:
            record: Session record to save

        Raises:
            SessionStorageError: If save operation fails
        """
        try:
            fd, tmp_path = tempfile.mkstemp(
                dir=self.session_file.parent, prefix=".session-", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w") as f:
                    json.dump(record.to_dict(), f, indent=2)
                os.replace(tmp_path, self.session_file)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise

            self._set_secure_permissions()

            logger.info(f"Session for @{record.username} saved to {self.session_file}")
        except (IOError, OSError) as e:
            logger.error(f"Failed to save session: {e}")
            raise SessionStorageError(f"Failed to save session: {e}") from e

    def load(self) -> Optional[SessionRecord]:
        """
        Load the session record from file.

        Returns:
            SessionRecord if file exists and is valid, None otherwise

        Notes:
            - Returns None if file doesn't exist (normal before first login)
            - Returns None if file is corrupted or partial (logs warning)
        """
        if not self.session_file.exists():
            logger.debug(f"No session file found at {self.session_file}")
            return None

        try:
            with open(self.session_file, "r") as f:
                data = json.load(f)

            record = SessionRecord.from_dict(data)
            logger.debug(f"Session loaded from {self.session_file}")
            return record

        except (json.JSONDecodeError, InvalidSessionError) as e:
            logger.warning(
                f"Invalid session file at {self.session_file}, "
                f"will need to log in again: {e}"
            )
            return None
        except (IOError, OSError) as e:
            logger.warning(f"Could not read session file: {e}")
            return None

    def delete(self) -> bool:
        """
        Delete the session file.

        Returns:
            True if file was deleted, False if file didn't exist

        Raises:
            SessionStorageError: If the file exists but cannot be removed
        """
        if self.session_file.exists():
            try:
                self.session_file.unlink()
                logger.info(f"Session file deleted: {self.session_file}")
                return True
            except (OSError, PermissionError) as e:
                logger.error(f"Failed to delete session file: {e}")
                raise SessionStorageError(f"Failed to delete session file: {e}") from e

        logger.debug(f"Session file does not exist: {self.session_file}")
        return False

    def exists(self) -> bool:
        """
        Check if session file exists.

        Returns:
            True if session file exists, False otherwise
        """
        return self.session_file.exists()

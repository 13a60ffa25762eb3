"""
Session record and login result envelopes.

A session record is the persisted proof of a completed authorization.
It is either fully populated or it does not exist; a record with an
empty field can never be constructed.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from .exceptions import InvalidSessionError


@dataclass(frozen=True)
class SessionRecord:
    """
    The currently active authenticated identity.

    Attributes:
        token: OAuth access token (opaque credential)
        secret: OAuth access token secret paired with the token
        user_id: Stable numeric user identifier, kept as a string
        username: Display handle (screen name)
    """

    token: str
    secret: str
    user_id: str
    username: str

    def __post_init__(self) -> None:
        """Reject partially populated records."""
        # Numeric ids from the provider are normalized to strings
        if isinstance(self.user_id, int):
            object.__setattr__(self, "user_id", str(self.user_id))

        missing = [
            name
            for name in ("token", "secret", "user_id", "username")
            if not isinstance(getattr(self, name), str) or not getattr(self, name)
        ]
        if missing:
            raise InvalidSessionError(
                f"Session record is missing required fields: {', '.join(missing)}"
            )

    def to_dict(self) -> dict:
        """
        Convert to the flat mapping sent over the request channel.

        Returns:
            Dictionary with secret, token, userId and username keys
        """
        return {
            "secret": self.secret,
            "token": self.token,
            "userId": self.user_id,
            "username": self.username,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SessionRecord":
        """
        Create SessionRecord from its channel/storage mapping.

        Args:
            data: Dictionary with secret, token, userId and username keys

        Returns:
            SessionRecord instance

        Raises:
            InvalidSessionError: If a field is missing or empty
        """
        if not isinstance(data, dict):
            raise InvalidSessionError(f"Expected a mapping, got {type(data).__name__}")

        try:
            return cls(
                token=data["token"],
                secret=data["secret"],
                user_id=data["userId"],
                username=data["username"],
            )
        except KeyError as e:
            raise InvalidSessionError(f"Session record is missing key {e}") from e

    def __repr__(self) -> str:
        # Credentials stay out of logs and tracebacks
        return f"SessionRecord(user_id={self.user_id!r}, username={self.username!r})"


class LoginStatus(Enum):
    """Outcome carried by an authorize result envelope."""

    LOGGED_IN = "loggedIn"
    ERROR = "error"


@dataclass
class LoginResult:
    """
    Result envelope for a finished authorize call.

    Handshake failures are delivered through the normal success path with
    an error status; callers inspect ``status`` rather than catching.

    Attributes:
        status: Whether the login succeeded
        session: New session record (if logged in)
        error_message: Reason reported by the provider (if failed)
    """

    status: LoginStatus
    session: Optional[SessionRecord] = None
    error_message: Optional[str] = None

    @classmethod
    def logged_in(cls, session: SessionRecord) -> "LoginResult":
        return cls(status=LoginStatus.LOGGED_IN, session=session)

    @classmethod
    def failed(cls, message: str) -> "LoginResult":
        return cls(status=LoginStatus.ERROR, error_message=message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to the mapping sent over the request channel.

        Returns:
            {"status": "loggedIn", "session": {...}} or
            {"status": "error", "errorMessage": "..."}
        """
        if self.status is LoginStatus.LOGGED_IN:
            return {"status": self.status.value, "session": self.session.to_dict()}
        return {"status": self.status.value, "errorMessage": self.error_message}

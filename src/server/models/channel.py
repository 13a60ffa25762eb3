"""Pydantic models for the request channel API.

Field names follow the channel's wire format (camelCase), so requests
and responses match what the mobile side of the bridge sends.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


class ChannelArguments(BaseModel):
    """Arguments accepted by every channel method.

    Attributes:
        consumerKey: Twitter app API key
        consumerSecret: Twitter app API secret
    """

    consumerKey: Optional[str] = Field(default=None, description="Twitter app API key")
    consumerSecret: Optional[str] = Field(
        default=None, description="Twitter app API secret"
    )


class ChannelResult(BaseModel):
    """Success envelope.

    Attributes:
        result: Method result (session mapping, login result, or null)
    """

    result: Optional[Any] = Field(default=None, description="Method result")


class ChannelError(BaseModel):
    """Transport-level error envelope.

    Attributes:
        code: Machine-readable error code (e.g. LOGIN_IN_PROGRESS)
        message: Human-readable message naming the rejected method
        details: Always null for channel errors
    """

    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Any] = Field(default=None, description="Error details")


class PlatformResultRequest(BaseModel):
    """Raw result delivered by the host platform.

    Attributes:
        requestCode: Request code the result belongs to
        resultCode: Platform result code (-1 OK, 0 cancelled)
        payload: Opaque result data (redirect query parameters)
    """

    requestCode: int = Field(..., description="Request code")
    resultCode: int = Field(..., description="Platform result code")
    payload: Optional[Any] = Field(default=None, description="Opaque result data")


class PlatformResultResponse(BaseModel):
    """Acknowledgement for a platform result.

    Attributes:
        handled: Always false; results are never claimed exclusively
        listeners: Number of listeners the result was published to
    """

    handled: bool = Field(default=False, description="Whether the result was claimed")
    listeners: int = Field(default=0, description="Listeners notified")

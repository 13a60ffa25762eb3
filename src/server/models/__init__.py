"""Pydantic request and response models."""

from src.server.models.channel import (
    ChannelArguments,
    ChannelError,
    ChannelResult,
    PlatformResultRequest,
    PlatformResultResponse,
)
from src.server.models.common import ErrorResponse, HealthResponse, InfoResponse

__all__ = [
    # Common models
    "HealthResponse",
    "InfoResponse",
    "ErrorResponse",
    # Channel models
    "ChannelArguments",
    "ChannelResult",
    "ChannelError",
    "PlatformResultRequest",
    "PlatformResultResponse",
]

"""Request channel API endpoints.

Exposes the login channel methods (getCurrentSession, authorize, logOut)
over HTTP, plus the platform result hook. An authorize request stays
open until the login finishes, fails, or the caller-side wait expires.
"""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from src.server.config import settings
from src.server.models.channel import (
    ChannelArguments,
    ChannelError,
    ChannelResult,
    PlatformResultRequest,
    PlatformResultResponse,
)
from src.server.services.login_service import LoginService, get_login_service
from src.twitter_login.channel import CHANNEL_NAME

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/channel",
    tags=["channel"],
)


@router.post(
    "/platform-result",
    response_model=PlatformResultResponse,
    status_code=status.HTTP_200_OK,
    summary="Deliver a platform result",
    description="Publishes a raw platform result (e.g. a captured OAuth redirect) to all listeners",
)
async def deliver_platform_result(
    body: PlatformResultRequest,
    service: LoginService = Depends(get_login_service),
) -> PlatformResultResponse:
    """Publish a platform result.

    Returns:
        Acknowledgement; handled is always false
    """
    listeners = service.publish_platform_result(body.requestCode, body.resultCode, body.payload)
    return PlatformResultResponse(handled=False, listeners=listeners)


@router.post(
    "/{method}",
    response_model=ChannelResult,
    status_code=status.HTTP_200_OK,
    summary="Invoke a channel method",
    description=f"Invokes a method on the {CHANNEL_NAME} channel",
    responses={
        409: {"model": ChannelError, "description": "Login already in progress"},
        501: {"model": ChannelError, "description": "Unknown method"},
        504: {"model": ChannelError, "description": "No reply within the channel timeout"},
    },
)
async def invoke_method(
    method: str,
    arguments: Optional[ChannelArguments] = None,
    service: LoginService = Depends(get_login_service),
):
    """Invoke a channel method.

    Args:
        method: getCurrentSession, authorize or logOut
        arguments: Consumer credentials

    Returns:
        Success envelope, or a channel error

    Example:
        >>> POST /api/v1/channel/getCurrentSession
        >>> {"consumerKey": "...", "consumerSecret": "..."}
        >>> {"result": {"secret": "...", "token": "...", "userId": "42", "username": "alice"}}
    """
    try:
        reply = await service.call(
            method,
            arguments.model_dump(exclude_none=True) if arguments else {},
            timeout=settings.channel_timeout_seconds,
        )
    except asyncio.TimeoutError:
        logger.warning(f"{method} did not reply within {settings.channel_timeout_seconds}s")
        return JSONResponse(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            content=ChannelError(
                code="TIMEOUT",
                message=f"{method} did not complete within {settings.channel_timeout_seconds:g} seconds",
            ).model_dump(),
        )

    if reply.kind == "not_implemented":
        return JSONResponse(
            status_code=status.HTTP_501_NOT_IMPLEMENTED,
            content=ChannelError(
                code="NOT_IMPLEMENTED", message=f"Method {method} is not implemented"
            ).model_dump(),
        )

    if reply.kind == "error":
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=ChannelError(
                code=reply.code, message=reply.message, details=reply.details
            ).model_dump(),
        )

    return ChannelResult(result=reply.result)

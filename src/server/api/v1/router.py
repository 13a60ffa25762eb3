"""API v1 router with core endpoints.

This module provides version 1 of the API with the request channel
and system information endpoints.
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, status

from src.server.api.v1 import channel
from src.server.config import settings
from src.server.models.common import InfoResponse
from src.server.services.login_service import LoginService, get_login_service
from src.twitter_login.channel import CHANNEL_NAME

logger = logging.getLogger(__name__)

# Create v1 router
router = APIRouter(
    prefix="/api/v1",
    tags=["v1"],
)

# Include sub-routers
router.include_router(channel.router)


@router.get(
    "/info",
    response_model=InfoResponse,
    status_code=status.HTTP_200_OK,
    summary="Get system information",
    description="Returns system information including channel methods and session status",
)
async def get_info(service: LoginService = Depends(get_login_service)) -> InfoResponse:
    """Get system information endpoint.

    Returns:
        System information including whether a session is stored

    Example:
        >>> GET /api/v1/info
        >>> {
        >>>     "app_name": "Twitter Login API",
        >>>     "version": "1.0.0",
        >>>     "status": "running",
        >>>     "channel": "com.roughike/flutter_twitter_login",
        >>>     "methods": ["getCurrentSession", "authorize", "logOut"],
        >>>     "logged_in": false,
        >>>     "timestamp": "2026-01-31T10:00:00"
        >>> }
    """
    return InfoResponse(
        app_name=settings.app_name,
        version=settings.version,
        status="running",
        channel=CHANNEL_NAME,
        methods=service.handler.methods,
        logged_in=service.coordinator.session_manager.is_logged_in(),
        timestamp=datetime.utcnow(),
    )

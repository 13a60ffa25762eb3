"""Pytest fixtures for FastAPI server tests.

This module provides a login service backed by the fake provider and
in-memory session storage, and a test client wired to it.
"""

from typing import Generator

import pytest
from fastapi.testclient import TestClient

from src.server.main import app
from src.server.services.login_service import LoginService, get_login_service
from src.twitter_login.coordinator import LoginCoordinator
from src.twitter_login.session_manager import SessionManager
from src.twitter_login.session_storage import MemorySessionStorage


@pytest.fixture(scope="function")
def storage() -> MemorySessionStorage:
    """Create in-memory session storage."""
    return MemorySessionStorage()


@pytest.fixture(scope="function")
def login_service(provider, storage) -> Generator[LoginService, None, None]:
    """Create a login service around the fake provider.

    Yields:
        LoginService for testing
    """
    service = LoginService(LoginCoordinator(provider, SessionManager(storage)))
    yield service
    service.close()


@pytest.fixture(scope="function")
def client(login_service: LoginService) -> Generator[TestClient, None, None]:
    """Create a test client using the test login service.

    Args:
        login_service: Test login service fixture

    Returns:
        FastAPI TestClient for making test requests

    Example:
        >>> def test_endpoint(client):
        >>>     response = client.get("/health")
        >>>     assert response.status_code == 200
    """
    app.dependency_overrides[get_login_service] = lambda: login_service

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()

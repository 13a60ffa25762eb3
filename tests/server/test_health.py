"""Tests for health and info endpoints.

This module tests the core API endpoints including health checks,
system information, and root endpoint.
"""

from unittest import mock

from fastapi import status
from fastapi.testclient import TestClient


def test_health_endpoint(client: TestClient):
    """Test GET /health endpoint returns healthy status.

    Asserts:
        - Response status code is 200
        - Status is 'healthy'
        - No login is in progress
    """
    response = client.get("/health")

    assert response.status_code == status.HTTP_200_OK

    data = response.json()
    assert data["status"] == "healthy"
    assert "timestamp" in data
    assert data["login_in_progress"] is False


def test_health_reports_login_in_progress(client: TestClient, login_service, credentials):
    """Test GET /health while an authorization attempt is running."""
    login_service.coordinator.authorize(credentials, mock.Mock())

    data = client.get("/health").json()

    assert data["login_in_progress"] is True


def test_root_endpoint(client: TestClient):
    """Test GET / endpoint returns welcome message.

    Asserts:
        - Response status code is 200
        - Response contains welcome message and version
        - Response contains links to documentation endpoints
    """
    response = client.get("/")

    assert response.status_code == status.HTTP_200_OK

    data = response.json()
    assert "Twitter Login API" in data["message"]
    assert "version" in data
    assert data["docs"] == "/docs"
    assert data["health"] == "/health"
    assert data["api"] == "/api/v1/info"


def test_info_endpoint(client: TestClient):
    """Test GET /api/v1/info returns channel information."""
    response = client.get("/api/v1/info")

    assert response.status_code == status.HTTP_200_OK

    data = response.json()
    assert data["app_name"] == "Twitter Login API"
    assert data["status"] == "running"
    assert data["channel"] == "com.roughike/flutter_twitter_login"
    assert data["methods"] == ["getCurrentSession", "authorize", "logOut"]
    assert data["logged_in"] is False


def test_info_reports_logged_in(client: TestClient, storage, identity):
    """Test GET /api/v1/info once a session is stored."""
    storage.save(identity)

    assert client.get("/api/v1/info").json()["logged_in"] is True


def test_openapi_docs_available(client: TestClient):
    """Test OpenAPI schema is served."""
    response = client.get("/openapi.json")

    assert response.status_code == status.HTTP_200_OK
    assert "/api/v1/channel/{method}" in response.json()["paths"]

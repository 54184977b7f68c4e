"""Integration tests for health check endpoints."""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
class TestHealthEndpoint:
    """Tests for GET /health endpoint."""

    async def test_health_returns_200(self, test_client: AsyncClient):
        """Test basic health check returns 200."""
        response = await test_client.get("/health")

        assert response.status_code == 200

    async def test_health_returns_healthy_status(self, test_client: AsyncClient):
        response = await test_client.get("/health")

        data = response.json()
        assert data["status"] == "healthy"

    async def test_health_returns_version(self, test_client: AsyncClient):
        """Test health check includes version."""
        response = await test_client.get("/health")

        data = response.json()
        assert data["version"] == "0.1.0"
        assert "timestamp" in data


@pytest.mark.asyncio
class TestHealthDbEndpoint:
    """Tests for GET /health/db endpoint."""

    async def test_health_db_returns_200(self, test_client: AsyncClient):
        """Test database health check returns 200 against the test database."""
        response = await test_client.get("/health/db")

        assert response.status_code == 200

    async def test_health_db_includes_database_status(self, test_client: AsyncClient):
        response = await test_client.get("/health/db")

        data = response.json()
        assert data["database"]["status"] == "healthy"
        assert "message" in data["database"]
        assert data["database"]["latency_ms"] >= 0


@pytest.mark.asyncio
class TestHealthEndpointHeaders:
    """Tests for health endpoint response headers."""

    async def test_health_returns_request_id(self, test_client: AsyncClient):
        """Test health check returns X-Request-ID header."""
        response = await test_client.get("/health")

        request_id = response.headers["X-Request-ID"]
        assert len(request_id) == 36  # UUID format with dashes

    async def test_multiple_requests_get_unique_ids(self, test_client: AsyncClient):
        """Test each request gets a unique request ID."""
        response1 = await test_client.get("/health")
        response2 = await test_client.get("/health")

        assert response1.headers["X-Request-ID"] != response2.headers["X-Request-ID"]

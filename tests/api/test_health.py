"""Tests for health endpoints."""

from unittest.mock import AsyncMock, patch

from httpx import ASGITransport, AsyncClient

from intellectory.api.main import app
from intellectory.core.exceptions import DatabaseError, StoreUnavailableError
from intellectory.core.interfaces import HealthStatus


def _client() -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


async def test_root_health_check():
    async with _client() as client:
        response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert "X-Request-ID" in response.headers


async def test_api_health_check():
    async with _client() as client:
        response = await client.get("/api/health")

    data = response.json()
    assert data["status"] == "healthy"
    assert "uptime_seconds" in data


class TestDatabaseHealth:
    async def test_reachable(self):
        table_client = AsyncMock()
        with patch("intellectory.infrastructure.storage.get_table_client", return_value=table_client):
            async with _client() as client:
                response = await client.get("/api/health/db")

        assert response.json()["status"] == "healthy"
        assert response.json()["database"]["available"] is True
        table_client.ping.assert_awaited_once()

    async def test_unconfigured_store(self):
        table_client = AsyncMock()
        table_client.ping.side_effect = StoreUnavailableError("STORAGE_REST_URL is not set")
        with patch("intellectory.infrastructure.storage.get_table_client", return_value=table_client):
            async with _client() as client:
                response = await client.get("/api/health/db")

        data = response.json()
        assert response.status_code == 200
        assert data["status"] == "unhealthy"
        assert "STORAGE_REST_URL" in data["database"]["error"]

    async def test_failing_store(self):
        table_client = AsyncMock()
        table_client.ping.side_effect = DatabaseError("ping", "disk I/O error")
        with patch("intellectory.infrastructure.storage.get_table_client", return_value=table_client):
            async with _client() as client:
                response = await client.get("/api/health/db")

        assert response.json()["database"]["available"] is False


class TestLLMHealth:
    async def test_degraded_when_provider_down(self):
        provider = AsyncMock()
        provider.check_health.return_value = HealthStatus(
            available=False, provider="gemini", error="LLM_API_KEY is not set"
        )
        with patch("intellectory.infrastructure.llm.get_llm_provider", return_value=provider):
            async with _client() as client:
                response = await client.get("/api/health/llm")

        data = response.json()
        assert data["status"] == "degraded"
        assert data["llm"]["error"] == "LLM_API_KEY is not set"

    async def test_healthy_provider(self):
        provider = AsyncMock()
        provider.check_health.return_value = HealthStatus(available=True, provider="gemini")
        with patch("intellectory.infrastructure.llm.get_llm_provider", return_value=provider):
            async with _client() as client:
                response = await client.get("/api/health/llm")

        assert response.json()["llm"]["available"] is True

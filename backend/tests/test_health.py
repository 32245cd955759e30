"""
Tests for health check endpoint.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health_endpoint_returns_200(test_client: AsyncClient):
    """Test that /health endpoint returns 200 status code."""
    response = await test_client.get("/health")
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_health_endpoint_has_status_and_version(test_client: AsyncClient):
    response = await test_client.get("/health")
    data = response.json()
    assert data["status"] == "healthy"
    assert isinstance(data["version"], str)
    assert len(data["version"]) > 0


@pytest.mark.asyncio
async def test_health_endpoint_reports_ai_readiness(test_client: AsyncClient):
    response = await test_client.get("/health")
    ai = response.json()["ai"]
    assert set(ai) >= {"configured", "enabled", "ready", "message"}
    assert ai["ready"] == (ai["configured"] and ai["enabled"])


@pytest.mark.asyncio
async def test_responses_carry_timing_header(test_client: AsyncClient):
    response = await test_client.get("/health")
    assert "x-response-time-ms" in response.headers

"""Tests for health check endpoints."""

from unittest.mock import patch

import pytest
from httpx import AsyncClient

from roastah.core.preferences import PreferenceStore


class TestHealthEndpoints:
    """Tests for health check routes."""

    @pytest.mark.asyncio
    async def test_health_endpoint(self, client: AsyncClient):
        response = await client.get("/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert "version" in data

    @pytest.mark.asyncio
    async def test_health_live_endpoint(self, client: AsyncClient):
        response = await client.get("/health/live")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_health_ready_degraded_without_preferences(self, client: AsyncClient):
        with patch(
            "roastah.api.routes.health.get_preference_store",
            return_value=PreferenceStore(),
        ):
            response = await client.get("/health/ready")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "degraded"
        assert data["checks"] == {"preferences": False}

    @pytest.mark.asyncio
    async def test_root(self, client: AsyncClient):
        response = await client.get("/")

        assert response.status_code == 200
        assert response.json()["service"] == "Roastah Edit Service"

"""Tests for status and ping endpoints."""

from importlib.metadata import PackageNotFoundError
from unittest.mock import patch

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
class TestStatusEndpoint:
  async def test_status_endpoint_healthy(self, async_client: AsyncClient):
    response = await async_client.get("/api/v1/status")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["details"]["service"] == "meemo-api"
    assert "version" in data["details"]

  async def test_status_endpoint_version(self, async_client: AsyncClient):
    with patch("meemo.routers.status.version", return_value="1.2.3"):
      response = await async_client.get("/api/v1/status")

    assert response.json()["details"]["version"] == "1.2.3"

  async def test_status_endpoint_version_unknown(self, async_client: AsyncClient):
    with patch(
      "meemo.routers.status.version", side_effect=PackageNotFoundError("meemo")
    ):
      response = await async_client.get("/api/v1/status")

    assert response.json()["details"]["version"] == "unknown"

  async def test_ping(self, async_client: AsyncClient):
    response = await async_client.get("/api/v1/ping")

    assert response.status_code == 200
    assert response.json() == {"message": "pong"}

  async def test_request_id_header_on_logged_routes(self, async_client: AsyncClient):
    response = await async_client.get("/api/v1/users/me")

    assert "x-request-id" in response.headers

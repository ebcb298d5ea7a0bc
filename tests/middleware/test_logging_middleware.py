import pytest
from httpx import AsyncClient

from meemo.middleware.logging import redact_sensitive_query_params


@pytest.mark.parametrize(
  "query,expected",
  [
    ("", ""),
    ("page=2", "page=2"),
    ("token=abc&page=2", "token=REDACTED&page=2"),
    ("Refresh_Token=xyz", "Refresh_Token=REDACTED"),
    ("password=&name=doc", "password=REDACTED&name=doc"),
  ],
)
def test_redact_sensitive_query_params(query, expected):
  assert redact_sensitive_query_params(query) == expected


@pytest.mark.asyncio
class TestRequestId:
  async def test_generated_when_absent(self, async_client: AsyncClient, test_user_headers):
    response = await async_client.get("/api/v1/files", headers=test_user_headers)

    assert len(response.headers["x-request-id"]) == 36

  async def test_caller_id_is_echoed(self, async_client: AsyncClient, test_user_headers):
    response = await async_client.get(
      "/api/v1/files", headers={**test_user_headers, "X-Request-ID": "trace-123"}
    )

    assert response.headers["x-request-id"] == "trace-123"

  async def test_status_is_not_tagged(self, async_client: AsyncClient):
    response = await async_client.get("/api/v1/status")

    assert "x-request-id" not in response.headers

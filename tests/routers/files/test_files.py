"""
Tests for file endpoints.

This test suite covers:
- Metadata registration and listing
- Content upload and download (by name and by id)
- Rename, visibility, status and delete
- Quota reporting
- Owner isolation
"""

import pytest
from httpx import AsyncClient

from meemo.config import env
from meemo.models.iam import File, FileStatus

FILES = "/api/v1/files"


async def register_file(client, headers, name="doc.pdf", size=0, **extra):
  payload = {"original_name": name, "mime_type": "application/pdf", "size_in_bytes": size}
  payload.update(extra)
  response = await client.post(f"{FILES}/metadata", json=payload, headers=headers)
  assert response.status_code == 201, response.text
  return response.json()


async def upload(client, headers, file_id, data):
  return await client.post(
    f"{FILES}/{file_id}/content",
    content=data,
    headers={**headers, "Content-Type": "application/octet-stream"},
  )


@pytest.mark.asyncio
class TestMetadataEndpoints:
  async def test_files_require_authentication(self, async_client: AsyncClient):
    assert (await async_client.get(FILES)).status_code == 401
    assert (await async_client.get(f"{FILES}/storage")).status_code == 401

  async def test_register_metadata(self, async_client: AsyncClient, test_user, test_user_headers):
    data = await register_file(async_client, test_user_headers, size=500)

    assert data["original_name"] == "doc.pdf"
    assert data["user_id"] == test_user.id
    assert data["status"] == FileStatus.PENDING
    assert data["size_in_bytes"] == 500
    assert data["s3_key"] == str(data["id"])

  async def test_register_duplicate_name(self, async_client: AsyncClient, test_user_headers):
    await register_file(async_client, test_user_headers)

    response = await async_client.post(
      f"{FILES}/metadata", json={"original_name": "doc.pdf"}, headers=test_user_headers
    )

    assert response.status_code == 409

  async def test_register_over_quota(
    self, async_client: AsyncClient, test_user_headers, monkeypatch, db_session, test_user
  ):
    monkeypatch.setattr(env, "STORAGE_QUOTA_BYTES", 1000)

    response = await async_client.post(
      f"{FILES}/metadata",
      json={"original_name": "huge.bin", "size_in_bytes": 1001},
      headers=test_user_headers,
    )

    assert response.status_code == 400
    assert File.list_by_owner(test_user.email, db_session) == []

  async def test_register_rejects_negative_size(
    self, async_client: AsyncClient, test_user_headers
  ):
    response = await async_client.post(
      f"{FILES}/metadata",
      json={"original_name": "x", "size_in_bytes": -1},
      headers=test_user_headers,
    )

    assert response.status_code == 422

  @pytest.mark.parametrize("name", ["reports/q1.pdf", "storage", ".."])
  async def test_register_rejects_unreachable_names(
    self, async_client: AsyncClient, test_user_headers, test_user, db_session, name
  ):
    response = await async_client.post(
      f"{FILES}/metadata", json={"original_name": name}, headers=test_user_headers
    )

    assert response.status_code == 422
    assert File.list_by_owner(test_user.email, db_session) == []

  async def test_list_files_newest_first(self, async_client: AsyncClient, test_user_headers):
    await register_file(async_client, test_user_headers, "first.pdf")
    await register_file(async_client, test_user_headers, "second.pdf")

    response = await async_client.get(FILES, headers=test_user_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert [f["original_name"] for f in data["files"]] == ["second.pdf", "first.pdf"]

  async def test_list_is_owner_scoped(
    self, async_client: AsyncClient, test_user_headers, other_user_headers
  ):
    await register_file(async_client, test_user_headers)

    response = await async_client.get(FILES, headers=other_user_headers)

    assert response.json()["total"] == 0

  async def test_file_info(self, async_client: AsyncClient, test_user_headers, other_user_headers):
    created = await register_file(async_client, test_user_headers)

    response = await async_client.get(f"{FILES}/doc.pdf/info", headers=test_user_headers)
    assert response.status_code == 200
    assert response.json()["id"] == created["id"]

    response = await async_client.get(f"{FILES}/doc.pdf/info", headers=other_user_headers)
    assert response.status_code == 404

  async def test_storage_info(self, async_client: AsyncClient, test_user_headers, monkeypatch):
    monkeypatch.setattr(env, "STORAGE_QUOTA_BYTES", 1000)
    await register_file(async_client, test_user_headers, "a.bin", size=300)

    response = await async_client.get(f"{FILES}/storage", headers=test_user_headers)

    assert response.status_code == 200
    assert response.json() == {
      "used_bytes": 300,
      "available_bytes": 700,
      "total_bytes": 1000,
    }


@pytest.mark.asyncio
class TestContentEndpoints:
  async def test_upload_and_download(self, async_client: AsyncClient, test_user_headers):
    created = await register_file(async_client, test_user_headers, size=5)

    response = await upload(async_client, test_user_headers, created["id"], b"hello")
    assert response.status_code == 200
    assert response.json()["status"] == FileStatus.ACTIVE

    response = await async_client.get(f"{FILES}/doc.pdf", headers=test_user_headers)
    assert response.status_code == 200
    assert response.content == b"hello"
    assert response.headers["content-type"].startswith("application/pdf")
    assert 'filename="doc.pdf"' in response.headers["content-disposition"]

  async def test_download_adds_extension_from_mime_type(
    self, async_client: AsyncClient, test_user_headers
  ):
    created = await register_file(async_client, test_user_headers, "report")
    await upload(async_client, test_user_headers, created["id"], b"%PDF")

    response = await async_client.get(f"{FILES}/report", headers=test_user_headers)

    assert 'filename="report.pdf"' in response.headers["content-disposition"]

  async def test_upload_size_mismatch(
    self, async_client: AsyncClient, test_user_headers, db_session
  ):
    created = await register_file(async_client, test_user_headers, size=500)

    response = await upload(async_client, test_user_headers, created["id"], b"tiny")

    assert response.status_code == 400
    db_session.expire_all()
    assert File.get(created["id"], db_session).status == FileStatus.PENDING

  async def test_oversized_content_length_is_rejected_before_storing(
    self, async_client: AsyncClient, test_user_headers, monkeypatch, db_session, file_storage
  ):
    monkeypatch.setattr(env, "STORAGE_QUOTA_BYTES", 1000)
    created = await register_file(async_client, test_user_headers)

    response = await async_client.post(
      f"{FILES}/{created['id']}/content",
      content=b"x",
      headers={**test_user_headers, "Content-Length": "5000"},
    )

    assert response.status_code == 400
    assert file_storage.object_exists(created["id"]) is False
    db_session.expire_all()
    assert File.get(created["id"], db_session).status == FileStatus.PENDING

  async def test_chunked_upload_over_quota_is_rejected(
    self, async_client: AsyncClient, test_user_headers, monkeypatch, file_storage
  ):
    monkeypatch.setattr(env, "STORAGE_QUOTA_BYTES", 1000)
    created = await register_file(async_client, test_user_headers)

    async def body():
      for _ in range(3):
        yield b"x" * 400

    response = await upload(async_client, test_user_headers, created["id"], body())

    assert response.status_code == 400
    assert file_storage.object_exists(created["id"]) is False

  async def test_chunked_upload_within_quota(
    self, async_client: AsyncClient, test_user_headers, file_storage
  ):
    created = await register_file(async_client, test_user_headers, "notes.txt")

    async def body():
      yield b"first,"
      yield b"second"

    response = await upload(async_client, test_user_headers, created["id"], body())

    assert response.status_code == 200
    assert response.json()["size_in_bytes"] == 12
    assert file_storage.get_file_by_id(created["id"]) == b"first,second"

  async def test_upload_to_other_users_file(
    self, async_client: AsyncClient, test_user_headers, other_user_headers
  ):
    created = await register_file(async_client, test_user_headers)

    response = await upload(async_client, other_user_headers, created["id"], b"x")

    assert response.status_code == 404

  async def test_download_pending_file_is_not_found(
    self, async_client: AsyncClient, test_user_headers
  ):
    await register_file(async_client, test_user_headers)

    response = await async_client.get(f"{FILES}/doc.pdf", headers=test_user_headers)

    assert response.status_code == 404

  async def test_download_by_id_visibility(
    self, async_client: AsyncClient, test_user_headers, other_user_headers
  ):
    private = await register_file(async_client, test_user_headers, "private.pdf")
    public = await register_file(async_client, test_user_headers, "public.pdf", is_public=True)
    await upload(async_client, test_user_headers, private["id"], b"mine")
    await upload(async_client, test_user_headers, public["id"], b"ours")

    response = await async_client.get(
      f"{FILES}/by-id/{public['id']}", headers=other_user_headers
    )
    assert response.status_code == 200
    assert response.content == b"ours"

    response = await async_client.get(
      f"{FILES}/by-id/{private['id']}", headers=other_user_headers
    )
    assert response.status_code == 404

    response = await async_client.get(
      f"{FILES}/by-id/{private['id']}", headers=test_user_headers
    )
    assert response.content == b"mine"


@pytest.mark.asyncio
class TestManagementEndpoints:
  async def test_rename(self, async_client: AsyncClient, test_user_headers):
    created = await register_file(async_client, test_user_headers, size=3)
    await upload(async_client, test_user_headers, created["id"], b"abc")

    response = await async_client.put(
      f"{FILES}/rename",
      json={"original_name": "doc.pdf", "new_name": "report.pdf"},
      headers=test_user_headers,
    )

    assert response.status_code == 200
    assert response.json()["original_name"] == "report.pdf"
    download = await async_client.get(f"{FILES}/report.pdf", headers=test_user_headers)
    assert download.content == b"abc"

  async def test_rename_conflict(self, async_client: AsyncClient, test_user_headers):
    await register_file(async_client, test_user_headers, "a.pdf")
    await register_file(async_client, test_user_headers, "b.pdf")

    response = await async_client.put(
      f"{FILES}/rename",
      json={"original_name": "a.pdf", "new_name": "b.pdf"},
      headers=test_user_headers,
    )

    assert response.status_code == 409

  @pytest.mark.parametrize("new_name", ["reports/q1.pdf", "storage"])
  async def test_rename_rejects_unreachable_names(
    self, async_client: AsyncClient, test_user_headers, new_name
  ):
    await register_file(async_client, test_user_headers)

    response = await async_client.put(
      f"{FILES}/rename",
      json={"original_name": "doc.pdf", "new_name": new_name},
      headers=test_user_headers,
    )

    assert response.status_code == 422
    info = await async_client.get(f"{FILES}/doc.pdf/info", headers=test_user_headers)
    assert info.status_code == 200

  async def test_rename_by_non_owner(
    self, async_client: AsyncClient, test_user_headers, other_user_headers
  ):
    await register_file(async_client, test_user_headers)

    response = await async_client.put(
      f"{FILES}/rename",
      json={"original_name": "doc.pdf", "new_name": "mine.pdf"},
      headers=other_user_headers,
    )

    assert response.status_code == 404

  async def test_visibility(self, async_client: AsyncClient, test_user_headers):
    await register_file(async_client, test_user_headers)

    response = await async_client.put(
      f"{FILES}/visibility",
      json={"original_name": "doc.pdf", "is_public": True},
      headers=test_user_headers,
    )

    assert response.status_code == 200
    assert response.json()["is_public"] is True

  async def test_status(self, async_client: AsyncClient, test_user_headers):
    await register_file(async_client, test_user_headers)

    response = await async_client.put(
      f"{FILES}/status",
      json={"original_name": "doc.pdf", "status": 2},
      headers=test_user_headers,
    )

    assert response.status_code == 200
    assert response.json()["status"] == FileStatus.DELETED

  async def test_status_rejects_unknown_value(
    self, async_client: AsyncClient, test_user_headers
  ):
    await register_file(async_client, test_user_headers)

    response = await async_client.put(
      f"{FILES}/status",
      json={"original_name": "doc.pdf", "status": 9},
      headers=test_user_headers,
    )

    assert response.status_code == 422

  async def test_delete(self, async_client: AsyncClient, test_user_headers):
    created = await register_file(async_client, test_user_headers, size=3)
    await upload(async_client, test_user_headers, created["id"], b"abc")

    response = await async_client.delete(f"{FILES}/doc.pdf", headers=test_user_headers)

    assert response.status_code == 200
    assert response.json()["success"] is True
    info = await async_client.get(f"{FILES}/doc.pdf/info", headers=test_user_headers)
    assert info.status_code == 404

  async def test_delete_missing(self, async_client: AsyncClient, test_user_headers):
    response = await async_client.delete(f"{FILES}/nope.pdf", headers=test_user_headers)

    assert response.status_code == 404

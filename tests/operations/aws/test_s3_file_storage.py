"""Tests for the S3 file storage adapter against a mocked bucket."""

import io
from unittest.mock import MagicMock, patch

import boto3
import pytest
from botocore.exceptions import ClientError
from moto import mock_aws

from meemo.exceptions import ObjectNotFoundError, StorageError
from meemo.operations.aws import S3FileStorage

BUCKET = "meemo-test"


def _client_error(code: str, operation: str = "PutObject") -> ClientError:
  return ClientError({"Error": {"Code": code, "Message": code}}, operation)


class TestS3FileStorageObjects:
  def test_save_and_read_round_trip(self, file_storage, s3_client):
    data = bytes(range(256)) * 4

    file_storage.save_file(17, data, len(data), "application/pdf")

    assert file_storage.get_file_by_id(17) == data
    head = s3_client.head_object(Bucket=BUCKET, Key="17")
    assert head["ContentType"] == "application/pdf"
    assert head["ContentLength"] == len(data)

  def test_save_accepts_file_like_objects(self, file_storage):
    file_storage.save_file("5", io.BytesIO(b"streamed"), 8)

    assert file_storage.get_file_by_id(5) == b"streamed"

  def test_file_like_objects_go_through_managed_upload(self):
    client = MagicMock()
    storage = S3FileStorage(bucket=BUCKET, s3_client=client)
    body = io.BytesIO(b"streamed")

    storage.save_file(5, body, 8, "text/plain")

    client.upload_fileobj.assert_called_once_with(
      body, BUCKET, "5", ExtraArgs={"ContentType": "text/plain"}
    )
    client.put_object.assert_not_called()

  def test_get_file_stream_yields_chunks(self, file_storage):
    file_storage.save_file(3, b"abcdefghij", 10)

    chunks = list(file_storage.get_file_stream(3, chunk_size=4))

    assert chunks == [b"abcd", b"efgh", b"ij"]

  def test_get_file_stream_fails_before_iteration(self, file_storage):
    with pytest.raises(ObjectNotFoundError):
      file_storage.get_file_stream(404)

  def test_missing_object_raises_not_found(self, file_storage):
    with pytest.raises(ObjectNotFoundError) as exc_info:
      file_storage.get_file_by_id(404)

    assert exc_info.value.details["key"] == "404"

  def test_object_exists(self, file_storage):
    file_storage.save_file(1, b"x", 1)

    assert file_storage.object_exists(1) is True
    assert file_storage.object_exists(2) is False

  def test_delete_file(self, file_storage):
    file_storage.save_file(1, b"x", 1)

    file_storage.delete_file(1)

    assert file_storage.object_exists(1) is False

  def test_delete_missing_key_is_not_an_error(self, file_storage):
    file_storage.delete_file("never-written")

  def test_rename_file_moves_bytes(self, file_storage):
    file_storage.save_file("old", b"payload", 7)

    file_storage.rename_file("old", "new")

    assert file_storage.get_file_by_id("new") == b"payload"
    assert file_storage.object_exists("old") is False

  def test_rename_missing_source(self, file_storage):
    with pytest.raises(ObjectNotFoundError):
      file_storage.rename_file("absent", "new")

  def test_rename_failed_delete_leaves_both_keys(self):
    client = MagicMock()
    client.delete_object.side_effect = _client_error("InternalError", "DeleteObject")
    storage = S3FileStorage(bucket=BUCKET, s3_client=client)

    with pytest.raises(StorageError) as exc_info:
      storage.rename_file("old", "new")

    client.copy_object.assert_called_once()
    assert exc_info.value.details["operation"] == "delete"

  def test_other_client_errors_raise_storage_error(self):
    client = MagicMock()
    client.put_object.side_effect = _client_error("InternalError")
    storage = S3FileStorage(bucket=BUCKET, s3_client=client)

    with pytest.raises(StorageError) as exc_info:
      storage.save_file(1, b"x", 1)

    assert not isinstance(exc_info.value, ObjectNotFoundError)
    assert exc_info.value.details["s3_error_code"] == "InternalError"

  def test_access_denied_is_logged_as_critical(self):
    client = MagicMock()
    client.get_object.side_effect = _client_error("AccessDenied", "GetObject")
    storage = S3FileStorage(bucket=BUCKET, s3_client=client)

    with patch("meemo.operations.aws.s3.logger") as mock_logger:
      with pytest.raises(StorageError):
        storage.get_file_by_id(1)

    mock_logger.critical.assert_called_once()


class TestS3FileStorageBuckets:
  def test_bucket_lifecycle(self):
    with mock_aws():
      client = boto3.client("s3", region_name="us-east-1")
      storage = S3FileStorage(bucket="fresh-bucket", region_name="us-east-1", s3_client=client)

      assert storage.bucket_exists() is False
      storage.create_bucket()
      assert storage.bucket_exists() is True

      # Creating a bucket the account already owns succeeds
      storage.create_bucket()

      storage.delete_bucket()
      assert storage.bucket_exists() is False

  def test_create_bucket_outside_us_east_1(self):
    with mock_aws():
      client = boto3.client("s3", region_name="eu-west-1")
      storage = S3FileStorage(bucket="eu-bucket", region_name="eu-west-1", s3_client=client)

      storage.create_bucket()

      location = client.get_bucket_location(Bucket="eu-bucket")
      assert location["LocationConstraint"] == "eu-west-1"

  def test_delete_non_empty_bucket_requires_force(self, file_storage):
    file_storage.save_file(1, b"x", 1)

    with pytest.raises(StorageError):
      file_storage.delete_bucket()

    file_storage.delete_bucket(force=True)
    assert file_storage.bucket_exists() is False

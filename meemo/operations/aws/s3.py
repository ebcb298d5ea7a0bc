"""
S3 adapter for file content storage.

Objects are addressed by the string form of the file id. Missing keys raise
``ObjectNotFoundError``; every other S3 failure raises ``StorageError``.
No retries are attempted here.
"""

from typing import BinaryIO, Iterator, Optional, Union

import boto3
from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import BotoCoreError, ClientError

from meemo.config import env
from meemo.config.constants import DEFAULT_CONTENT_TYPE, DOWNLOAD_CHUNK_BYTES
from meemo.exceptions import ObjectNotFoundError, StorageError
from meemo.logger import storage_logger as logger

NOT_FOUND_CODES = {"NoSuchKey", "404", "NotFound"}
SECURITY_ERROR_CODES = {"AccessDenied", "UnauthorizedAccess", "InvalidAccessKeyId"}


def _error_code(error: ClientError) -> str:
  return error.response.get("Error", {}).get("Code", "")


class S3FileStorage:
  """
  Object store adapter for file bytes.

  Wraps a single bucket; the boto3 client can be injected for tests.
  """

  def __init__(
    self,
    bucket: Optional[str] = None,
    region_name: Optional[str] = None,
    endpoint_url: Optional[str] = None,
    s3_client=None,
  ):
    """
    Initialize the adapter.

    Args:
        bucket: Bucket name (defaults to env.AWS_S3_BUCKET)
        region_name: AWS region (defaults to env.AWS_DEFAULT_REGION)
        endpoint_url: Custom endpoint URL (e.g., for MinIO or LocalStack)
        s3_client: Preconfigured boto3 S3 client
    """
    self.bucket = bucket or env.AWS_S3_BUCKET
    self.region_name = region_name or env.AWS_DEFAULT_REGION

    if s3_client is None:
      s3_config = env.get_s3_config()
      s3_config["region_name"] = self.region_name
      if endpoint_url:
        s3_config["endpoint_url"] = endpoint_url
      s3_client = boto3.client("s3", **s3_config)

    self.s3_client = s3_client
    logger.debug(f"Initialized S3FileStorage for bucket {self.bucket}")

  def _raise_for(self, error: Exception, operation: str, key: Optional[str] = None):
    if isinstance(error, ClientError):
      code = _error_code(error)
      if code in NOT_FOUND_CODES and key is not None:
        raise ObjectNotFoundError(self.bucket, key) from error
      if code in SECURITY_ERROR_CODES:
        logger.critical(
          f"S3 SECURITY VIOLATION - {code}: {operation} denied for "
          f"Bucket={self.bucket}, Key={key}"
        )
      else:
        logger.error(f"S3 {operation} failed for s3://{self.bucket}/{key}: {error}")
      raise StorageError(operation, self.bucket, key, code) from error

    logger.error(f"S3 {operation} failed for s3://{self.bucket}/{key}: {error}")
    raise StorageError(operation, self.bucket, key) from error

  # ------------------------------------------------------------------
  # Objects
  # ------------------------------------------------------------------

  def save_file(
    self,
    file_id: Union[int, str],
    data: Union[bytes, BinaryIO],
    size_in_bytes: int,
    content_type: str = DEFAULT_CONTENT_TYPE,
  ) -> None:
    """
    Store file content under the file id.

    Bytes go up in a single PUT. File-like objects are read from their
    current position and handed to the managed transfer, which switches to
    multipart uploads for large content.
    """
    key = str(file_id)
    try:
      if isinstance(data, (bytes, bytearray)):
        self.s3_client.put_object(
          Bucket=self.bucket,
          Key=key,
          Body=data,
          ContentLength=size_in_bytes,
          ContentType=content_type,
        )
      else:
        self.s3_client.upload_fileobj(
          data, self.bucket, key, ExtraArgs={"ContentType": content_type}
        )
    except (ClientError, BotoCoreError, S3UploadFailedError) as e:
      self._raise_for(e, "put", key)

    logger.debug(f"Uploaded {size_in_bytes} bytes to s3://{self.bucket}/{key}")

  def get_file_stream(
    self, file_id: Union[int, str], chunk_size: int = DOWNLOAD_CHUNK_BYTES
  ) -> Iterator[bytes]:
    """
    Open the content stored for a file id and iterate it in chunks.

    The object is requested before returning, so a missing key raises
    ``ObjectNotFoundError`` here rather than while iterating.
    """
    key = str(file_id)
    try:
      response = self.s3_client.get_object(Bucket=self.bucket, Key=key)
    except (ClientError, BotoCoreError) as e:
      self._raise_for(e, "get", key)

    return self._iter_body(response["Body"], key, chunk_size)

  def _iter_body(self, body, key: str, chunk_size: int) -> Iterator[bytes]:
    try:
      yield from body.iter_chunks(chunk_size)
    except (ClientError, BotoCoreError) as e:
      self._raise_for(e, "get", key)
    finally:
      body.close()

  def get_file_by_id(self, file_id: Union[int, str]) -> bytes:
    """Read the full content stored for a file id."""
    return b"".join(self.get_file_stream(file_id))

  def object_exists(self, key: Union[int, str]) -> bool:
    """Check if an object exists."""
    try:
      self.s3_client.head_object(Bucket=self.bucket, Key=str(key))
      return True
    except ClientError as e:
      if _error_code(e) in NOT_FOUND_CODES:
        return False
      self._raise_for(e, "head", str(key))

  def delete_file(self, key: Union[int, str]) -> None:
    """Delete an object. Deleting an absent key is not an error in S3."""
    key = str(key)
    try:
      self.s3_client.delete_object(Bucket=self.bucket, Key=key)
    except (ClientError, BotoCoreError) as e:
      self._raise_for(e, "delete", key)

    logger.debug(f"Deleted s3://{self.bucket}/{key}")

  def rename_file(self, old_key: Union[int, str], new_key: Union[int, str]) -> None:
    """
    Move an object by copying it and deleting the original.

    Not atomic: if the delete fails after a successful copy, the object
    exists under both keys and ``StorageError`` is raised.
    """
    old_key, new_key = str(old_key), str(new_key)
    try:
      self.s3_client.copy_object(
        Bucket=self.bucket,
        Key=new_key,
        CopySource={"Bucket": self.bucket, "Key": old_key},
      )
    except (ClientError, BotoCoreError) as e:
      self._raise_for(e, "copy", old_key)

    try:
      self.s3_client.delete_object(Bucket=self.bucket, Key=old_key)
    except (ClientError, BotoCoreError) as e:
      logger.warning(
        f"Copied s3://{self.bucket}/{old_key} to {new_key} but could not delete "
        f"the original; object now exists under both keys"
      )
      self._raise_for(e, "delete", old_key)

  # ------------------------------------------------------------------
  # Buckets
  # ------------------------------------------------------------------

  def bucket_exists(self) -> bool:
    try:
      self.s3_client.head_bucket(Bucket=self.bucket)
      return True
    except ClientError as e:
      if _error_code(e) in NOT_FOUND_CODES | {"NoSuchBucket"}:
        return False
      self._raise_for(e, "head_bucket")

  def create_bucket(self) -> None:
    """Create the bucket; succeeds if this account already owns it."""
    params = {"Bucket": self.bucket}
    if self.region_name != "us-east-1":
      params["CreateBucketConfiguration"] = {"LocationConstraint": self.region_name}

    try:
      self.s3_client.create_bucket(**params)
    except ClientError as e:
      if _error_code(e) == "BucketAlreadyOwnedByYou":
        return
      self._raise_for(e, "create_bucket")

    logger.info(f"Created bucket {self.bucket}")

  def delete_bucket(self, force: bool = False) -> None:
    """
    Delete the bucket.

    Args:
        force: Delete every object first; S3 refuses to delete non-empty buckets
    """
    try:
      if force:
        paginator = self.s3_client.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=self.bucket):
          keys = [{"Key": obj["Key"]} for obj in page.get("Contents", [])]
          if keys:
            self.s3_client.delete_objects(
              Bucket=self.bucket, Delete={"Objects": keys, "Quiet": True}
            )
      self.s3_client.delete_bucket(Bucket=self.bucket)
    except ClientError as e:
      self._raise_for(e, "delete_bucket")

    logger.info(f"Deleted bucket {self.bucket}")


_default_storage: Optional[S3FileStorage] = None


def get_file_storage() -> S3FileStorage:
  """FastAPI dependency returning the process-wide storage adapter."""
  global _default_storage
  if _default_storage is None:
    _default_storage = S3FileStorage()
  return _default_storage

"""
File storage service.

Coordinates the metadata registry, the object store and the quota policy.
Metadata and bytes live in separate systems without a shared transaction:

- registration writes the metadata row only (status PENDING);
- upload is checked against its declared length before the body is read,
  then writes the object and marks the row ACTIVE with the actual size;
- delete removes the object best-effort, then the row.

A crash between the two writes leaves either a PENDING row without an
object or an orphaned object; both are left for an out-of-band sweeper.
"""

from typing import BinaryIO, Iterator, List, Optional, Tuple, Union

from sqlalchemy.orm import Session

from ...config.constants import DEFAULT_CONTENT_TYPE
from ...exceptions import ContentSizeMismatchError, StorageError
from ...logger import storage_logger as logger
from ...models.iam import File, FileStatus, User
from ..aws.s3 import S3FileStorage
from .quota import QuotaPolicy, StorageInfo


class FileStorageService:
  """Owner-scoped file operations for one authenticated user."""

  def __init__(
    self,
    session: Session,
    storage: S3FileStorage,
    quota: Optional[QuotaPolicy] = None,
  ):
    self.session = session
    self.storage = storage
    self.quota = quota or QuotaPolicy()

  def used_space(self, user: User) -> int:
    return File.get_total_used_space(user.email, self.session)

  def register_file(
    self,
    user: User,
    original_name: str,
    mime_type: Optional[str],
    size_in_bytes: int,
    is_public: bool = False,
  ) -> File:
    """
    Register metadata for a file whose content will be uploaded later.

    Raises:
        InsufficientStorageError: If the declared size exceeds the remaining quota
        DuplicateEntityError: If the user already has a file with this name
    """
    self.quota.check(self.used_space(user), size_in_bytes)
    return File.save_metadata(
      user_id=user.id,
      original_name=original_name,
      mime_type=mime_type or DEFAULT_CONTENT_TYPE,
      s3_bucket=self.storage.bucket,
      size_in_bytes=size_in_bytes,
      is_public=is_public,
      session=self.session,
    )

  def prepare_upload(
    self, user: User, file_id: int, content_length: Optional[int] = None
  ) -> Tuple[File, int]:
    """
    Check an upload before any of its body is read.

    Returns the file and the most bytes the upload may carry: the declared
    size when one was registered, otherwise the remaining quota. A known
    ``Content-Length`` is checked against that limit up front.

    Raises:
        EntityNotFoundError: If the file does not exist or belongs to someone else
        ContentSizeMismatchError: If the length differs from the declared size
        InsufficientStorageError: If the length exceeds the remaining quota
    """
    file = File.get_owned_by_id(file_id, user.email, self.session)

    if file.size_in_bytes:
      if content_length is not None and content_length != file.size_in_bytes:
        raise ContentSizeMismatchError(file.id, file.size_in_bytes, content_length)
      return file, file.size_in_bytes

    used_by_others = self.used_space(user) - file.size_in_bytes
    if content_length is not None:
      self.quota.check(used_by_others, content_length)
    return file, self.quota.remaining(used_by_others)

  def upload_content(
    self,
    user: User,
    file_id: int,
    data: Union[bytes, BinaryIO],
    size_in_bytes: Optional[int] = None,
  ) -> File:
    """
    Store content for one of the user's registered files.

    ``data`` is either the whole content or a file object holding
    ``size_in_bytes`` bytes. A non-zero declared size must match the
    uploaded length exactly. The quota is re-checked against the actual
    length, replacing the declared size in the owner's usage.

    Raises:
        EntityNotFoundError: If the file does not exist or belongs to someone else
        ContentSizeMismatchError: If the length differs from the declared size
        InsufficientStorageError: If the actual length exceeds the remaining quota
    """
    file = File.get_owned_by_id(file_id, user.email, self.session)
    actual_bytes = len(data) if size_in_bytes is None else size_in_bytes

    if file.size_in_bytes and actual_bytes != file.size_in_bytes:
      raise ContentSizeMismatchError(file.id, file.size_in_bytes, actual_bytes)

    used_by_others = self.used_space(user) - file.size_in_bytes
    self.quota.check(used_by_others, actual_bytes)

    self.storage.save_file(file.id, data, actual_bytes, file.mime_type)
    file = File.update_content_info(
      file.id, actual_bytes, FileStatus.ACTIVE, self.session
    )
    logger.info(f"Stored {actual_bytes} bytes for file {file.id}")
    return file

  def get_file_by_original_name(
    self, user: User, original_name: str
  ) -> Tuple[File, Iterator[bytes]]:
    """Metadata and a content stream of one of the user's files, looked up by name."""
    file = File.get_by_original_name_and_user_email(
      user.email, original_name, self.session
    )
    return file, self.storage.get_file_stream(file.id)

  def get_file_by_id(self, user: User, file_id: int) -> Tuple[File, Iterator[bytes]]:
    """Metadata and a content stream of a file the user owns or that is public."""
    file = File.get_readable_by_id(file_id, user.id, self.session)
    return file, self.storage.get_file_stream(file.id)

  def get_file_info(self, user: User, original_name: str) -> File:
    return File.get_by_original_name_and_user_email(
      user.email, original_name, self.session
    )

  def list_files(self, user: User) -> List[File]:
    return File.list_by_owner(user.email, self.session)

  def rename_file(self, user: User, original_name: str, new_name: str) -> File:
    # Objects are keyed by file id, so only metadata changes
    return File.rename(user.email, original_name, new_name, self.session)

  def change_visibility(self, user: User, original_name: str, is_public: bool) -> File:
    return File.change_visibility(user.email, original_name, is_public, self.session)

  def set_status(self, user: User, original_name: str, status: FileStatus) -> File:
    return File.set_status(user.email, original_name, status, self.session)

  def delete_file(self, user: User, original_name: str) -> File:
    """
    Delete one of the user's files.

    The object delete is best-effort: a storage failure is logged and the
    metadata row is deleted regardless.
    """
    file = File.get_by_original_name_and_user_email(
      user.email, original_name, self.session
    )

    try:
      self.storage.delete_file(file.object_key)
    except StorageError as e:
      logger.warning(
        f"Failed to delete object for file {file.id}, leaving orphan: {e.message}",
        extra={"file_id": file.id, "user_id": user.id},
      )

    return File.delete_owned(user.email, original_name, self.session)

  def get_storage_info(self, user: User) -> StorageInfo:
    return self.quota.storage_info(self.used_space(user))

"""File storage operations: quota policy, download helpers and the service facade."""

from .content import content_disposition, ensure_file_extension, spool_upload
from .quota import QuotaPolicy, StorageInfo
from .service import FileStorageService

__all__ = [
  "FileStorageService",
  "QuotaPolicy",
  "StorageInfo",
  "content_disposition",
  "ensure_file_extension",
  "spool_upload",
]

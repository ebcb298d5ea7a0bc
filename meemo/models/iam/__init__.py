"""Identity and storage metadata models package."""

from .file import File, FileStatus
from .refresh_token import RefreshToken, hash_refresh_token
from .user import User

__all__ = [
  "File",
  "FileStatus",
  "RefreshToken",
  "User",
  "hash_refresh_token",
]

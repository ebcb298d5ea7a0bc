from .iam import File, FileStatus, RefreshToken, User

__all__ = [
  "File",  # File metadata registry
  "FileStatus",  # File lifecycle enum
  "RefreshToken",  # Persisted refresh token
  "User",  # User directory
]

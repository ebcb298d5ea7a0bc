"""
Static constants configuration.

Operational defaults that environment variables in ``env.py`` fall back to.
"""

# =============================================================================
# DATABASE
# =============================================================================

DEFAULT_POOL_SIZE = 10
DEFAULT_MAX_OVERFLOW = 20
DEFAULT_POOL_TIMEOUT = 30  # seconds
DEFAULT_POOL_RECYCLE = 3600  # 1 hour

# =============================================================================
# AUTHENTICATION
# =============================================================================

DEFAULT_ACCESS_TOKEN_MINUTES = 15
DEFAULT_REFRESH_TOKEN_DAYS = 7
REFRESH_TOKEN_LENGTH = 128
REFRESH_TOKEN_CHARSET = (
  "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
)
DEFAULT_BCRYPT_ROUNDS = 12
MIN_PASSWORD_LENGTH = 6

# =============================================================================
# STORAGE
# =============================================================================

GIB = 1024 * 1024 * 1024
DEFAULT_STORAGE_QUOTA_BYTES = 10 * GIB
DEFAULT_CONTENT_TYPE = "application/octet-stream"
MAX_FILE_NAME_LENGTH = 255

# Unreachable by name: "storage" is shadowed by GET /files/storage and
# clients collapse dot segments
RESERVED_FILE_NAMES = frozenset({"storage", ".", ".."})

# Uploads are spooled to disk past this size; downloads are sent in chunks
MIB = 1024 * 1024
UPLOAD_SPOOL_MAX_BYTES = 8 * MIB
DOWNLOAD_CHUNK_BYTES = 1 * MIB

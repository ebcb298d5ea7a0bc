"""
Custom exception types for Meemo.

Lower layers (models, object store adapter, services) raise these typed
errors; routers translate them into HTTP status codes. Each exception
carries a machine-readable error code plus details for logging.
"""

from typing import Optional, Dict, Any
from datetime import datetime, timezone


class MeemoError(Exception):
  """
  Base exception for all Meemo application errors.

  Attributes:
      message: Human-readable error message
      error_code: Application-specific error code for categorization
      details: Additional error context and metadata
      timestamp: When the error occurred
  """

  def __init__(
    self,
    message: str,
    error_code: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
  ):
    super().__init__(message)
    self.message = message
    self.error_code = error_code or self.__class__.__name__
    self.details = details or {}
    self.timestamp = datetime.now(timezone.utc).isoformat()

  def to_dict(self) -> Dict[str, Any]:
    """Convert exception to dictionary for API responses."""
    return {
      "error": self.error_code,
      "message": self.message,
      "details": self.details,
      "timestamp": self.timestamp,
    }


# ============================================================================
# Entity Exceptions
# ============================================================================


class EntityError(MeemoError):
  """Base exception for entity-related operations."""

  pass


class EntityNotFoundError(EntityError):
  """
  Raised when an entity is not found.

  Covers both rows that do not exist and rows owned by someone else; the
  two cases are intentionally indistinguishable.
  """

  def __init__(self, entity_id: str, entity_type: str = "Entity"):
    super().__init__(
      f"{entity_type} '{entity_id}' not found",
      error_code="ENTITY_NOT_FOUND",
      details={"entity_id": entity_id, "entity_type": entity_type},
    )


class EntityValidationError(EntityError):
  """Raised when entity data fails validation."""

  def __init__(self, message: str, field: Optional[str] = None, **kwargs):
    details = {"field": field} if field else {}
    details.update(kwargs)
    super().__init__(
      message,
      error_code="ENTITY_VALIDATION_ERROR",
      details=details,
    )


class DuplicateEntityError(EntityError):
  """Raised when attempting to create a duplicate entity."""

  def __init__(self, entity_type: str, identifier: str, field: str = "id"):
    super().__init__(
      f"{entity_type} with {field} '{identifier}' already exists",
      error_code="DUPLICATE_ENTITY",
      details={
        "entity_type": entity_type,
        "identifier": identifier,
        "field": field,
      },
    )


# ============================================================================
# Authentication Exceptions
# ============================================================================


class AuthError(MeemoError):
  """Base exception for authentication and authorization errors."""

  pass


class AuthenticationError(AuthError):
  """Raised when authentication fails."""

  def __init__(self, reason: str = "Invalid credentials", **kwargs):
    super().__init__(
      f"Authentication failed: {reason}",
      error_code="AUTHENTICATION_FAILED",
      details={"reason": reason, **kwargs},
    )


class TokenExpiredError(AuthError):
  """Raised when an authentication token has expired."""

  def __init__(self, token_type: str = "access"):
    super().__init__(
      f"{token_type.capitalize()} token has expired",
      error_code="TOKEN_EXPIRED",
      details={"token_type": token_type},
    )


class RegistrationDisabledError(AuthError):
  """Raised when self-service registration is switched off."""

  def __init__(self):
    super().__init__(
      "User registration is currently disabled",
      error_code="REGISTRATION_DISABLED",
    )


# ============================================================================
# Storage Exceptions
# ============================================================================


class InsufficientStorageError(MeemoError):
  """Raised when a file would push the owner's usage past the quota ceiling."""

  def __init__(self, used_bytes: int, incoming_bytes: int, limit_bytes: int):
    super().__init__(
      "Insufficient storage space",
      error_code="INSUFFICIENT_STORAGE",
      details={
        "used_bytes": used_bytes,
        "incoming_bytes": incoming_bytes,
        "limit_bytes": limit_bytes,
      },
    )


class ContentSizeMismatchError(MeemoError):
  """Raised when uploaded content does not match the size declared at registration."""

  def __init__(self, file_id: int, declared_bytes: int, actual_bytes: int):
    super().__init__(
      "Uploaded content size does not match the declared size",
      error_code="CONTENT_SIZE_MISMATCH",
      details={
        "file_id": file_id,
        "declared_bytes": declared_bytes,
        "actual_bytes": actual_bytes,
      },
    )


class StorageError(MeemoError):
  """Raised when the object store fails for reasons other than a missing key."""

  def __init__(
    self,
    operation: str,
    bucket: Optional[str] = None,
    key: Optional[str] = None,
    error_code_s3: Optional[str] = None,
  ):
    details = {"operation": operation}
    if bucket:
      details["bucket"] = bucket
    if key:
      details["key"] = key
    if error_code_s3:
      details["s3_error_code"] = error_code_s3
    super().__init__(
      f"Object storage {operation} failed",
      error_code="STORAGE_ERROR",
      details=details,
    )


class ObjectNotFoundError(StorageError):
  """Raised when an object key is absent from the bucket."""

  def __init__(self, bucket: str, key: str):
    MeemoError.__init__(
      self,
      f"Object '{key}' not found",
      error_code="OBJECT_NOT_FOUND",
      details={"bucket": bucket, "key": key},
    )


# ============================================================================
# Configuration Exceptions
# ============================================================================


class ConfigurationError(MeemoError):
  """Raised when there are configuration issues."""

  def __init__(self, message: str, config_key: Optional[str] = None):
    details = {"config_key": config_key} if config_key else {}
    super().__init__(
      message,
      error_code="CONFIGURATION_ERROR",
      details=details,
    )

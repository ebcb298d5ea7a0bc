"""Router helpers shared by the user and file endpoints."""

from typing import Optional

from fastapi import HTTPException, Request, status

from ..exceptions import (
  AuthError,
  ContentSizeMismatchError,
  DuplicateEntityError,
  EntityNotFoundError,
  EntityValidationError,
  InsufficientStorageError,
  MeemoError,
  ObjectNotFoundError,
  RegistrationDisabledError,
)
from ..logger import log_app_error

# Anything not listed, StorageError included, maps to 500
ERROR_STATUS_CODES = (
  (EntityNotFoundError, status.HTTP_404_NOT_FOUND),
  (ObjectNotFoundError, status.HTTP_404_NOT_FOUND),
  (DuplicateEntityError, status.HTTP_409_CONFLICT),
  (InsufficientStorageError, status.HTTP_400_BAD_REQUEST),
  (ContentSizeMismatchError, status.HTTP_400_BAD_REQUEST),
  (RegistrationDisabledError, status.HTTP_403_FORBIDDEN),
  (AuthError, status.HTTP_401_UNAUTHORIZED),
  (EntityValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
)

GENERIC_ERROR_DETAIL = "Internal server error"


def status_code_for(error: MeemoError) -> int:
  for error_type, status_code in ERROR_STATUS_CODES:
    if isinstance(error, error_type):
      return status_code
  return status.HTTP_500_INTERNAL_SERVER_ERROR


def http_error(error: MeemoError, component: str, action: str) -> HTTPException:
  """
  Translate a typed error into an HTTPException.

  Server-side failures are logged with their details and answered with a
  generic message.
  """
  status_code = status_code_for(error)
  if status_code >= 500:
    log_app_error(
      error,
      component=component,
      action=action,
      error_category=error.error_code,
      metadata=error.details,
    )
    return HTTPException(status_code=status_code, detail=GENERIC_ERROR_DETAIL)

  headers = (
    {"WWW-Authenticate": "Bearer"}
    if status_code == status.HTTP_401_UNAUTHORIZED
    else None
  )
  return HTTPException(status_code=status_code, detail=error.message, headers=headers)


def client_ip(request: Request) -> Optional[str]:
  return request.client.host if request.client else None

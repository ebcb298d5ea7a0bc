"""Pydantic request and response models for the HTTP API."""

from .auth import (
  LoginRequest,
  LogoutRequest,
  LogoutResponse,
  RefreshRequest,
  RegisterRequest,
  TokenResponse,
  UserInfoResponse,
)
from .common import ErrorResponse, HealthStatus, PingResponse, SuccessResponse
from .files import (
  FileListResponse,
  FileMetadataRequest,
  FileResponse,
  RenameRequest,
  StatusRequest,
  StorageInfoResponse,
  VisibilityRequest,
)

__all__ = [
  "ErrorResponse",
  "FileListResponse",
  "FileMetadataRequest",
  "FileResponse",
  "HealthStatus",
  "LoginRequest",
  "LogoutRequest",
  "LogoutResponse",
  "PingResponse",
  "RefreshRequest",
  "RegisterRequest",
  "RenameRequest",
  "StatusRequest",
  "StorageInfoResponse",
  "SuccessResponse",
  "TokenResponse",
  "UserInfoResponse",
  "VisibilityRequest",
]

"""File listing, metadata registration and quota endpoints."""

from fastapi import APIRouter, Depends, status

from ...exceptions import MeemoError
from ...middleware.auth.dependencies import get_current_user
from ...models.api.common import ErrorResponse
from ...models.api.files import (
  FileListResponse,
  FileMetadataRequest,
  FileResponse,
  StorageInfoResponse,
)
from ...models.iam import User
from ...operations.files import FileStorageService
from ..utils import http_error
from .dependencies import get_file_service

router = APIRouter()


@router.get(
  "",
  response_model=FileListResponse,
  summary="List Files",
  description="List the current user's files, newest first.",
  operation_id="listFiles",
)
async def list_files(
  current_user: User = Depends(get_current_user),
  service: FileStorageService = Depends(get_file_service),
) -> FileListResponse:
  files = service.list_files(current_user)
  return FileListResponse(
    files=[FileResponse.model_validate(f) for f in files], total=len(files)
  )


@router.post(
  "/metadata",
  response_model=FileResponse,
  status_code=status.HTTP_201_CREATED,
  summary="Register File Metadata",
  description="Register a file before uploading its content. The file starts in the pending status.",
  operation_id="registerFileMetadata",
  responses={
    400: {"model": ErrorResponse, "description": "Storage quota exceeded"},
    409: {"model": ErrorResponse, "description": "File name already in use"},
  },
)
async def register_file_metadata(
  request: FileMetadataRequest,
  current_user: User = Depends(get_current_user),
  service: FileStorageService = Depends(get_file_service),
) -> FileResponse:
  """
  Register metadata for a new file.

  The declared size counts against the quota immediately; no row is
  created when it does not fit.
  """
  try:
    file = service.register_file(
      current_user,
      original_name=request.original_name,
      mime_type=request.mime_type,
      size_in_bytes=request.size_in_bytes,
      is_public=request.is_public,
    )
  except MeemoError as e:
    raise http_error(e, "files", "register_metadata") from e

  return FileResponse.model_validate(file)


@router.get(
  "/storage",
  response_model=StorageInfoResponse,
  summary="Storage Usage",
  description="Used, available and total bytes of the current user's quota.",
  operation_id="getStorageInfo",
)
async def get_storage_info(
  current_user: User = Depends(get_current_user),
  service: FileStorageService = Depends(get_file_service),
) -> StorageInfoResponse:
  info = service.get_storage_info(current_user)
  return StorageInfoResponse(
    used_bytes=info.used_bytes,
    available_bytes=info.available_bytes,
    total_bytes=info.total_bytes,
  )


@router.get(
  "/{original_name}/info",
  response_model=FileResponse,
  summary="File Metadata",
  description="Metadata of one of the current user's files.",
  operation_id="getFileInfo",
  responses={404: {"model": ErrorResponse, "description": "File not found"}},
)
async def get_file_info(
  original_name: str,
  current_user: User = Depends(get_current_user),
  service: FileStorageService = Depends(get_file_service),
) -> FileResponse:
  try:
    file = service.get_file_info(current_user, original_name)
  except MeemoError as e:
    raise http_error(e, "files", "get_info") from e

  return FileResponse.model_validate(file)

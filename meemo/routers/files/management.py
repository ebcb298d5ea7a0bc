"""Rename, visibility, status and delete endpoints."""

from fastapi import APIRouter, Depends

from ...exceptions import MeemoError
from ...middleware.auth.dependencies import get_current_user
from ...models.api.common import ErrorResponse, SuccessResponse
from ...models.api.files import (
  FileResponse,
  RenameRequest,
  StatusRequest,
  VisibilityRequest,
)
from ...models.iam import User
from ...operations.files import FileStorageService
from ..utils import http_error
from .dependencies import get_file_service

router = APIRouter()

NOT_FOUND_RESPONSE = {404: {"model": ErrorResponse, "description": "File not found"}}


@router.put(
  "/rename",
  response_model=FileResponse,
  summary="Rename File",
  operation_id="renameFile",
  responses={
    **NOT_FOUND_RESPONSE,
    409: {"model": ErrorResponse, "description": "New name already in use"},
  },
)
async def rename_file(
  request: RenameRequest,
  current_user: User = Depends(get_current_user),
  service: FileStorageService = Depends(get_file_service),
) -> FileResponse:
  try:
    file = service.rename_file(current_user, request.original_name, request.new_name)
  except MeemoError as e:
    raise http_error(e, "files", "rename") from e

  return FileResponse.model_validate(file)


@router.put(
  "/visibility",
  response_model=FileResponse,
  summary="Change File Visibility",
  operation_id="changeFileVisibility",
  responses=NOT_FOUND_RESPONSE,
)
async def change_visibility(
  request: VisibilityRequest,
  current_user: User = Depends(get_current_user),
  service: FileStorageService = Depends(get_file_service),
) -> FileResponse:
  try:
    file = service.change_visibility(
      current_user, request.original_name, request.is_public
    )
  except MeemoError as e:
    raise http_error(e, "files", "change_visibility") from e

  return FileResponse.model_validate(file)


@router.put(
  "/status",
  response_model=FileResponse,
  summary="Set File Status",
  operation_id="setFileStatus",
  responses=NOT_FOUND_RESPONSE,
)
async def set_status(
  request: StatusRequest,
  current_user: User = Depends(get_current_user),
  service: FileStorageService = Depends(get_file_service),
) -> FileResponse:
  try:
    file = service.set_status(current_user, request.original_name, request.status)
  except MeemoError as e:
    raise http_error(e, "files", "set_status") from e

  return FileResponse.model_validate(file)


@router.delete(
  "/{original_name}",
  response_model=SuccessResponse,
  summary="Delete File",
  description="Delete a file and its content.",
  operation_id="deleteFile",
  responses=NOT_FOUND_RESPONSE,
)
async def delete_file(
  original_name: str,
  current_user: User = Depends(get_current_user),
  service: FileStorageService = Depends(get_file_service),
) -> SuccessResponse:
  try:
    file = service.delete_file(current_user, original_name)
  except MeemoError as e:
    raise http_error(e, "files", "delete") from e

  return SuccessResponse(
    message=f"File '{file.original_name}' deleted",
    data={"id": file.id, "size_in_bytes": file.size_in_bytes},
  )

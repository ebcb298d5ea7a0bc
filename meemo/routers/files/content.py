"""File content upload and download endpoints."""

from typing import Iterator, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from ...exceptions import MeemoError
from ...middleware.auth.dependencies import get_current_user
from ...models.api.common import ErrorResponse
from ...models.api.files import FileResponse
from ...models.iam import File, User
from ...operations.files import FileStorageService, content_disposition, spool_upload
from ..utils import http_error
from .dependencies import get_file_service

router = APIRouter()


def _content_length(request: Request) -> Optional[int]:
  content_length_str = request.headers.get("content-length")
  if content_length_str and content_length_str.isdigit():
    return int(content_length_str)
  return None


def _download_response(file: File, chunks: Iterator[bytes]) -> StreamingResponse:
  return StreamingResponse(
    chunks,
    media_type=file.mime_type,
    headers={
      "Content-Disposition": content_disposition(file.original_name, file.mime_type)
    },
  )


@router.post(
  "/{file_id}/content",
  response_model=FileResponse,
  summary="Upload File Content",
  description="Upload the raw request body as the content of a registered file the caller owns.",
  operation_id="uploadFileContent",
  responses={
    400: {
      "model": ErrorResponse,
      "description": "Size differs from the declared size, or quota exceeded",
    },
    404: {"model": ErrorResponse, "description": "File not found"},
  },
)
async def upload_file_content(
  file_id: int,
  request: Request,
  current_user: User = Depends(get_current_user),
  service: FileStorageService = Depends(get_file_service),
) -> FileResponse:
  try:
    _, limit = service.prepare_upload(current_user, file_id, _content_length(request))
  except MeemoError as e:
    raise http_error(e, "files", "upload_content") from e

  body, size = await spool_upload(request.stream(), limit)
  with body:
    try:
      file = service.upload_content(current_user, file_id, body, size)
    except MeemoError as e:
      raise http_error(e, "files", "upload_content") from e

  return FileResponse.model_validate(file)


@router.get(
  "/by-id/{file_id}",
  response_class=StreamingResponse,
  summary="Download File By ID",
  description="Download a file the caller owns or that is public.",
  operation_id="downloadFileById",
  responses={
    200: {"content": {"application/octet-stream": {}}},
    404: {"model": ErrorResponse, "description": "File not found"},
  },
)
async def download_file_by_id(
  file_id: int,
  current_user: User = Depends(get_current_user),
  service: FileStorageService = Depends(get_file_service),
) -> StreamingResponse:
  try:
    file, chunks = service.get_file_by_id(current_user, file_id)
  except MeemoError as e:
    raise http_error(e, "files", "download_by_id") from e

  return _download_response(file, chunks)


@router.get(
  "/{original_name}",
  response_class=StreamingResponse,
  summary="Download File",
  description="Download one of the current user's files by name.",
  operation_id="downloadFile",
  responses={
    200: {"content": {"application/octet-stream": {}}},
    404: {"model": ErrorResponse, "description": "File not found"},
  },
)
async def download_file(
  original_name: str,
  current_user: User = Depends(get_current_user),
  service: FileStorageService = Depends(get_file_service),
) -> StreamingResponse:
  try:
    file, chunks = service.get_file_by_original_name(current_user, original_name)
  except MeemoError as e:
    raise http_error(e, "files", "download") from e

  return _download_response(file, chunks)

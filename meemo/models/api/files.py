"""File API models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...config.constants import (
  DEFAULT_CONTENT_TYPE,
  MAX_FILE_NAME_LENGTH,
  RESERVED_FILE_NAMES,
)
from ..iam import FileStatus


def validate_file_name(name: str) -> str:
  """Reject names the download-by-name route cannot address."""
  if "/" in name:
    raise ValueError("File name must not contain '/'")
  if name in RESERVED_FILE_NAMES:
    raise ValueError(f"'{name}' is a reserved file name")
  return name


class FileMetadataRequest(BaseModel):
  """Metadata registered before the content upload."""

  original_name: str = Field(
    ...,
    min_length=1,
    max_length=MAX_FILE_NAME_LENGTH,
    description="Name of the file, unique per owner",
    examples=["doc.pdf"],
  )
  mime_type: str = Field(
    DEFAULT_CONTENT_TYPE,
    max_length=255,
    description="MIME type of the content",
    examples=["application/pdf"],
  )
  size_in_bytes: int = Field(
    0, ge=0, description="Declared size; 0 when unknown", examples=[500]
  )
  is_public: bool = Field(False, description="Readable by any authenticated user")

  @field_validator("original_name")
  def validate_original_name(cls, v: str) -> str:
    return validate_file_name(v)


class FileResponse(BaseModel):
  """File metadata."""

  model_config = ConfigDict(from_attributes=True)

  id: int
  user_id: int
  original_name: str
  mime_type: str
  size_in_bytes: int
  s3_bucket: str
  s3_key: str
  status: FileStatus
  is_public: bool
  created_at: datetime
  updated_at: datetime


class FileListResponse(BaseModel):
  files: list[FileResponse] = Field(..., description="Files, newest first")
  total: int = Field(..., description="Number of files")


class RenameRequest(BaseModel):
  original_name: str = Field(..., min_length=1, max_length=MAX_FILE_NAME_LENGTH)
  new_name: str = Field(..., min_length=1, max_length=MAX_FILE_NAME_LENGTH)

  @field_validator("new_name")
  def validate_new_name(cls, v: str) -> str:
    return validate_file_name(v)


class VisibilityRequest(BaseModel):
  original_name: str = Field(..., min_length=1, max_length=MAX_FILE_NAME_LENGTH)
  is_public: bool


class StatusRequest(BaseModel):
  original_name: str = Field(..., min_length=1, max_length=MAX_FILE_NAME_LENGTH)
  status: FileStatus = Field(
    ..., description="0 = pending, 1 = active, 2 = deleted", examples=[1]
  )


class StorageInfoResponse(BaseModel):
  """Quota usage for the current user."""

  used_bytes: int = Field(..., description="Sum of the user's file sizes")
  available_bytes: int = Field(..., description="Remaining quota, never negative")
  total_bytes: int = Field(..., description="Quota ceiling")

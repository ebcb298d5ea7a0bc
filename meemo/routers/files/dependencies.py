"""Dependencies shared by the file endpoints."""

from fastapi import Depends
from sqlalchemy.orm import Session

from ...database import get_db_session
from ...operations.aws import S3FileStorage, get_file_storage
from ...operations.files import FileStorageService


def get_file_service(
  session: Session = Depends(get_db_session),
  storage: S3FileStorage = Depends(get_file_storage),
) -> FileStorageService:
  return FileStorageService(session, storage)

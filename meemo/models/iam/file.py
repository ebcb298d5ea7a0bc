"""
File metadata registry.

Authorization is the owner predicate: every owner-scoped lookup and mutation
goes through ``File._owned_query``, which joins the owning user and matches
on (owner email, original name). A caller naming a file it does not own
matches zero rows and gets ``EntityNotFoundError``, exactly like a caller
naming a file that does not exist. There is no second access check.
"""

from datetime import datetime, timezone
from enum import IntEnum
from typing import List, Optional

from sqlalchemy import (
  BigInteger,
  Boolean,
  Column,
  DateTime,
  ForeignKey,
  Integer,
  String,
  UniqueConstraint,
  func,
  or_,
)
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session, relationship

from ...database import Model
from ...exceptions import DuplicateEntityError, EntityNotFoundError
from ...logger import logger
from .user import User


class FileStatus(IntEnum):
  """Lifecycle status stored in ``files.status``."""

  PENDING = 0
  ACTIVE = 1
  DELETED = 2


class File(Model):
  """Metadata row describing one stored object."""

  __tablename__ = "files"

  id = Column(Integer, primary_key=True, autoincrement=True)
  user_id = Column(
    Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
  )
  original_name = Column(String(255), nullable=False)
  mime_type = Column(String(255), nullable=False)
  size_in_bytes = Column(BigInteger, nullable=False, default=0)
  s3_bucket = Column(String(255), nullable=False)
  s3_key = Column(String(1024), nullable=False, default="")
  status = Column(Integer, nullable=False, default=int(FileStatus.PENDING))
  is_public = Column(Boolean, nullable=False, default=False)
  created_at = Column(
    DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
  )
  updated_at = Column(
    DateTime(timezone=True),
    default=lambda: datetime.now(timezone.utc),
    nullable=False,
  )

  owner = relationship("User", back_populates="files")

  __table_args__ = (
    UniqueConstraint("user_id", "original_name", name="uq_files_user_original_name"),
  )

  def __repr__(self) -> str:
    return f"<File {self.id} {self.original_name} owner={self.user_id}>"

  @property
  def object_key(self) -> str:
    """Object store key for this file's bytes."""
    return str(self.id)

  # ------------------------------------------------------------------
  # Lookups
  # ------------------------------------------------------------------

  @classmethod
  def _owned_query(cls, owner_email: str, original_name: str, session: Session) -> Query:
    return (
      session.query(cls)
      .join(User, User.id == cls.user_id)
      .filter(User.email == owner_email, cls.original_name == original_name)
    )

  @classmethod
  def _get_owned(cls, owner_email: str, original_name: str, session: Session) -> "File":
    file = cls._owned_query(owner_email, original_name, session).first()
    if file is None:
      raise EntityNotFoundError(original_name, "File")
    return file

  @classmethod
  def get(cls, file_id: int, session: Session) -> "File":
    """
    Get a file by id regardless of owner.

    Raises:
        EntityNotFoundError: If no such file exists
    """
    file = session.query(cls).filter(cls.id == file_id).first()
    if file is None:
      raise EntityNotFoundError(str(file_id), "File")
    return file

  @classmethod
  def get_owned_by_id(cls, file_id: int, owner_email: str, session: Session) -> "File":
    """
    Get a file by id, scoped to its owner.

    Raises:
        EntityNotFoundError: If the id does not exist or belongs to someone else
    """
    file = (
      session.query(cls)
      .join(User, User.id == cls.user_id)
      .filter(cls.id == file_id, User.email == owner_email)
      .first()
    )
    if file is None:
      raise EntityNotFoundError(str(file_id), "File")
    return file

  @classmethod
  def get_readable_by_id(cls, file_id: int, user_id: int, session: Session) -> "File":
    """
    Get a file by id if the user owns it or it is public.

    Raises:
        EntityNotFoundError: If the id does not exist or is private to someone else
    """
    file = (
      session.query(cls)
      .filter(cls.id == file_id, or_(cls.user_id == user_id, cls.is_public.is_(True)))
      .first()
    )
    if file is None:
      raise EntityNotFoundError(str(file_id), "File")
    return file

  @classmethod
  def get_by_original_name_and_user_email(
    cls, owner_email: str, original_name: str, session: Session
  ) -> "File":
    """
    Get a file by name within the owner's namespace.

    Raises:
        EntityNotFoundError: If the owner has no file with this name
    """
    return cls._get_owned(owner_email, original_name, session)

  @classmethod
  def list_by_owner(cls, owner_email: str, session: Session) -> List["File"]:
    """All of the owner's files, newest first."""
    return (
      session.query(cls)
      .join(User, User.id == cls.user_id)
      .filter(User.email == owner_email)
      .order_by(cls.created_at.desc(), cls.id.desc())
      .all()
    )

  @classmethod
  def get_total_used_space(cls, owner_email: str, session: Session) -> int:
    """Sum of ``size_in_bytes`` across the owner's files (0 when none)."""
    total = (
      session.query(func.coalesce(func.sum(cls.size_in_bytes), 0))
      .join(User, User.id == cls.user_id)
      .filter(User.email == owner_email)
      .scalar()
    )
    return int(total or 0)

  # ------------------------------------------------------------------
  # Mutations
  # ------------------------------------------------------------------

  @classmethod
  def save_metadata(
    cls,
    user_id: int,
    original_name: str,
    mime_type: str,
    s3_bucket: str,
    size_in_bytes: int,
    is_public: bool,
    session: Session,
    s3_key: Optional[str] = None,
  ) -> "File":
    """
    Register a new pending file.

    The object key defaults to the generated file id.

    Raises:
        DuplicateEntityError: If the owner already has a file with this name
    """
    now = datetime.now(timezone.utc)
    file = cls(
      user_id=user_id,
      original_name=original_name,
      mime_type=mime_type,
      size_in_bytes=size_in_bytes,
      s3_bucket=s3_bucket,
      s3_key=s3_key or "",
      status=int(FileStatus.PENDING),
      is_public=is_public,
      created_at=now,
      updated_at=now,
    )
    session.add(file)
    try:
      session.flush()
      if not s3_key:
        file.s3_key = file.object_key
      session.commit()
      session.refresh(file)
    except IntegrityError:
      session.rollback()
      raise DuplicateEntityError("File", original_name, field="original_name")
    except SQLAlchemyError:
      session.rollback()
      raise

    logger.info(f"Registered file {file.id} for user {user_id}")
    return file

  def _commit(self, session: Session) -> None:
    name = self.original_name
    self.updated_at = datetime.now(timezone.utc)
    try:
      session.commit()
      session.refresh(self)
    except IntegrityError:
      session.rollback()
      raise DuplicateEntityError("File", name, field="original_name")
    except SQLAlchemyError:
      session.rollback()
      raise

  @classmethod
  def rename(
    cls, owner_email: str, original_name: str, new_name: str, session: Session
  ) -> "File":
    """
    Rename one of the owner's files.

    Raises:
        EntityNotFoundError: If the owner has no file named ``original_name``
        DuplicateEntityError: If the owner already uses ``new_name``
    """
    file = cls._get_owned(owner_email, original_name, session)
    if original_name == new_name:
      return file

    file.original_name = new_name
    file._commit(session)
    return file

  @classmethod
  def change_visibility(
    cls, owner_email: str, original_name: str, is_public: bool, session: Session
  ) -> "File":
    """Set the public flag on one of the owner's files."""
    file = cls._get_owned(owner_email, original_name, session)
    file.is_public = is_public
    file._commit(session)
    return file

  @classmethod
  def set_status(
    cls, owner_email: str, original_name: str, status: int, session: Session
  ) -> "File":
    """Set the lifecycle status on one of the owner's files."""
    file = cls._get_owned(owner_email, original_name, session)
    file.status = int(FileStatus(status))
    file._commit(session)
    return file

  @classmethod
  def update_content_info(
    cls, file_id: int, size_in_bytes: int, status: FileStatus, session: Session
  ) -> "File":
    """Record the size of uploaded content and the resulting status."""
    file = cls.get(file_id, session)
    file.size_in_bytes = size_in_bytes
    file.status = int(FileStatus(status))
    file._commit(session)
    return file

  @classmethod
  def delete_owned(cls, owner_email: str, original_name: str, session: Session) -> "File":
    """
    Delete one of the owner's files and return the deleted row.

    Raises:
        EntityNotFoundError: If the owner has no file with this name
    """
    file = cls._get_owned(owner_email, original_name, session)
    session.delete(file)
    try:
      session.commit()
    except SQLAlchemyError:
      session.rollback()
      raise

    logger.info(f"Deleted file metadata {file.id}")
    return file

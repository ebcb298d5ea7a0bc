"""User directory model."""

from datetime import datetime, timezone
from typing import Optional, Sequence

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship, Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ...database import Model
from ...exceptions import (
  DuplicateEntityError,
  EntityNotFoundError,
  EntityValidationError,
)
from ...logger import logger


class User(Model):
  """
  Registered account that owns files.

  Emails are unique and compared exactly as stored (case-sensitive).
  Deleting a user deletes the user's files and refresh tokens.
  """

  __tablename__ = "users"

  UPDATABLE_FIELDS = frozenset({"first_name", "last_name", "password_hash"})

  id = Column(Integer, primary_key=True, autoincrement=True)
  first_name = Column(String(100), nullable=False)
  last_name = Column(String(100), nullable=False)
  email = Column(String(254), unique=True, nullable=False, index=True)
  password_hash = Column(String, nullable=False)
  created_at = Column(
    DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
  )
  updated_at = Column(
    DateTime(timezone=True),
    default=lambda: datetime.now(timezone.utc),
    onupdate=lambda: datetime.now(timezone.utc),
    nullable=False,
  )

  files = relationship(
    "File", back_populates="owner", cascade="all, delete-orphan", passive_deletes=True
  )
  refresh_tokens = relationship(
    "RefreshToken",
    back_populates="user",
    cascade="all, delete-orphan",
    passive_deletes=True,
  )

  def __repr__(self) -> str:
    """String representation of the user."""
    return f"<User {self.id} {self.email}>"

  @property
  def full_name(self) -> str:
    return f"{self.first_name} {self.last_name}".strip()

  @classmethod
  def get_by_id(cls, user_id: int, session: Session) -> Optional["User"]:
    """Get a user by ID."""
    return session.query(cls).filter(cls.id == user_id).first()

  @classmethod
  def find_by_email(cls, email: str, session: Session) -> Optional["User"]:
    """Get a user by exact email, or None."""
    return session.query(cls).filter(cls.email == email).first()

  @classmethod
  def get_by_email(cls, email: str, session: Session) -> "User":
    """
    Get a user by exact email.

    Raises:
        EntityNotFoundError: If no user has this email
    """
    user = cls.find_by_email(email, session)
    if user is None:
      raise EntityNotFoundError(email, "User")
    return user

  @classmethod
  def get_all(cls, session: Session) -> Sequence["User"]:
    """Get all users."""
    return session.query(cls).order_by(cls.id).all()

  @classmethod
  def create(
    cls,
    first_name: str,
    last_name: str,
    email: str,
    password_hash: str,
    session: Session,
  ) -> "User":
    """
    Create a new user.

    Raises:
        DuplicateEntityError: If the email is already registered
    """
    user = cls(
      first_name=first_name,
      last_name=last_name,
      email=email,
      password_hash=password_hash,
    )
    session.add(user)
    try:
      session.commit()
      session.refresh(user)
    except IntegrityError:
      session.rollback()
      raise DuplicateEntityError("User", email, field="email")
    except SQLAlchemyError:
      session.rollback()
      raise

    logger.info(f"Created user {user.id}")
    return user

  @classmethod
  def update_profile(
    cls,
    user_id: int,
    first_name: str,
    last_name: str,
    email: str,
    password_hash: str,
    session: Session,
  ) -> "User":
    """
    Replace every mutable field of a user.

    Raises:
        EntityNotFoundError: If the user no longer exists
        DuplicateEntityError: If the new email belongs to another user
    """
    user = cls.get_by_id(user_id, session)
    if user is None:
      raise EntityNotFoundError(str(user_id), "User")

    user.first_name = first_name
    user.last_name = last_name
    user.email = email
    user.password_hash = password_hash
    user.updated_at = datetime.now(timezone.utc)
    user._commit(session, email)
    return user

  @classmethod
  def update_email(cls, old_email: str, new_email: str, session: Session) -> "User":
    """
    Change a user's email.

    Setting the email to its current value succeeds without changes.

    Raises:
        EntityValidationError: If the new email is empty
        EntityNotFoundError: If no user has ``old_email``
        DuplicateEntityError: If ``new_email`` belongs to another user
    """
    if not new_email or not new_email.strip():
      raise EntityValidationError("Email must not be empty", field="email")

    user = cls.get_by_email(old_email, session)
    if old_email == new_email:
      return user

    user.email = new_email
    user.updated_at = datetime.now(timezone.utc)
    user._commit(session, new_email)
    logger.info(f"Updated email for user {user.id}")
    return user

  def update(self, session: Session, **kwargs) -> None:
    """
    Update profile fields or the password hash. ``None`` values are skipped.

    Raises:
        EntityValidationError: If a key is not in ``UPDATABLE_FIELDS``
    """
    rejected = sorted(set(kwargs) - self.UPDATABLE_FIELDS)
    if rejected:
      raise EntityValidationError(
        f"Fields cannot be updated: {', '.join(rejected)}", field=rejected[0]
      )

    for key, value in kwargs.items():
      if value is not None:
        setattr(self, key, value)
    self.updated_at = datetime.now(timezone.utc)
    self._commit(session, self.email)

  def _commit(self, session: Session, email: str) -> None:
    try:
      session.commit()
      session.refresh(self)
    except IntegrityError:
      session.rollback()
      raise DuplicateEntityError("User", email, field="email")
    except SQLAlchemyError:
      session.rollback()
      raise

  @classmethod
  def delete_by_email(cls, email: str, session: Session) -> "User":
    """
    Delete a user together with the user's files and refresh tokens.

    Raises:
        EntityNotFoundError: If no user has this email
    """
    user = cls.get_by_email(email, session)
    session.delete(user)
    try:
      session.commit()
    except SQLAlchemyError:
      session.rollback()
      raise

    logger.info(f"Deleted user {user.id}")
    return user

  @classmethod
  def check_password(cls, email: str, password_hash: str, session: Session) -> bool:
    """
    Whether a user with this email stores exactly this password hash.

    An unknown email yields False rather than an error.
    """
    if not email:
      return False

    match = (
      session.query(cls.id)
      .filter(cls.email == email, cls.password_hash == password_hash)
      .first()
    )
    return match is not None

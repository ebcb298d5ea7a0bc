"""Persisted refresh tokens backing token rotation and logout."""

import hashlib
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, relationship

from ...database import Model
from ...logger import logger


def hash_refresh_token(raw_token: str) -> str:
  return hashlib.sha256(raw_token.encode()).hexdigest()


class RefreshToken(Model):
  """
  A refresh token issued to a user.

  Only the sha256 digest of the token is stored. A token is usable while it
  is not revoked and ``expires_at`` lies in the future.
  """

  __tablename__ = "refresh_tokens"

  id = Column(Integer, primary_key=True, autoincrement=True)
  user_id = Column(
    Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
  )
  token_hash = Column(String(64), nullable=False, unique=True, index=True)
  expires_at = Column(DateTime(timezone=True), nullable=False)
  created_at = Column(
    DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
  )
  revoked = Column(Boolean, default=False, nullable=False)

  user = relationship("User", back_populates="refresh_tokens")

  __table_args__ = (Index("idx_refresh_tokens_expires", "expires_at"),)

  def __repr__(self) -> str:
    return f"<RefreshToken {self.id} for user {self.user_id}>"

  @classmethod
  def create(
    cls, user_id: int, raw_token: str, expires_in: timedelta, session: Session
  ) -> "RefreshToken":
    """Persist a freshly generated refresh token."""
    token = cls(
      user_id=user_id,
      token_hash=hash_refresh_token(raw_token),
      expires_at=datetime.now(timezone.utc) + expires_in,
      revoked=False,
    )
    session.add(token)
    try:
      session.commit()
      session.refresh(token)
    except SQLAlchemyError as e:
      session.rollback()
      logger.error(f"Failed to store refresh token: {e}")
      raise

    return token

  @classmethod
  def find_valid(cls, raw_token: str, session: Session) -> Optional["RefreshToken"]:
    """The matching token if it is neither revoked nor expired."""
    return (
      session.query(cls)
      .filter(
        cls.token_hash == hash_refresh_token(raw_token),
        cls.revoked.is_(False),
        cls.expires_at > datetime.now(timezone.utc),
      )
      .first()
    )

  @classmethod
  def revoke(cls, raw_token: str, session: Session) -> bool:
    """
    Revoke a single token.

    Returns:
        True if an active token was revoked
    """
    try:
      count = (
        session.query(cls)
        .filter(
          cls.token_hash == hash_refresh_token(raw_token),
          cls.revoked.is_(False),
        )
        .update({"revoked": True}, synchronize_session=False)
      )
      session.commit()
    except SQLAlchemyError as e:
      session.rollback()
      logger.error(f"Failed to revoke refresh token: {e}")
      raise

    return count > 0

  @classmethod
  def revoke_all_user_tokens(cls, user_id: int, session: Session) -> int:
    """Revoke every active token of a user and return how many were revoked."""
    try:
      count = (
        session.query(cls)
        .filter(cls.user_id == user_id, cls.revoked.is_(False))
        .update({"revoked": True}, synchronize_session=False)
      )
      session.commit()
    except SQLAlchemyError as e:
      session.rollback()
      logger.error(f"Failed to revoke refresh tokens: {e}")
      raise

    if count > 0:
      logger.info(f"Revoked {count} refresh tokens for user {user_id}")
    return count

  @classmethod
  def cleanup_expired_tokens(cls, session: Session) -> int:
    """Delete expired or revoked tokens."""
    try:
      count = (
        session.query(cls)
        .filter(
          (cls.expires_at <= datetime.now(timezone.utc)) | (cls.revoked.is_(True))
        )
        .delete(synchronize_session=False)
      )
      session.commit()
    except SQLAlchemyError as e:
      session.rollback()
      logger.error(f"Failed to clean up refresh tokens: {e}")
      raise

    if count > 0:
      logger.info(f"Cleaned up {count} refresh tokens")
    return count

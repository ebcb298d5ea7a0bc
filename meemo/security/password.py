"""
Password security utilities for Meemo.

Provides password validation, bcrypt hashing and verification.
"""

from dataclasses import dataclass, field
from typing import List

import bcrypt

from ..config import env
from ..config.constants import MIN_PASSWORD_LENGTH


@dataclass
class PasswordValidationResult:
  """Result of password validation."""

  is_valid: bool
  errors: List[str] = field(default_factory=list)


class PasswordSecurity:
  """bcrypt-backed password utilities."""

  MIN_LENGTH = MIN_PASSWORD_LENGTH
  # bcrypt only uses the first 72 bytes of input
  MAX_LENGTH = 72

  BCRYPT_ROUNDS = env.BCRYPT_ROUNDS

  @classmethod
  def validate_password(cls, password: str) -> PasswordValidationResult:
    """
    Validate password length requirements.

    Args:
        password: Password to validate

    Returns:
        PasswordValidationResult with validation details
    """
    errors = []

    if len(password) < cls.MIN_LENGTH:
      errors.append(f"Password must be at least {cls.MIN_LENGTH} characters long")

    if len(password.encode("utf-8")) > cls.MAX_LENGTH:
      errors.append(f"Password must not exceed {cls.MAX_LENGTH} bytes")

    if password and not password.strip():
      errors.append("Password must not be blank")

    return PasswordValidationResult(is_valid=not errors, errors=errors)

  @classmethod
  def hash_password(cls, password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password

    Returns:
        Bcrypt hash string
    """
    salt = bcrypt.gensalt(rounds=cls.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

  @classmethod
  def verify_password(cls, password: str, hashed: str) -> bool:
    """
    Verify a password against its bcrypt hash.

    Malformed hashes verify as False instead of raising.
    """
    try:
      return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except (ValueError, TypeError):
      return False

"""JWT token utilities.

Access tokens are stateless HS256 JWTs carrying the user id and email.
Refresh tokens are opaque random strings; their persistence lives in
``meemo.models.iam.refresh_token``.
"""

import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from ...config import env
from ...config.constants import REFRESH_TOKEN_CHARSET, REFRESH_TOKEN_LENGTH
from ...config.logging import get_logger
from ...exceptions import AuthenticationError, ConfigurationError, TokenExpiredError

logger = get_logger("meemo.security.jwt")

JWT_ALGORITHM = "HS256"


class JWTConfig:
  """JWT configuration management."""

  @staticmethod
  def get_jwt_secret() -> str:
    """Get JWT secret key."""
    secret = env.JWT_SECRET_KEY
    if not secret:
      raise ConfigurationError("JWT secret key is not set", "JWT_SECRET_KEY")
    return secret

  @staticmethod
  def access_token_ttl() -> timedelta:
    return timedelta(minutes=env.JWT_ACCESS_TOKEN_MINUTES)

  @staticmethod
  def refresh_token_ttl() -> timedelta:
    return timedelta(days=env.JWT_REFRESH_TOKEN_DAYS)


@dataclass(frozen=True)
class TokenClaims:
  """Identity extracted from a verified access token."""

  user_id: int
  email: str


@dataclass(frozen=True)
class TokenPair:
  access_token: str
  refresh_token: str
  expires_at: datetime

  @property
  def expires_in(self) -> int:
    """Seconds until the access token expires."""
    remaining = (self.expires_at - datetime.now(timezone.utc)).total_seconds()
    return max(int(remaining), 0)


def create_access_token(user_id: int, email: str) -> tuple[str, datetime]:
  """Create a signed access token.

  Args:
    user_id: The user ID to encode in the token
    email: The user's email

  Returns:
    Tuple of (encoded token, expiry instant)
  """
  secret_key = JWTConfig.get_jwt_secret()
  issued_at = datetime.now(timezone.utc)
  expires_at = issued_at + JWTConfig.access_token_ttl()

  payload = {
    "user_id": str(user_id),
    "email": email,
    "sub": str(user_id),
    "jti": str(uuid.uuid4()),
    "iat": issued_at,
    "exp": expires_at,
    "iss": env.JWT_ISSUER,
  }
  if env.JWT_AUDIENCE:
    payload["aud"] = env.JWT_AUDIENCE

  return jwt.encode(payload, secret_key, algorithm=JWT_ALGORITHM), expires_at


def generate_refresh_token() -> str:
  """Opaque refresh token drawn from a cryptographically secure source."""
  return "".join(
    secrets.choice(REFRESH_TOKEN_CHARSET) for _ in range(REFRESH_TOKEN_LENGTH)
  )


def generate_token_pair(user) -> TokenPair:
  """Issue an access token and a refresh token for a user."""
  access_token, expires_at = create_access_token(user.id, user.email)
  return TokenPair(
    access_token=access_token,
    refresh_token=generate_refresh_token(),
    expires_at=expires_at,
  )


def parse_access_token(token: str) -> TokenClaims:
  """Verify an access token and return its identity claims.

  Raises:
    TokenExpiredError: If the token is past its expiry
    AuthenticationError: If the signature, format or claims are invalid
  """
  if not token:
    raise AuthenticationError("Missing token")

  try:
    payload = jwt.decode(
      token,
      JWTConfig.get_jwt_secret(),
      algorithms=[JWT_ALGORITHM],
      issuer=env.JWT_ISSUER,
      audience=env.JWT_AUDIENCE or None,
      options={"require": ["exp", "iat", "sub"]},
    )
  except jwt.ExpiredSignatureError:
    logger.info("JWT token verification failed: token expired")
    raise TokenExpiredError("access")
  except jwt.InvalidTokenError as e:
    logger.info(f"JWT token verification failed: {type(e).__name__}")
    raise AuthenticationError("Invalid token")

  email = payload.get("email")
  try:
    user_id = int(payload.get("user_id"))
  except (TypeError, ValueError):
    raise AuthenticationError("Invalid token claims")

  if not isinstance(email, str) or not email:
    raise AuthenticationError("Invalid token claims")

  return TokenClaims(user_id=user_id, email=email)


def validate_access_token(token: str) -> bool:
  """Whether a token verifies, without raising."""
  try:
    parse_access_token(token)
  except (AuthenticationError, TokenExpiredError):
    return False
  return True

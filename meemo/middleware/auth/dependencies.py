"""
Authentication dependencies for FastAPI.

Identity comes only from verified access token claims; handlers never read
an owner identifier supplied by the client.
"""

from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from ...database import get_db_session
from ...exceptions import AuthenticationError, TokenExpiredError
from ...logger import log_auth_event
from ...models.iam import User
from .jwt import parse_access_token

BEARER_PREFIX = "Bearer "


def extract_bearer_token(request: Request) -> Optional[str]:
  """Access token from the Authorization header, with or without the Bearer prefix."""
  authorization = request.headers.get("authorization")
  if not authorization:
    return None
  if authorization.startswith(BEARER_PREFIX):
    return authorization[len(BEARER_PREFIX) :].strip() or None
  return authorization.strip() or None


def _unauthorized(detail: str) -> HTTPException:
  return HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail=detail,
    headers={"WWW-Authenticate": "Bearer"},
  )


async def get_current_user(
  request: Request,
  session: Session = Depends(get_db_session),
) -> User:
  """
  Get the authenticated user, raising an exception if authentication fails.

  Returns:
      User: The authenticated user.

  Raises:
      HTTPException: 401 if the token is missing, invalid, expired, or
      names a user that no longer exists.
  """
  client_ip = request.client.host if request.client else None
  token = extract_bearer_token(request)
  if not token:
    raise _unauthorized("Authorization header is required")

  try:
    claims = parse_access_token(token)
  except TokenExpiredError:
    log_auth_event("access_token", ip_address=client_ip, success=False)
    raise _unauthorized("Token has expired")
  except AuthenticationError:
    log_auth_event("access_token", ip_address=client_ip, success=False)
    raise _unauthorized("Invalid or expired token")

  user = User.get_by_id(claims.user_id, session)
  if user is None or user.email != claims.email:
    log_auth_event(
      "access_token",
      user_id=str(claims.user_id),
      ip_address=client_ip,
      success=False,
      metadata={"reason": "user_not_found"},
    )
    raise _unauthorized("Invalid or expired token")

  request.state.user_id = user.id
  return user

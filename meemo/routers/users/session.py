"""Session management endpoints (me, refresh, logout)."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ...database import get_db_session
from ...exceptions import MeemoError
from ...middleware.auth.dependencies import extract_bearer_token, get_current_user
from ...models.api.auth import (
  LogoutRequest,
  LogoutResponse,
  RefreshRequest,
  TokenResponse,
  UserInfoResponse,
)
from ...models.api.common import ErrorResponse
from ...models.iam import User
from ...operations.users import AuthService
from ..utils import client_ip, http_error

router = APIRouter()


@router.get(
  "/me",
  response_model=UserInfoResponse,
  summary="Get Current User",
  description="Get the currently authenticated user.",
  operation_id="getCurrentUser",
  responses={
    401: {"model": ErrorResponse, "description": "Not authenticated"},
  },
)
async def get_me(current_user: User = Depends(get_current_user)) -> UserInfoResponse:
  return UserInfoResponse.model_validate(current_user)


@router.post(
  "/refresh",
  response_model=TokenResponse,
  summary="Refresh Session",
  description="Exchange a refresh token for a new token pair. The presented refresh token is revoked.",
  operation_id="refreshSession",
  responses={
    401: {"model": ErrorResponse, "description": "Invalid or expired refresh token"},
  },
)
async def refresh_session(
  request: RefreshRequest,
  fastapi_request: Request,
  session: Session = Depends(get_db_session),
) -> TokenResponse:
  try:
    user, pair = AuthService(session).refresh(
      request.refresh_token, ip_address=client_ip(fastapi_request)
    )
  except MeemoError as e:
    raise http_error(e, "users", "refresh") from e

  return TokenResponse.from_pair(pair, user)


@router.post(
  "/logout",
  response_model=LogoutResponse,
  summary="User Logout",
  description="Revoke refresh tokens. An access token (body or Authorization header) revokes all of the user's refresh tokens.",
  operation_id="logoutUser",
)
async def logout(
  request: LogoutRequest,
  fastapi_request: Request,
  session: Session = Depends(get_db_session),
) -> LogoutResponse:
  access_token = request.access_token or extract_bearer_token(fastapi_request)
  try:
    revoked = AuthService(session).logout(
      refresh_token=request.refresh_token,
      access_token=access_token,
      ip_address=client_ip(fastapi_request),
    )
  except MeemoError as e:
    raise http_error(e, "users", "logout") from e

  return LogoutResponse(message="Logged out", revoked_tokens=revoked)

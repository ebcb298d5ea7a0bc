"""User login endpoint."""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from ...database import get_db_session
from ...exceptions import MeemoError
from ...models.api.auth import LoginRequest, TokenResponse
from ...models.api.common import ErrorResponse
from ...operations.users import AuthService
from ..utils import client_ip, http_error

router = APIRouter()


@router.post(
  "/login",
  response_model=TokenResponse,
  status_code=status.HTTP_200_OK,
  summary="User Login",
  description="Authenticate user with email and password.",
  operation_id="loginUser",
  responses={
    401: {"model": ErrorResponse, "description": "Invalid credentials"},
  },
)
async def login(
  request: LoginRequest,
  fastapi_request: Request,
  session: Session = Depends(get_db_session),
) -> TokenResponse:
  """
  Authenticate user with email and password.

  Raises:
      HTTPException: If credentials are invalid
  """
  try:
    user, pair = AuthService(session).login(
      request.email, request.password, ip_address=client_ip(fastapi_request)
    )
  except MeemoError as e:
    raise http_error(e, "users", "login") from e

  return TokenResponse.from_pair(pair, user)

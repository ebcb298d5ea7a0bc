"""User registration endpoint."""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from ...database import get_db_session
from ...exceptions import MeemoError
from ...models.api.auth import RegisterRequest, TokenResponse
from ...models.api.common import ErrorResponse
from ...operations.users import AuthService
from ..utils import client_ip, http_error

router = APIRouter()


@router.post(
  "/register",
  response_model=TokenResponse,
  status_code=status.HTTP_201_CREATED,
  summary="Register New User",
  description="Create a user account and return an access and refresh token pair.",
  operation_id="registerUser",
  responses={
    403: {"model": ErrorResponse, "description": "Registration disabled"},
    409: {"model": ErrorResponse, "description": "Email already registered"},
    422: {"model": ErrorResponse, "description": "Invalid request data"},
  },
)
async def register(
  request: RegisterRequest,
  fastapi_request: Request,
  session: Session = Depends(get_db_session),
) -> TokenResponse:
  """
  Register a new user account.

  Raises:
      HTTPException: 403 when registration is disabled, 409 when the email
      is taken
  """
  try:
    user, pair = AuthService(session).register(
      first_name=request.first_name,
      last_name=request.last_name,
      email=request.email,
      password=request.password,
      ip_address=client_ip(fastapi_request),
    )
  except MeemoError as e:
    raise http_error(e, "users", "register") from e

  return TokenResponse.from_pair(pair, user)

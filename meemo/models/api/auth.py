"""Authentication API models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from ...security.password import PasswordSecurity


class LoginRequest(BaseModel):
  """Login request model."""

  email: EmailStr = Field(..., description="User's email address")
  password: str = Field(..., min_length=1, description="User's password")


class RegisterRequest(BaseModel):
  """Registration request model."""

  first_name: str = Field(
    ..., min_length=1, max_length=100, description="User's first name"
  )
  last_name: str = Field(
    ..., min_length=1, max_length=100, description="User's last name"
  )
  email: EmailStr = Field(..., description="User's email address")
  password: str = Field(
    ...,
    min_length=PasswordSecurity.MIN_LENGTH,
    description="User's password",
  )

  @field_validator("password")
  def validate_password_strength(cls, v: str) -> str:
    """Validate password meets length requirements."""
    result = PasswordSecurity.validate_password(v)

    if not result.is_valid:
      raise ValueError("; ".join(result.errors))

    return v


class RefreshRequest(BaseModel):
  """Refresh token exchange request."""

  refresh_token: str = Field(..., min_length=1, description="Opaque refresh token")


class LogoutRequest(BaseModel):
  """
  Logout request.

  With ``access_token`` every refresh token of the user is revoked;
  otherwise only ``refresh_token`` is.
  """

  refresh_token: str | None = Field(None, description="Refresh token to revoke")
  access_token: str | None = Field(
    None, description="Access token identifying a user whose tokens are all revoked"
  )


class UserInfoResponse(BaseModel):
  """Public view of a user account."""

  model_config = ConfigDict(from_attributes=True)

  id: int = Field(..., description="User ID")
  first_name: str = Field(..., description="First name")
  last_name: str = Field(..., description="Last name")
  email: str = Field(..., description="Email address")
  created_at: datetime = Field(..., description="Account creation time")


class TokenResponse(BaseModel):
  """Authentication response carrying a token pair."""

  access_token: str = Field(..., description="JWT access token")
  refresh_token: str = Field(..., description="Opaque refresh token")
  token_type: str = Field("bearer", description="Authorization scheme")
  expires_in: int = Field(..., description="Access token lifetime in seconds")
  expires_at: datetime = Field(..., description="Access token expiry instant")
  user: UserInfoResponse | None = Field(None, description="Authenticated user")

  @classmethod
  def from_pair(cls, pair, user=None) -> "TokenResponse":
    return cls(
      access_token=pair.access_token,
      refresh_token=pair.refresh_token,
      expires_in=pair.expires_in,
      expires_at=pair.expires_at,
      user=UserInfoResponse.model_validate(user) if user is not None else None,
    )


class LogoutResponse(BaseModel):
  message: str = Field(..., description="Result message")
  revoked_tokens: int = Field(..., description="Number of refresh tokens revoked")

"""Account registration, login and refresh token lifecycle."""

from typing import Optional

from sqlalchemy.orm import Session

from ...config import env
from ...exceptions import (
  AuthenticationError,
  EntityValidationError,
  RegistrationDisabledError,
  TokenExpiredError,
)
from ...logger import log_auth_event, logger
from ...middleware.auth.jwt import (
  JWTConfig,
  TokenPair,
  generate_token_pair,
  parse_access_token,
)
from ...models.iam import RefreshToken, User
from ...security import PasswordSecurity


class AuthService:
  """Service class for credential checks and token issuance."""

  def __init__(self, session: Session):
    self.session = session

  def hash_password(self, user: User, plaintext: str) -> User:
    """Hash ``plaintext`` and store it as the user's password."""
    user.update(self.session, password_hash=PasswordSecurity.hash_password(plaintext))
    return user

  def issue_tokens(self, user: User) -> TokenPair:
    """Issue a token pair and persist the refresh half."""
    pair = generate_token_pair(user)
    RefreshToken.create(
      user.id, pair.refresh_token, JWTConfig.refresh_token_ttl(), self.session
    )
    return pair

  def register(
    self,
    first_name: str,
    last_name: str,
    email: str,
    password: str,
    ip_address: Optional[str] = None,
  ) -> tuple[User, TokenPair]:
    """
    Create an account and sign it in.

    Raises:
        RegistrationDisabledError: If registration is switched off
        EntityValidationError: If the password is unacceptable
        DuplicateEntityError: If the email is already registered
    """
    if not env.USER_REGISTRATION_ENABLED:
      log_auth_event(
        "register",
        ip_address=ip_address,
        success=False,
        metadata={"reason": "registration_disabled"},
      )
      raise RegistrationDisabledError()

    validation = PasswordSecurity.validate_password(password)
    if not validation.is_valid:
      raise EntityValidationError("; ".join(validation.errors), field="password")

    user = User.create(
      first_name=first_name,
      last_name=last_name,
      email=email,
      password_hash=PasswordSecurity.hash_password(password),
      session=self.session,
    )
    log_auth_event("register", user_id=str(user.id), ip_address=ip_address)
    return user, self.issue_tokens(user)

  def login(
    self, email: str, password: str, ip_address: Optional[str] = None
  ) -> tuple[User, TokenPair]:
    """
    Authenticate with email and password.

    Unknown emails and wrong passwords fail identically.

    Raises:
        AuthenticationError: If the credentials do not match
    """
    user = User.find_by_email(email, self.session)
    if user is None or not PasswordSecurity.verify_password(
      password, user.password_hash
    ):
      log_auth_event(
        "login",
        user_id=str(user.id) if user else None,
        ip_address=ip_address,
        success=False,
      )
      raise AuthenticationError("Invalid email or password")

    log_auth_event("login", user_id=str(user.id), ip_address=ip_address)
    return user, self.issue_tokens(user)

  def refresh(
    self, raw_refresh_token: str, ip_address: Optional[str] = None
  ) -> tuple[User, TokenPair]:
    """
    Exchange a refresh token for a new pair.

    The presented token is revoked, so each refresh token works once.

    Raises:
        AuthenticationError: If the token is unknown, revoked or expired
    """
    stored = RefreshToken.find_valid(raw_refresh_token, self.session)
    user = User.get_by_id(stored.user_id, self.session) if stored else None
    if user is None:
      log_auth_event("refresh", ip_address=ip_address, success=False)
      raise AuthenticationError("Invalid or expired refresh token")

    RefreshToken.revoke(raw_refresh_token, self.session)
    log_auth_event("refresh", user_id=str(user.id), ip_address=ip_address)
    return user, self.issue_tokens(user)

  def logout(
    self,
    refresh_token: Optional[str] = None,
    access_token: Optional[str] = None,
    ip_address: Optional[str] = None,
  ) -> int:
    """
    Revoke refresh tokens.

    A valid access token revokes every token of its user; otherwise only
    the presented refresh token is revoked.

    Returns:
        Number of tokens revoked
    """
    if access_token:
      try:
        claims = parse_access_token(access_token)
      except (AuthenticationError, TokenExpiredError):
        claims = None
      if claims is not None:
        count = RefreshToken.revoke_all_user_tokens(claims.user_id, self.session)
        log_auth_event("logout", user_id=str(claims.user_id), ip_address=ip_address)
        return count

    if refresh_token and RefreshToken.revoke(refresh_token, self.session):
      log_auth_event("logout", ip_address=ip_address)
      return 1

    logger.debug("Logout revoked no tokens")
    return 0

"""Authentication module initialization."""

from .dependencies import extract_bearer_token, get_current_user
from .jwt import (
  TokenClaims,
  TokenPair,
  generate_token_pair,
  parse_access_token,
  validate_access_token,
)

__all__ = [
  "TokenClaims",
  "TokenPair",
  "extract_bearer_token",
  "generate_token_pair",
  "get_current_user",
  "parse_access_token",
  "validate_access_token",
]

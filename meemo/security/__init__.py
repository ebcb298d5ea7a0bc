"""
Security utilities for Meemo.

- Password hashing and verification (password.py)
"""

from .password import PasswordSecurity

__all__ = ["PasswordSecurity"]

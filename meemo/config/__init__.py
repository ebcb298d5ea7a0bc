"""
Centralized configuration package for the Meemo file storage service.
"""

from .env import EnvConfig, env

__all__ = [
  "EnvConfig",
  "env",
]

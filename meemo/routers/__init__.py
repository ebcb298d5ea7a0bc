"""
API v1 routers.
"""

from fastapi import APIRouter

from .files import router as files_router
from .status import router as status_router
from .users import router as users_router

API_PREFIX = "/api/v1"

router = APIRouter(prefix=API_PREFIX)
router.include_router(users_router)
router.include_router(files_router)
router.include_router(status_router)

__all__ = ["API_PREFIX", "router"]

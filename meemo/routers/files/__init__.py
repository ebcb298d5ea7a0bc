"""File router module."""

from fastapi import APIRouter

from .content import router as content_router
from .management import router as management_router
from .metadata import router as metadata_router

router = APIRouter(tags=["Files"])

# Fixed paths (/storage, /rename, ...) register before /{original_name}
router.include_router(metadata_router, prefix="/files")
router.include_router(management_router, prefix="/files")
router.include_router(content_router, prefix="/files")

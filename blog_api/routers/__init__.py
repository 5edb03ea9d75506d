"""
API router module
"""

from fastapi import APIRouter
from .auth import router as auth_router
from .blogs import router as blogs_router
from .categories import router as categories_router
from .tags import router as tags_router

router = APIRouter()

router.include_router(auth_router)
router.include_router(blogs_router)
router.include_router(categories_router)
router.include_router(tags_router)

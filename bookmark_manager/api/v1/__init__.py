"""API v1 routes."""

from fastapi import APIRouter

from bookmark_manager.api.v1 import auth, health, settings

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(settings.router, prefix="/settings", tags=["settings"])

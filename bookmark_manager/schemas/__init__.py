"""Pydantic request/response schemas."""

from bookmark_manager.schemas.auth import (
    LoginEntryResponse,
    LoginRequest,
    LogoutResponse,
    RegisterRequest,
    SessionResponse,
    UserListItem,
    UsersListResponse,
)
from bookmark_manager.schemas.health import HealthResponse
from bookmark_manager.schemas.settings import (
    SettingsResponse,
    SettingsUpdate,
    WallpaperResponse,
    WallpaperUpdate,
)

__all__ = [
    "HealthResponse",
    "LoginEntryResponse",
    "LoginRequest",
    "LogoutResponse",
    "RegisterRequest",
    "SessionResponse",
    "SettingsResponse",
    "SettingsUpdate",
    "UserListItem",
    "UsersListResponse",
    "WallpaperResponse",
    "WallpaperUpdate",
]

"""Request/response schemas for per-user display settings."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from bookmark_manager.models.user_settings import BOOKMARKS_PER_PAGE_MAX, BOOKMARKS_PER_PAGE_MIN

Theme = Literal["light", "dark", "auto"]
Layout = Literal["grid", "list"]


class SettingsResponse(BaseModel):
    """Current settings of the authenticated user."""

    model_config = ConfigDict(from_attributes=True)

    wallpaper: str
    theme: Theme
    language: str
    layout: Layout
    bookmarks_per_page: int = Field(serialization_alias="bookmarksPerPage")
    custom_css: str = Field(serialization_alias="customCSS")
    updated_at: datetime | None = Field(default=None, serialization_alias="updatedAt")


class SettingsUpdate(BaseModel):
    """Partial update; omitted or null fields keep their current value."""

    model_config = ConfigDict(populate_by_name=True)

    wallpaper: str | None = Field(default=None, min_length=1, max_length=1024)
    theme: Theme | None = None
    language: str | None = Field(default=None, min_length=1, max_length=16)
    layout: Layout | None = None
    bookmarks_per_page: int | None = Field(
        default=None,
        ge=BOOKMARKS_PER_PAGE_MIN,
        le=BOOKMARKS_PER_PAGE_MAX,
        alias="bookmarksPerPage",
        description="Bookmarks shown per page (5-100)",
    )
    custom_css: str | None = Field(default=None, max_length=20000, alias="customCSS")


class WallpaperUpdate(BaseModel):
    """New wallpaper reference. Emptiness is checked by the settings store."""

    wallpaper: str = Field(default="", max_length=1024, description="Wallpaper URL or path")


class WallpaperResponse(BaseModel):
    message: str = "Wallpaper updated"
    wallpaper: str

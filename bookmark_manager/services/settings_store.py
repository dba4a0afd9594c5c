"""Settings store: per-user display preferences, created with defaults on first access."""

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bookmark_manager.models.user_settings import (
    BOOKMARKS_PER_PAGE_MAX,
    BOOKMARKS_PER_PAGE_MIN,
    LAYOUTS,
    THEMES,
    UserSettings,
)
from bookmark_manager.services.credential_store import connectivity_guard, rollback_quietly
from bookmark_manager.services.errors import ValidationError

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset(
    {"wallpaper", "theme", "language", "layout", "bookmarks_per_page", "custom_css"}
)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _check(changes: dict[str, Any]) -> None:
    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise ValidationError(f"Unknown setting: {sorted(unknown)[0]}")
    if "theme" in changes and changes["theme"] not in THEMES:
        raise ValidationError("Theme must be one of: light, dark, auto.", field="theme")
    if "layout" in changes and changes["layout"] not in LAYOUTS:
        raise ValidationError("Layout must be grid or list.", field="layout")
    if "bookmarks_per_page" in changes:
        per_page = changes["bookmarks_per_page"]
        if not BOOKMARKS_PER_PAGE_MIN <= per_page <= BOOKMARKS_PER_PAGE_MAX:
            raise ValidationError(
                f"Bookmarks per page must be between {BOOKMARKS_PER_PAGE_MIN} "
                f"and {BOOKMARKS_PER_PAGE_MAX}.",
                field="bookmarks_per_page",
            )


class SettingsStore:
    """
    SQLAlchemy-backed settings store bound to one DB session.

    Every write sets updated_at from the injected clock.
    """

    def __init__(self, db: Session, clock: Callable[[], datetime] = _utcnow) -> None:
        self.db = db
        self._clock = clock

    def get(self, user_id: int) -> UserSettings | None:
        with connectivity_guard(self.db):
            return self.db.query(UserSettings).filter(UserSettings.user_id == user_id).first()

    def get_or_create(self, user_id: int) -> UserSettings:
        existing = self.get(user_id)
        if existing is not None:
            return existing
        with connectivity_guard(self.db):
            row = UserSettings(user_id=user_id, updated_at=self._clock())
            self.db.add(row)
            try:
                self.db.commit()
            except IntegrityError:
                # A concurrent request created the row first.
                rollback_quietly(self.db)
                return self.db.query(UserSettings).filter(UserSettings.user_id == user_id).one()
            self.db.refresh(row)
            logger.info("Default settings created for user_id=%s", user_id)
            return row

    def update(self, user_id: int, **changes: Any) -> UserSettings:
        """Apply the given fields and touch updated_at, even when nothing changed."""
        _check(changes)
        row = self.get_or_create(user_id)
        with connectivity_guard(self.db):
            for name, value in changes.items():
                setattr(row, name, value)
            row.updated_at = self._clock()
            self.db.commit()
            self.db.refresh(row)
            return row

    def update_wallpaper(self, user_id: int, wallpaper: str | None) -> UserSettings:
        wallpaper = (wallpaper or "").strip()
        if not wallpaper:
            raise ValidationError("Wallpaper URL is required.", field="wallpaper")
        return self.update(user_id, wallpaper=wallpaper)

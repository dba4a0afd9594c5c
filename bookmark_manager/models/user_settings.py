"""ORM model for per-user display settings (theme, layout, wallpaper)."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func

from bookmark_manager.models.base import Base

THEMES = ("light", "dark", "auto")
LAYOUTS = ("grid", "list")

DEFAULT_WALLPAPER = "/images/default-wallpaper.jpg"
DEFAULT_THEME = "dark"
DEFAULT_LANGUAGE = "zh-TW"
DEFAULT_LAYOUT = "grid"
DEFAULT_BOOKMARKS_PER_PAGE = 20
BOOKMARKS_PER_PAGE_MIN = 5
BOOKMARKS_PER_PAGE_MAX = 100


class UserSettings(Base):
    """
    Display preferences, at most one row per user.

    Rows are created lazily with the defaults the first time a user's
    settings are read or written.
    """

    __tablename__ = "user_settings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    wallpaper = Column(String(1024), nullable=False, default=DEFAULT_WALLPAPER)
    theme = Column(String(16), nullable=False, default=DEFAULT_THEME)
    language = Column(String(16), nullable=False, default=DEFAULT_LANGUAGE)
    layout = Column(String(16), nullable=False, default=DEFAULT_LAYOUT)
    bookmarks_per_page = Column(Integer, nullable=False, default=DEFAULT_BOOKMARKS_PER_PAGE)
    custom_css = Column(Text, nullable=False, default="")
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<UserSettings user_id={self.user_id} theme={self.theme!r} layout={self.layout!r}>"

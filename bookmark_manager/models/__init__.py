"""SQLAlchemy ORM models."""

from bookmark_manager.models.base import Base
from bookmark_manager.models.user import ROLE_ADMIN, ROLE_USER, User
from bookmark_manager.models.user_settings import UserSettings

__all__ = ["Base", "ROLE_ADMIN", "ROLE_USER", "User", "UserSettings"]

"""ORM model for application users (credentials, role and profile)."""

from sqlalchemy import Column, DateTime, Integer, String, func
from sqlalchemy.orm import validates

from bookmark_manager.core.security import ensure_password_hash
from bookmark_manager.models.base import Base

ROLE_USER = "user"
ROLE_ADMIN = "admin"


class User(Base):
    """
    User account for session authentication and role-based access control.

    role: 'admin' or 'user'. password_hash only ever holds a bcrypt hash:
    assigning a plain password hashes it, assigning an existing hash keeps it.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(30), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default=ROLE_USER)
    display_name = Column(String(100), nullable=True)
    avatar_ref = Column(String(1024), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    last_login = Column(DateTime(timezone=True), nullable=True)
    login_count = Column(Integer, nullable=False, default=0, server_default="0")

    @validates("password_hash")
    def _hash_plain_password(self, key: str, value: str) -> str:
        return ensure_password_hash(value)

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r} role={self.role!r}>"

"""Credential store: durable lookup and creation of User records."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from bookmark_manager.models import ROLE_USER, User
from bookmark_manager.services.errors import DuplicateUsername, StoreUnavailable

logger = logging.getLogger(__name__)


@contextmanager
def connectivity_guard(db: Session) -> Iterator[None]:
    """Turn connection-level database errors into StoreUnavailable."""
    try:
        yield
    except (OperationalError, InterfaceError) as e:
        rollback_quietly(db)
        logger.warning("Database unreachable: %s", e.__class__.__name__)
        raise StoreUnavailable() from e


def rollback_quietly(db: Session) -> None:
    try:
        db.rollback()
    except SQLAlchemyError:
        logger.debug("Rollback failed on a broken connection", exc_info=True)


class CredentialStore:
    """
    SQLAlchemy-backed user store bound to one DB session.

    Connectivity failures surface as StoreUnavailable; a unique-index
    violation on username surfaces as DuplicateUsername.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def find_by_username(self, username: str) -> User | None:
        with connectivity_guard(self.db):
            return self.db.query(User).filter(User.username == username).first()

    def get_by_id(self, user_id: int) -> User | None:
        with connectivity_guard(self.db):
            return self.db.query(User).filter(User.id == user_id).first()

    def list_users(self) -> list[User]:
        with connectivity_guard(self.db):
            return self.db.query(User).order_by(User.id).all()

    def create(
        self,
        username: str,
        password_hash: str,
        role: str = ROLE_USER,
        display_name: str | None = None,
    ) -> User:
        """Insert a user; the unique index on username decides races."""
        with connectivity_guard(self.db):
            user = User(
                username=username,
                password_hash=password_hash,
                role=role,
                display_name=display_name,
            )
            self.db.add(user)
            try:
                self.db.commit()
            except IntegrityError as e:
                rollback_quietly(self.db)
                raise DuplicateUsername(username) from e
            self.db.refresh(user)
            return user

    def update_last_login(self, user_id: int) -> None:
        """Bump login_count and last_login in one UPDATE statement."""
        with connectivity_guard(self.db):
            self.db.execute(
                update(User)
                .where(User.id == user_id)
                .values(login_count=User.login_count + 1, last_login=func.now())
                .execution_options(synchronize_session=False)
            )
            self.db.commit()

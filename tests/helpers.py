"""Shared test fixtures: in-memory SQLite credential store and fast bcrypt."""

from unittest.mock import patch

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from bookmark_manager.models import Base

ADMIN_USERNAME = "UEMH-CHAN"
ADMIN_PASSWORD = "041018"


def make_session_factory() -> sessionmaker:
    """One shared in-memory database per call, usable from worker threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def fast_bcrypt():
    """Patch the bcrypt cost down to the minimum; hashes stay valid bcrypt."""
    return patch("bookmark_manager.core.security.BCRYPT_ROUNDS", 4)

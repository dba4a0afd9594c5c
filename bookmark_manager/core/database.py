"""Database connection, session management and store reachability tracking."""

import asyncio
import logging
import threading
import time
from collections.abc import Callable, Generator
from typing import Protocol

from sqlalchemy import Engine, create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from starlette.concurrency import run_in_threadpool

from bookmark_manager.core.config import settings

logger = logging.getLogger(__name__)


def build_engine(url: str, echo: bool = False) -> Engine:
    """Create an engine; SQLite connections are shared across the worker threads."""
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(
        url,
        pool_pre_ping=True,
        echo=echo,
        connect_args=connect_args,
    )


engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Dependency that yields a DB session and closes it when done."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_db_connected(db: Session) -> bool:
    """Run a trivial query to verify the database is reachable."""
    try:
        db.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError:
        return False


class StoreAvailability(Protocol):
    """Reachability of the credential store, injected into the auth service."""

    def probe(self) -> bool: ...

    def is_available(self) -> bool: ...

    def mark_unavailable(self) -> None: ...


class StaticAvailability:
    """Fixed reachability answer (tests and offline tooling)."""

    def __init__(self, available: bool = True) -> None:
        self.available = available

    def probe(self) -> bool:
        return self.available

    def is_available(self) -> bool:
        return self.available

    def mark_unavailable(self) -> None:
        pass


class DatabaseMonitor:
    """
    Tracks whether the database answers a trivial query.

    A probe result is reused for recheck_interval seconds so a login does not
    pay an extra round-trip; mark_unavailable() records a failure observed
    by a caller and holds it for the same interval.
    """

    def __init__(
        self,
        bind: Engine,
        recheck_interval: float = 5.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._engine = bind
        self._recheck_interval = recheck_interval
        self._clock = clock
        self._lock = threading.Lock()
        self._available: bool | None = None
        self._checked_at = 0.0

    def probe(self) -> bool:
        """Query the database now and record the result."""
        with Session(self._engine) as db:
            ok = check_db_connected(db)
        self._record(ok)
        return ok

    def is_available(self) -> bool:
        with self._lock:
            fresh = (
                self._available is not None
                and self._clock() - self._checked_at < self._recheck_interval
            )
            if fresh:
                return bool(self._available)
        return self.probe()

    def mark_unavailable(self) -> None:
        self._record(False)

    def _record(self, ok: bool) -> None:
        with self._lock:
            previous = self._available
            self._available = ok
            self._checked_at = self._clock()
        if previous is not None and previous != ok:
            if ok:
                logger.info("Database connection restored")
            else:
                logger.warning("Database connection lost")


async def connect_with_retry(
    monitor: StoreAvailability,
    max_retries: int,
    base_delay: float,
) -> bool:
    """
    Probe the database until it answers or max_retries attempts are used.

    Attempt N is followed by a pause of base_delay * N seconds. Returns True
    once connected; False means the app keeps serving in offline mode.
    """
    for attempt in range(1, max_retries + 1):
        logger.info("Connecting to database (attempt %s/%s)", attempt, max_retries)
        if await run_in_threadpool(monitor.probe):
            logger.info("Database connected")
            return True
        if attempt < max_retries:
            delay = base_delay * attempt
            logger.warning(
                "Database connection failed (attempt %s/%s); retrying in %.1fs",
                attempt,
                max_retries,
                delay,
            )
            await asyncio.sleep(delay)
    logger.warning(
        "Database unreachable after %s attempts; running in offline mode "
        "(only the default administrator can log in)",
        max_retries,
    )
    return False

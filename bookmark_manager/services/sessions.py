"""Server-side session records referenced by an opaque cookie token."""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from bookmark_manager.core.security import generate_session_token

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TTL = timedelta(hours=24)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class AuthSession:
    """Authenticated actor: user id plus a snapshot of the identity fields."""

    token: str
    user_id: int
    username: str
    role: str
    display_name: str | None
    created_at: datetime
    expires_at: datetime
    offline: bool = False

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class SessionStore:
    """
    In-process session table keyed by token.

    A session expires ttl after it is written. Expired entries
    read as absent and are dropped on access or by purge_expired().
    """

    def __init__(
        self,
        ttl: timedelta = DEFAULT_SESSION_TTL,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.ttl = ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._sessions: dict[str, AuthSession] = {}

    def create(
        self,
        user_id: int,
        username: str,
        role: str,
        display_name: str | None = None,
        offline: bool = False,
    ) -> AuthSession:
        now = self._clock()
        session = AuthSession(
            token=generate_session_token(),
            user_id=user_id,
            username=username,
            role=role,
            display_name=display_name,
            created_at=now,
            expires_at=now + self.ttl,
            offline=offline,
        )
        with self._lock:
            self._sessions[session.token] = session
        return session

    def get(self, token: str | None) -> AuthSession | None:
        if not token:
            return None
        now = self._clock()
        with self._lock:
            session = self._sessions.get(token)
            if session is None:
                return None
            if session.is_expired(now):
                del self._sessions[token]
                return None
            return session

    def destroy(self, token: str) -> bool:
        """Remove a session; returns whether one existed."""
        with self._lock:
            return self._sessions.pop(token, None) is not None

    def purge_expired(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [t for t, s in self._sessions.items() if s.is_expired(now)]
            for token in expired:
                del self._sessions[token]
        if expired:
            logger.info("Purged %s expired sessions", len(expired))
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

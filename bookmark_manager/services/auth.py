"""Authentication flow: login, registration and logout."""

import logging
from functools import lru_cache

from sqlalchemy.exc import SQLAlchemyError

from bookmark_manager.core.database import StoreAvailability
from bookmark_manager.core.security import (
    PASSWORD_MAX_BYTES,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
    hash_password,
    password_too_long,
    verify_password,
)
from bookmark_manager.models import ROLE_ADMIN, ROLE_USER, User
from bookmark_manager.services.bootstrap import OFFLINE_ADMIN_USER_ID, OfflineAdmin
from bookmark_manager.services.credential_store import CredentialStore
from bookmark_manager.services.errors import (
    DuplicateUsername,
    InvalidCredentials,
    InvalidInput,
    StoreUnavailable,
    ValidationError,
)
from bookmark_manager.services.sessions import AuthSession, SessionStore

logger = logging.getLogger(__name__)


@lru_cache
def _timing_hash() -> str:
    """Hash compared against when the username is unknown, so both paths cost one bcrypt check."""
    return hash_password("timing-equalizer")


class AuthService:
    """
    Validates credentials and manages session lifecycle for one request.

    When availability reports the store unreachable (or a lookup fails to
    connect) login only accepts the offline administrator; pass
    offline_admin=None to fail closed instead.
    """

    def __init__(
        self,
        store: CredentialStore,
        sessions: SessionStore,
        availability: StoreAvailability,
        offline_admin: OfflineAdmin | None = None,
    ) -> None:
        self.store = store
        self.sessions = sessions
        self.availability = availability
        self.offline_admin = offline_admin

    def login(self, username: str | None, password: str | None) -> AuthSession:
        if not username or not username.strip() or not password:
            raise InvalidInput("Username and password are required.")
        username = username.strip()

        if not self.availability.is_available():
            return self._offline_login(username, password)
        try:
            user = self.store.find_by_username(username)
        except StoreUnavailable:
            self.availability.mark_unavailable()
            return self._offline_login(username, password)

        if user is None:
            verify_password(password, _timing_hash())
            logger.warning("Failed login for username=%s", username)
            raise InvalidCredentials()
        if not verify_password(password, user.password_hash):
            logger.warning("Failed login for username=%s", username)
            raise InvalidCredentials()

        session = self._start_session(user)
        self._record_login(user.id)
        logger.info("User logged in: %s", user.username)
        return session

    def register(
        self,
        username: str | None,
        password: str | None,
        confirm_password: str | None,
    ) -> AuthSession:
        if not username or not username.strip() or not password or not confirm_password:
            raise InvalidInput("All fields are required.")
        username = username.strip()
        validate_registration(username, password, confirm_password)

        if not self.availability.is_available():
            raise StoreUnavailable()
        try:
            if self.store.find_by_username(username) is not None:
                raise DuplicateUsername(username)
            user = self.store.create(
                username=username,
                password_hash=hash_password(password),
                role=ROLE_USER,
            )
        except StoreUnavailable:
            self.availability.mark_unavailable()
            raise

        session = self._start_session(user)
        logger.info("User registered: %s", user.username)
        return session

    def logout(self, token: str | None) -> None:
        """Destroy the session. Never raises."""
        if not token:
            return
        try:
            session = self.sessions.get(token)
            self.sessions.destroy(token)
        except Exception:
            logger.exception("Session destroy failed during logout")
            return
        if session is not None:
            logger.info("User logged out: %s", session.username)

    def _start_session(self, user: User) -> AuthSession:
        return self.sessions.create(
            user_id=user.id,
            username=user.username,
            role=user.role,
            display_name=user.display_name,
        )

    def _record_login(self, user_id: int) -> None:
        try:
            self.store.update_last_login(user_id)
        except (StoreUnavailable, SQLAlchemyError):
            logger.warning("Could not record last login for user_id=%s", user_id, exc_info=True)

    def _offline_login(self, username: str, password: str) -> AuthSession:
        if self.offline_admin is None or not self.offline_admin.matches(username, password):
            logger.warning("Failed login for username=%s (credential store unavailable)", username)
            raise InvalidCredentials()
        logger.warning("Credential store unavailable; offline login for %s", username)
        return self.sessions.create(
            user_id=OFFLINE_ADMIN_USER_ID,
            username=self.offline_admin.username,
            role=ROLE_ADMIN,
            offline=True,
        )


def validate_registration(username: str, password: str, confirm_password: str) -> None:
    if password != confirm_password:
        raise ValidationError("Passwords do not match.", field="confirm_password")
    if len(password) < PASSWORD_MIN_LEN:
        raise ValidationError(
            f"Password must be at least {PASSWORD_MIN_LEN} characters.", field="password"
        )
    if password_too_long(password):
        raise ValidationError(
            f"Password must be at most {PASSWORD_MAX_BYTES} bytes.", field="password"
        )
    if len(username) < USERNAME_MIN_LEN:
        raise ValidationError(
            f"Username must be at least {USERNAME_MIN_LEN} characters.", field="username"
        )
    if len(username) > USERNAME_MAX_LEN:
        raise ValidationError(
            f"Username must be at most {USERNAME_MAX_LEN} characters.", field="username"
        )

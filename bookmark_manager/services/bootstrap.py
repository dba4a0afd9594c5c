"""Default administrator: one-time creation at startup and the offline login fallback."""

import logging
from typing import TYPE_CHECKING

from bookmark_manager.core.security import hash_password, verify_password
from bookmark_manager.models import ROLE_ADMIN
from bookmark_manager.services.credential_store import CredentialStore
from bookmark_manager.services.errors import DuplicateUsername

if TYPE_CHECKING:
    from bookmark_manager.core.config import Settings

logger = logging.getLogger(__name__)

# Session user_id for the offline administrator; never a real row id.
OFFLINE_ADMIN_USER_ID = 0


class OfflineAdmin:
    """
    The only identity accepted while the credential store is unreachable.

    Compares against a bcrypt hash: either the configured one or a hash of
    the configured password. The hash is computed when the object is built,
    so concurrent logins only ever read it.
    """

    def __init__(
        self,
        username: str,
        password: str | None = None,
        password_hash: str | None = None,
    ) -> None:
        if password_hash:
            self.password_hash = password_hash
        elif password is not None:
            self.password_hash = hash_password(password)
        else:
            raise ValueError("OfflineAdmin needs a password or a password hash")
        self.username = username

    @classmethod
    def from_settings(cls, settings: "Settings") -> "OfflineAdmin":
        configured = settings.DEFAULT_ADMIN_PASSWORD_HASH
        if configured:
            return cls(settings.DEFAULT_ADMIN_USERNAME, password_hash=configured.get_secret_value())
        return cls(
            settings.DEFAULT_ADMIN_USERNAME,
            password=settings.DEFAULT_ADMIN_PASSWORD.get_secret_value(),
        )

    def matches(self, username: str, password: str) -> bool:
        if username != self.username:
            return False
        return verify_password(password, self.password_hash)


def bootstrap_default_admin(store: CredentialStore, settings: "Settings") -> bool:
    """
    Create the default administrator if it does not exist yet.

    An existing account is left as is, password included. Never raises:
    failures are logged and the app keeps serving. Returns True only when
    an account was created.
    """
    username = settings.DEFAULT_ADMIN_USERNAME
    try:
        if store.find_by_username(username) is not None:
            logger.info("Default administrator already exists: %s", username)
            return False
        configured = settings.DEFAULT_ADMIN_PASSWORD_HASH
        if configured:
            password_hash = configured.get_secret_value()
        else:
            password_hash = hash_password(settings.DEFAULT_ADMIN_PASSWORD.get_secret_value())
        store.create(username=username, password_hash=password_hash, role=ROLE_ADMIN)
    except DuplicateUsername:
        logger.info("Default administrator created concurrently: %s", username)
        return False
    except Exception:
        logger.exception("Default administrator bootstrap failed")
        return False
    logger.info("Default administrator created: %s", username)
    return True

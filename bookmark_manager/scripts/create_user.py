"""
Create a user (e.g. an extra admin). Run from project root:
  python -m bookmark_manager.scripts.create_user USERNAME PASSWORD [role]
Example:
  python -m bookmark_manager.scripts.create_user alice your-secure-password admin
"""
import argparse
import logging
import sys

from bookmark_manager.core.database import SessionLocal
from bookmark_manager.core.security import hash_password
from bookmark_manager.models import ROLE_ADMIN, ROLE_USER
from bookmark_manager.services.auth import validate_registration
from bookmark_manager.services.credential_store import CredentialStore
from bookmark_manager.services.errors import AuthError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a bookmark manager user.")
    parser.add_argument("username", help="Username (3-30 chars)")
    parser.add_argument("password", help="Password (6-128 chars)")
    parser.add_argument("role", nargs="?", default=ROLE_USER, choices=[ROLE_USER, ROLE_ADMIN])
    args = parser.parse_args(argv)

    username = args.username.strip()
    try:
        validate_registration(username, args.password, args.password)
    except AuthError as e:
        print(e.message, file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        store = CredentialStore(db)
        if store.find_by_username(username) is not None:
            print(f"User '{username}' already exists.", file=sys.stderr)
            return 1
        store.create(username=username, password_hash=hash_password(args.password), role=args.role)
    except AuthError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        db.close()
    logger.info("Created user '%s' with role '%s'", username, args.role)
    return 0


if __name__ == "__main__":
    sys.exit(main())

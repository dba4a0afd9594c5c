"""Password hashing and session token generation for authentication."""

import secrets

import bcrypt

from bookmark_manager.core.config import BCRYPT_HASH_PREFIXES

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12
BCRYPT_HASH_LEN = 60

# Min/max lengths for username and password validation.
USERNAME_MIN_LEN = 3
USERNAME_MAX_LEN = 30
PASSWORD_MIN_LEN = 6
# bcrypt only reads the first 72 bytes; longer passwords are rejected, never truncated.
PASSWORD_MAX_BYTES = 72

SESSION_TOKEN_BYTES = 32


def password_too_long(plain_password: str) -> bool:
    return len(plain_password.encode("utf-8")) > PASSWORD_MAX_BYTES


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    if password_too_long(plain_password):
        raise ValueError(f"Password must be at most {PASSWORD_MAX_BYTES} bytes")
    pw_bytes = plain_password.encode("utf-8")
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash (constant-time inside bcrypt)."""
    if password_too_long(plain_password):
        return False
    pw_bytes = plain_password.encode("utf-8")
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def is_password_hash(value: str | None) -> bool:
    """True if value already has the shape of a bcrypt hash."""
    if not value or len(value) != BCRYPT_HASH_LEN:
        return False
    return value.startswith(BCRYPT_HASH_PREFIXES)


def ensure_password_hash(value: str) -> str:
    """Hash value unless it is already a bcrypt hash."""
    if is_password_hash(value):
        return value
    return hash_password(value)


def generate_session_token() -> str:
    """Opaque, URL-safe session identifier for the session cookie."""
    return secrets.token_urlsafe(SESSION_TOKEN_BYTES)

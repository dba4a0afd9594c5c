"""Typed authentication errors raised by the credential store and auth service."""

INVALID_CREDENTIALS_MESSAGE = "Invalid username or password."


class AuthError(Exception):
    """Base error; message is safe to show to the end user."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(AuthError):
    """A field violates a format or length constraint."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class InvalidInput(ValidationError):
    """A required field is missing or blank."""


class InvalidCredentials(AuthError):
    """Unknown user or wrong password. Same message for both."""

    def __init__(self) -> None:
        super().__init__(INVALID_CREDENTIALS_MESSAGE)


class DuplicateUsername(AuthError):
    """The username is already taken."""

    def __init__(self, username: str) -> None:
        super().__init__("Username already exists.")
        self.username = username


class StoreUnavailable(AuthError):
    """The credential store cannot be reached."""

    def __init__(self, message: str = "Service temporarily unavailable, please try again later.") -> None:
        super().__init__(message)

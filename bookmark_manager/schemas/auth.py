"""Request/response schemas for auth endpoints."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["user", "admin"]


class LoginRequest(BaseModel):
    """Credentials for login. Emptiness is checked by the auth service."""

    username: str = Field(default="", max_length=255, description="Username")
    password: str = Field(default="", max_length=1024, description="Password")


class RegisterRequest(BaseModel):
    """New account: username plus the password typed twice."""

    model_config = ConfigDict(populate_by_name=True)

    username: str = Field(default="", max_length=255, description="Username (3-30 chars)")
    password: str = Field(default="", max_length=1024, description="Password (min 6 chars)")
    confirm_password: str = Field(
        default="",
        max_length=1024,
        alias="confirmPassword",
        description="Must equal password",
    )


class SessionResponse(BaseModel):
    """Snapshot of the authenticated session; the token itself travels only in the cookie."""

    model_config = ConfigDict(from_attributes=True)

    user_id: int
    username: str
    display_name: str | None = None
    role: Role
    expires_at: datetime
    offline: bool = False


class LogoutResponse(BaseModel):
    message: str = "Logged out"


class LoginEntryResponse(BaseModel):
    """Payload for GET on the login entry point when not authenticated."""

    authenticated: bool = False
    message: str = "Login required"


class UserListItem(BaseModel):
    """User entry for admin list (no password)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    role: Role
    display_name: str | None = None
    created_at: datetime | None = None
    last_login: datetime | None = None
    login_count: int = 0


class UsersListResponse(BaseModel):
    """Response for GET /auth/users (admin only)."""

    total: int
    users: list[UserListItem]

"""Per-user display settings: read, update, and the wallpaper shortcut."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from bookmark_manager.api.v1.auth import get_availability, require_session
from bookmark_manager.core.database import StoreAvailability, get_db
from bookmark_manager.models import User
from bookmark_manager.schemas.settings import (
    SettingsResponse,
    SettingsUpdate,
    WallpaperResponse,
    WallpaperUpdate,
)
from bookmark_manager.services.credential_store import CredentialStore
from bookmark_manager.services.errors import StoreUnavailable, ValidationError
from bookmark_manager.services.sessions import AuthSession
from bookmark_manager.services.settings_store import SettingsStore

router = APIRouter()


def _unavailable(exc: StoreUnavailable | None = None) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=exc.message if exc else StoreUnavailable().message,
    )


def require_account(
    session: Annotated[AuthSession, Depends(require_session)],
    db: Annotated[Session, Depends(get_db)],
    availability: Annotated[StoreAvailability, Depends(get_availability)],
) -> User:
    """
    Dependency: the stored account behind the session.
    503 for offline sessions or while the store is down, 404 if the account was removed.
    """
    if session.offline or not availability.is_available():
        raise _unavailable()
    try:
        user = CredentialStore(db).get_by_id(session.user_id)
    except StoreUnavailable as e:
        availability.mark_unavailable()
        raise _unavailable(e) from e
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


def get_settings_store(db: Annotated[Session, Depends(get_db)]) -> SettingsStore:
    return SettingsStore(db)


@router.get("", response_model=SettingsResponse)
def read_settings(
    user: Annotated[User, Depends(require_account)],
    store: Annotated[SettingsStore, Depends(get_settings_store)],
) -> SettingsResponse:
    """Return the user's settings, creating the defaults on first access."""
    try:
        row = store.get_or_create(user.id)
    except StoreUnavailable as e:
        raise _unavailable(e) from e
    return SettingsResponse.model_validate(row)


@router.put("", response_model=SettingsResponse)
def update_settings(
    body: SettingsUpdate,
    user: Annotated[User, Depends(require_account)],
    store: Annotated[SettingsStore, Depends(get_settings_store)],
) -> SettingsResponse:
    """Update the provided fields; the rest keep their values."""
    try:
        row = store.update(user.id, **body.model_dump(exclude_none=True))
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.message
        ) from e
    except StoreUnavailable as e:
        raise _unavailable(e) from e
    return SettingsResponse.model_validate(row)


@router.put("/wallpaper", response_model=WallpaperResponse)
def update_wallpaper(
    body: WallpaperUpdate,
    user: Annotated[User, Depends(require_account)],
    store: Annotated[SettingsStore, Depends(get_settings_store)],
) -> WallpaperResponse:
    """Replace only the wallpaper. An empty value is rejected with 400."""
    try:
        row = store.update_wallpaper(user.id, body.wallpaper)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from e
    except StoreUnavailable as e:
        raise _unavailable(e) from e
    return WallpaperResponse(wallpaper=row.wallpaper)

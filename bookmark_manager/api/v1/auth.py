"""Session login/register/logout and auth dependencies (get_current_session, require_admin)."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from bookmark_manager.core.config import settings
from bookmark_manager.core.database import StoreAvailability, get_db
from bookmark_manager.models import ROLE_ADMIN
from bookmark_manager.schemas.auth import (
    LoginEntryResponse,
    LoginRequest,
    LogoutResponse,
    RegisterRequest,
    SessionResponse,
    UserListItem,
    UsersListResponse,
)
from bookmark_manager.services.auth import AuthService
from bookmark_manager.services.bootstrap import OfflineAdmin
from bookmark_manager.services.credential_store import CredentialStore
from bookmark_manager.services.errors import (
    AuthError,
    DuplicateUsername,
    InvalidCredentials,
    StoreUnavailable,
    ValidationError,
)
from bookmark_manager.services.sessions import AuthSession, SessionStore

router = APIRouter()


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_availability(request: Request) -> StoreAvailability:
    return request.app.state.availability


def get_offline_admin(request: Request) -> OfflineAdmin | None:
    return request.app.state.offline_admin


def get_auth_service(
    db: Annotated[Session, Depends(get_db)],
    sessions: Annotated[SessionStore, Depends(get_session_store)],
    availability: Annotated[StoreAvailability, Depends(get_availability)],
    offline_admin: Annotated[OfflineAdmin | None, Depends(get_offline_admin)],
) -> AuthService:
    """Dependency: auth service bound to this request's DB session."""
    return AuthService(CredentialStore(db), sessions, availability, offline_admin)


def get_current_session(request: Request) -> AuthSession | None:
    """Dependency: session resolved from the cookie by the app middleware, or None (anonymous)."""
    return getattr(request.state, "auth_session", None)


def require_session(
    session: Annotated[AuthSession | None, Depends(get_current_session)],
) -> AuthSession:
    """Dependency: require an authenticated session. Raises 401 if anonymous or expired."""
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return session


def require_admin(
    session: Annotated[AuthSession, Depends(require_session)],
) -> AuthSession:
    """Dependency: require authenticated session with role 'admin'. Raises 403 for non-admin."""
    if session.role != ROLE_ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return session


def _http_error(exc: AuthError) -> HTTPException:
    if isinstance(exc, ValidationError):
        code = status.HTTP_422_UNPROCESSABLE_ENTITY
    elif isinstance(exc, InvalidCredentials):
        code = status.HTTP_401_UNAUTHORIZED
    elif isinstance(exc, DuplicateUsername):
        code = status.HTTP_409_CONFLICT
    elif isinstance(exc, StoreUnavailable):
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        code = status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=code, detail=exc.message)


def _set_session_cookie(response: Response, session: AuthSession, sessions: SessionStore) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=session.token,
        max_age=int(sessions.ttl.total_seconds()),
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
        path="/",
    )


@router.get("/login", response_model=None)
def login_entry(
    session: Annotated[AuthSession | None, Depends(get_current_session)],
) -> RedirectResponse | LoginEntryResponse:
    """Login entry point: authenticated visitors go back to the main view."""
    if session is not None:
        return RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)
    return LoginEntryResponse()


@router.post("/login", response_model=SessionResponse)
def login(
    body: LoginRequest,
    response: Response,
    auth: Annotated[AuthService, Depends(get_auth_service)],
) -> SessionResponse:
    """
    Authenticate with username and password; sets the session cookie.
    Unknown usernames and wrong passwords get the same 401 response.
    """
    try:
        session = auth.login(body.username, body.password)
    except AuthError as e:
        raise _http_error(e) from e
    _set_session_cookie(response, session, auth.sessions)
    return SessionResponse.model_validate(session)


@router.post(
    "/register",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
)
def register(
    body: RegisterRequest,
    response: Response,
    auth: Annotated[AuthService, Depends(get_auth_service)],
) -> SessionResponse:
    """Create an account with role 'user' and log it in."""
    try:
        session = auth.register(body.username, body.password, body.confirm_password)
    except AuthError as e:
        raise _http_error(e) from e
    _set_session_cookie(response, session, auth.sessions)
    return SessionResponse.model_validate(session)


@router.post("/logout", response_model=LogoutResponse)
def logout(
    request: Request,
    response: Response,
    auth: Annotated[AuthService, Depends(get_auth_service)],
) -> LogoutResponse:
    """Destroy the current session, if any. Always succeeds."""
    auth.logout(request.cookies.get(settings.SESSION_COOKIE_NAME))
    response.delete_cookie(settings.SESSION_COOKIE_NAME, path="/")
    return LogoutResponse()


@router.get("/me", response_model=SessionResponse)
def me(
    session: Annotated[AuthSession, Depends(require_session)],
) -> SessionResponse:
    """Return the current session snapshot."""
    return SessionResponse.model_validate(session)


@router.get("/users", response_model=UsersListResponse)
def list_users(
    _admin: Annotated[AuthSession, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> UsersListResponse:
    """List all users (admin only), without password hashes."""
    try:
        users = CredentialStore(db).list_users()
    except StoreUnavailable as e:
        raise _http_error(e) from e
    return UsersListResponse(
        total=len(users),
        users=[UserListItem.model_validate(u) for u in users],
    )

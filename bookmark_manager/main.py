"""FastAPI application entrypoint. No business logic; only wiring, middleware and startup tasks."""

from dotenv import load_dotenv

load_dotenv()

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Annotated, Any

from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from bookmark_manager.api.v1 import router as v1_router
from bookmark_manager.api.v1.auth import get_current_session
from bookmark_manager.core.config import settings
from bookmark_manager.core.database import (
    DatabaseMonitor,
    SessionLocal,
    StoreAvailability,
    connect_with_retry,
    engine,
)
from bookmark_manager.services.bootstrap import OfflineAdmin, bootstrap_default_admin
from bookmark_manager.services.credential_store import CredentialStore
from bookmark_manager.services.sessions import AuthSession, SessionStore

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

SESSION_PURGE_INTERVAL_SEC = 3600


def _bootstrap_admin(session_factory: Callable[[], Session]) -> bool:
    with session_factory() as db:
        return bootstrap_default_admin(CredentialStore(db), settings)


async def _startup(app: FastAPI) -> None:
    """Connect with retry, then ensure the default administrator exists. Never fatal."""
    connected = await connect_with_retry(
        app.state.availability,
        max_retries=settings.DB_CONNECT_MAX_RETRIES,
        base_delay=settings.DB_CONNECT_RETRY_DELAY_SEC,
    )
    if not connected or not settings.BOOTSTRAP_ADMIN_ENABLED:
        return
    await run_in_threadpool(_bootstrap_admin, app.state.session_factory)


async def _purge_sessions(sessions: SessionStore) -> None:
    while True:
        await asyncio.sleep(SESSION_PURGE_INTERVAL_SEC)
        sessions.purge_expired()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    tasks: list[asyncio.Task[Any]] = []
    if app.state.run_startup_tasks:
        # Requests are served while these run; the bootstrap is not a precondition.
        tasks.append(asyncio.create_task(_startup(app)))
        tasks.append(asyncio.create_task(_purge_sessions(app.state.session_store)))
    yield
    for task in tasks:
        task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)


def create_app(
    *,
    session_store: SessionStore | None = None,
    availability: StoreAvailability | None = None,
    offline_admin: OfflineAdmin | None = None,
    session_factory: Callable[[], Session] = SessionLocal,
    run_startup_tasks: bool = True,
) -> FastAPI:
    """Build the app. Components default to the configured database and settings."""
    app = FastAPI(
        title="Bookmark Manager API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.session_store = session_store or SessionStore(
        ttl=timedelta(hours=settings.SESSION_TTL_HOURS)
    )
    app.state.availability = availability or DatabaseMonitor(
        engine, recheck_interval=settings.DB_RECHECK_INTERVAL_SEC
    )
    if offline_admin is None and settings.OFFLINE_FALLBACK_ENABLED:
        offline_admin = OfflineAdmin.from_settings(settings)
    app.state.offline_admin = offline_admin
    app.state.session_factory = session_factory
    app.state.run_startup_tasks = run_startup_tasks

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.APP_ENV == "dev" else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def _session_middleware(request: Request, call_next):
        token = request.cookies.get(settings.SESSION_COOKIE_NAME)
        request.state.auth_session = app.state.session_store.get(token)
        return await call_next(request)

    app.include_router(v1_router, prefix=settings.API_V1_PREFIX)

    @app.get("/", response_model=None)
    def root(
        session: Annotated[AuthSession | None, Depends(get_current_session)],
    ) -> RedirectResponse | dict[str, str]:
        """Main view: anonymous visitors are sent to the login entry point."""
        if session is None:
            return RedirectResponse(
                settings.LOGIN_REDIRECT_PATH, status_code=status.HTTP_303_SEE_OTHER
            )
        return {
            "message": f"Welcome, {session.display_name or session.username}",
            "username": session.username,
            "role": session.role,
        }

    return app


app = create_app()

"""Health check endpoint reporting credential store reachability."""

from typing import Annotated

from fastapi import APIRouter, Depends

from bookmark_manager.api.v1.auth import get_availability
from bookmark_manager.core.config import settings
from bookmark_manager.core.database import StoreAvailability
from bookmark_manager.schemas.health import HealthResponse

router = APIRouter()


@router.get("/", response_model=HealthResponse)
def get_health(
    availability: Annotated[StoreAvailability, Depends(get_availability)],
) -> HealthResponse:
    """
    Return service health and database connectivity.
    The service stays up (status ok) while the database is unreachable.
    """
    connected = availability.is_available()
    return HealthResponse(
        status="ok",
        environment=settings.APP_ENV,
        database="connected" if connected else "disconnected",
        offline_mode=not connected and settings.OFFLINE_FALLBACK_ENABLED,
    )

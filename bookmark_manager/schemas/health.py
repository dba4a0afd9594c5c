"""Schema for the health check response."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Service status plus whether logins are limited to the offline administrator."""

    status: Literal["ok"] = Field(default="ok", description="Service status")
    environment: str = Field(description="Current app environment (dev or prod)")
    database: Literal["connected", "disconnected"] = Field(
        description="Credential store reachability at the time of the check",
    )
    offline_mode: bool = Field(
        default=False,
        description="True when the store is down and only the default administrator can log in",
    )

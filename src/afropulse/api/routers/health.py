# Hey future me - liveness only! /health never touches a source, so Docker's
# HEALTHCHECK stays green while the Spotify API is down. Whether sources work is
# visible in the `errors` map of every buzz response instead.
"""Health check endpoint."""

from datetime import UTC, datetime

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from afropulse import __version__

router = APIRouter(tags=["Health"])


class HealthStatus(BaseModel):
    """Health status response."""

    status: str = Field(description="healthy or degraded")
    timestamp: str = Field(description="ISO timestamp of health check")
    version: str = Field(default=__version__, description="Application version")
    catalog_configured: bool = Field(description="Catalog credentials present")
    adapters: list[str] = Field(default_factory=list, description="Configured source adapters")


@router.get("/health", response_model=HealthStatus)
async def health(request: Request) -> HealthStatus:
    ready = hasattr(request.app.state, "buzz_service")
    settings = getattr(request.app.state, "settings", None)
    return HealthStatus(
        status="healthy" if ready else "degraded",
        timestamp=datetime.now(UTC).isoformat(),
        catalog_configured=bool(settings and settings.catalog.is_configured),
        adapters=list(getattr(request.app.state, "adapter_names", [])),
    )

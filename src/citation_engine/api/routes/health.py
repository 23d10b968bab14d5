"""Health check API routes.

- GET /health - service status, uptime and active resolution limits
- GET /health/ready - whether the shared batch resolver is wired up
- GET /health/live - liveness probe
"""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from citation_engine import __version__
from citation_engine.core.config import get_settings


router = APIRouter(
    prefix="/health",
    tags=["Health"],
)


def _now() -> str:
    return datetime.now(UTC).isoformat()


# =============================================================================
# Response Models
# =============================================================================

class ResolutionLimits(BaseModel):
    """Redirect and throttle limits in effect for this process."""

    max_hops: int
    max_concurrent: int
    min_spacing_ms: int
    deadline_seconds: float | None = None


class HealthResponse(BaseModel):
    """Response model for GET /health."""

    status: str = Field(default="healthy", description="Overall service status")
    service: str = Field(..., description="Service name")
    version: str = Field(default=__version__, description="Service version")
    timestamp: str = Field(default_factory=_now, description="Check timestamp")
    uptime_seconds: float | None = Field(default=None, description="Seconds since startup")
    limits: ResolutionLimits


class ReadinessResponse(BaseModel):
    """Response model for GET /health/ready."""

    ready: bool
    timestamp: str = Field(default_factory=_now)


class LivenessResponse(BaseModel):
    """Response model for GET /health/live."""

    alive: bool = True
    timestamp: str = Field(default_factory=_now)


# =============================================================================
# Uptime
# =============================================================================

_service_start_time: datetime | None = None


def set_service_start_time(start_time: datetime | None = None) -> None:
    """Record service startup (defaults to now)."""
    global _service_start_time
    _service_start_time = start_time or datetime.now(UTC)


def get_uptime_seconds() -> float | None:
    """Seconds since set_service_start_time(), or None before startup."""
    if _service_start_time is None:
        return None
    return (datetime.now(UTC) - _service_start_time).total_seconds()


# =============================================================================
# API Endpoints
# =============================================================================

@router.get("", response_model=HealthResponse, summary="Health check")
async def health_check() -> HealthResponse:
    settings = get_settings()
    return HealthResponse(
        service=settings.service_name,
        uptime_seconds=get_uptime_seconds(),
        limits=ResolutionLimits(
            max_hops=settings.redirect_max_hops,
            max_concurrent=settings.throttle_max_concurrent,
            min_spacing_ms=settings.throttle_min_spacing_ms,
            deadline_seconds=settings.resolution_deadline_seconds,
        ),
    )


@router.get("/ready", response_model=ReadinessResponse, summary="Readiness check")
async def readiness_check(request: Request) -> ReadinessResponse:
    """Ready once the lifespan has created the shared batch resolver."""
    return ReadinessResponse(ready=getattr(request.app.state, "batch_resolver", None) is not None)


@router.get("/live", response_model=LivenessResponse, summary="Liveness check")
async def liveness_check() -> LivenessResponse:
    return LivenessResponse()


__all__ = [
    "HealthResponse",
    "LivenessResponse",
    "ReadinessResponse",
    "ResolutionLimits",
    "get_uptime_seconds",
    "router",
    "set_service_start_time",
]

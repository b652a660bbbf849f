# Health router.
# Created: 2026-10-13

from __future__ import annotations

from fastapi import APIRouter, Depends

from dirstream import __version__
from dirstream.api.deps import get_app_settings
from dirstream.api.v1.schemas.health import HealthResponse
from dirstream.config import Settings

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def get_health(settings: Settings = Depends(get_app_settings)):
    """Liveness check. Does not contact the upstream."""
    return HealthResponse(upstream=settings.upstream_url, version=__version__)

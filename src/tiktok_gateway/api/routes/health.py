"""Health check route handler.

``GET /health``
    Liveness check for load balancers and container probes.  Performs no
    I/O, never calls the upstream provider and always returns HTTP 200.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from tiktok_gateway.api.dependencies import get_settings
from tiktok_gateway.config.settings import Settings

router = APIRouter(tags=["system"])


class HealthResponse(BaseModel):
    """Body of ``GET /health``."""

    status: str
    version: str
    api: str


@router.get("/health", response_model=HealthResponse, include_in_schema=True)
async def health(settings: Annotated[Settings, Depends(get_settings)]) -> HealthResponse:
    """Return ``{"status": "ok", "version": ..., "api": "tikwm.com"}``."""
    return HealthResponse(
        status="ok",
        version=settings.app_version,
        api=settings.upstream_api_name,
    )

"""FastAPI router for the TikTok proxy endpoints.

Mount in the main app::

    from tiktok_gateway.tikwm.router import router as tiktok_router
    app.include_router(tiktok_router)

Endpoints:

- ``GET /api/tiktok/user?username=``        — normalized profile.
- ``GET /api/tiktok/user/videos?username=`` — normalized video feed.
- ``GET /api/tiktok/search?keyword=``       — normalized search results.

A missing or empty query parameter raises :class:`ValidationError`, which the
application renders as HTTP 400.  Upstream, mapping and transport failures
are caught here and answered with HTTP 500 and
``{"success": false, "message": ..., "error": ...}``.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from tiktok_gateway.api.dependencies import get_tikwm_client
from tiktok_gateway.core.exceptions import GatewayError, ValidationError
from tiktok_gateway.core.schemas.tiktok import UserProfile, VideoSummary
from tiktok_gateway.tikwm.client import TikwmClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tiktok", tags=["TikTok"])


# ---------------------------------------------------------------------------
# Route handlers
# ---------------------------------------------------------------------------


@router.get(
    "/user",
    response_model=UserProfile,
    summary="TikTok user profile",
    description="Fetch a TikTok account from tikwm.com and return its normalized profile.",
)
async def get_user(
    client: Annotated[TikwmClient, Depends(get_tikwm_client)],
    username: Annotated[str | None, Query(description="TikTok handle, without @.")] = None,
) -> UserProfile | JSONResponse:
    """Return the normalized profile of ``username``.

    Raises:
        ValidationError: If ``username`` is missing or empty (HTTP 400).
    """
    username = _require_param(username, "username", "Please provide a TikTok username")
    try:
        profile = await client.get_user(username)
    except GatewayError as exc:
        return _failure_response("Failed to fetch TikTok user information", exc, username=username)

    logger.info("tiktok router: fetched profile for '%s'", username)
    return profile


@router.get(
    "/user/videos",
    response_model=list[VideoSummary],
    response_model_exclude_none=True,
    summary="TikTok user videos",
    description="Fetch the video feed of a TikTok account, newest first.",
)
async def get_user_videos(
    client: Annotated[TikwmClient, Depends(get_tikwm_client)],
    username: Annotated[str | None, Query(description="TikTok handle, without @.")] = None,
) -> list[VideoSummary] | JSONResponse:
    """Return the normalized video feed of ``username``.

    Raises:
        ValidationError: If ``username`` is missing or empty (HTTP 400).
    """
    username = _require_param(username, "username", "Please provide a TikTok username")
    try:
        videos = await client.get_user_videos(username)
    except GatewayError as exc:
        return _failure_response("Failed to fetch user videos", exc, username=username)

    logger.info("tiktok router: fetched %d videos for '%s'", len(videos), username)
    return videos


@router.get(
    "/search",
    response_model=list[VideoSummary],
    response_model_exclude_none=True,
    summary="TikTok video search",
    description="Search TikTok videos by keyword, in relevance order.",
)
async def search_videos(
    client: Annotated[TikwmClient, Depends(get_tikwm_client)],
    keyword: Annotated[str | None, Query(description="Search phrase.")] = None,
) -> list[VideoSummary] | JSONResponse:
    """Return normalized videos matching ``keyword``.

    Raises:
        ValidationError: If ``keyword`` is missing or empty (HTTP 400).
    """
    keyword = _require_param(keyword, "keyword", "Please provide a search keyword")
    try:
        videos = await client.search_videos(keyword)
    except GatewayError as exc:
        return _failure_response("Failed to search TikTok videos", exc, keyword=keyword)

    logger.info("tiktok router: search '%s' returned %d videos", keyword, len(videos))
    return videos


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _require_param(value: str | None, name: str, message: str) -> str:
    if not value:
        raise ValidationError(message, parameter=name)
    return value


def _failure_response(message: str, exc: GatewayError, **context: str) -> JSONResponse:
    """Log ``exc`` and render the 500 error envelope."""
    logger.error(
        "tiktok router: %s (%s): %s",
        message,
        exc.kind,
        exc.message,
        extra={"error_kind": exc.kind, **context},
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": message, "error": exc.message},
    )

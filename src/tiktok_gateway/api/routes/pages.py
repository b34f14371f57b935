"""HTML page routes.

``GET /`` renders a small status card showing that the API is online and
how long the process has been up.  The uptime counter ticks client-side
from the server start time embedded in the page.
"""

from __future__ import annotations

import time
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from tiktok_gateway.api.dependencies import get_settings
from tiktok_gateway.config.settings import Settings

router = APIRouter(tags=["pages"])


def format_uptime(seconds: float) -> str:
    """Format a duration as ``"{d}d {h}h {m}m {s}s"``."""
    total = max(0, int(seconds))
    days, rest = divmod(total, 86_400)
    hours, rest = divmod(rest, 3_600)
    minutes, secs = divmod(rest, 60)
    return f"{days}d {hours}h {minutes}m {secs}s"


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def status_page(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
) -> HTMLResponse:
    """Render the status page."""
    started_at: float = request.app.state.started_at
    templates = request.app.state.templates
    return templates.TemplateResponse(
        request,
        "status.html",
        {
            "app_name": settings.app_name,
            "api": settings.upstream_api_name,
            "started_at_ms": int(started_at * 1000),
            "uptime": format_uptime(time.time() - started_at),
        },
    )

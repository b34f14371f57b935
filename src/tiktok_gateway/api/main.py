"""FastAPI application factory and entry point.

Creates the application instance from an explicit ``Settings`` object,
registers middleware and exception handlers, and mounts the routers.

Usage::

    # Development server (from project root)
    uvicorn tiktok_gateway.api.main:create_app --factory --reload --port 3000

    # Console script installed with the package (reads PORT, default 3000)
    tiktok-gateway
"""

from __future__ import annotations

import time
import uuid
from pathlib import Path
from typing import Callable

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.templating import Jinja2Templates

from tiktok_gateway.api.routes import health as health_routes
from tiktok_gateway.api.routes import pages
from tiktok_gateway.config.settings import Settings, load_settings
from tiktok_gateway.core.exceptions import ValidationError
from tiktok_gateway.core.logging_config import configure_logging, request_id_var
from tiktok_gateway.tikwm.client import TikwmClient
from tiktok_gateway.tikwm.router import router as tiktok_router

logger = structlog.get_logger(__name__)

_TEMPLATES_DIR = Path(__file__).parent / "templates"


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------


def create_app(
    settings: Settings | None = None,
    tikwm_client: TikwmClient | None = None,
) -> FastAPI:
    """Build and configure the FastAPI application.

    Args:
        settings: Immutable configuration.  Read from the environment when
            omitted (which is what ``uvicorn --factory`` does).
        tikwm_client: Upstream client to serve requests with.  Built from
            ``settings`` when omitted.

    Returns:
        A fully configured ``FastAPI`` instance.
    """
    if settings is None:
        settings = load_settings()

    configure_logging(settings.log_level, service=settings.app_name, version=settings.app_version)

    application = FastAPI(
        title=settings.app_name,
        description="Normalized TikTok user and video data, proxied from tikwm.com.",
        version=settings.app_version,
        redirect_slashes=False,
    )

    application.state.settings = settings
    application.state.tikwm_client = tikwm_client or TikwmClient.from_settings(settings)
    application.state.templates = Jinja2Templates(directory=_TEMPLATES_DIR)
    application.state.started_at = time.time()

    # ---- Middleware --------------------------------------------------------

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @application.middleware("http")
    async def request_logging_middleware(
        request: Request, call_next: Callable
    ) -> Response:
        """Log every request with its status and duration.

        Binds a fresh ``request_id`` to the structlog context so every log
        line emitted while serving the request can be correlated, and echoes
        it back in the ``X-Request-ID`` header.
        """
        request_id = str(uuid.uuid4())
        request_id_var.set(request_id)
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
            log_fn = logger.warning if status_code >= 400 else logger.info
            log_fn("request_complete", status_code=status_code, elapsed_ms=elapsed_ms)

        response.headers["X-Request-ID"] = request_id
        return response

    # ---- Exception handlers -----------------------------------------------

    @application.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        """Render a missing query parameter as HTTP 400."""
        logger.warning("request_rejected", parameter=exc.parameter, reason=exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": exc.message},
        )

    @application.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        """Render anything that escaped a route as HTTP 500 instead of crashing.

        Runs outside ``request_logging_middleware``, so the request id is
        attached here from ``request_id_var``.
        """
        logger.error("unhandled_exception", exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Internal server error", "error": str(exc)},
            headers={"X-Request-ID": request_id_var.get() or str(uuid.uuid4())},
        )

    # ---- Routers -----------------------------------------------------------

    application.include_router(tiktok_router)
    application.include_router(health_routes.router)
    application.include_router(pages.router)

    logger.info(
        "application_configured",
        app_name=settings.app_name,
        upstream=settings.tikwm_host,
        video_variant=settings.video_variant,
    )
    return application


# ---------------------------------------------------------------------------
# Process entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """Run the gateway under uvicorn on ``settings.host:settings.port``."""
    import uvicorn  # noqa: PLC0415

    settings = load_settings()
    application = create_app(settings)
    logger.info(
        "server_starting",
        port=settings.port,
        upstream_api=settings.upstream_api_name,
    )
    uvicorn.run(application, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()

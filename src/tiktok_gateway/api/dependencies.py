"""FastAPI dependency providers shared across route modules."""

from __future__ import annotations

from fastapi import Request

from tiktok_gateway.config.settings import Settings
from tiktok_gateway.tikwm.client import TikwmClient


def get_settings(request: Request) -> Settings:
    """Return the settings the running application was built with."""
    return request.app.state.settings


def get_tikwm_client(request: Request) -> TikwmClient:
    """Return the upstream client attached to the application by ``create_app()``.

    Tests may swap it through ``app.dependency_overrides[get_tikwm_client]``.
    """
    return request.app.state.tikwm_client

"""Application settings loaded from environment variables.

Uses Pydantic Settings v2 for validated, type-safe configuration.
Environment variables are read exclusively through this module — never call
``os.getenv`` directly elsewhere in the codebase.

The settings object is immutable and is handed explicitly to the
application factory, which passes it on to the upstream client::

    from tiktok_gateway.api.main import create_app
    from tiktok_gateway.config.settings import load_settings

    app = create_app(load_settings())
"""

from __future__ import annotations

from typing import Literal
from urllib.parse import urlparse

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Gateway configuration backed by environment variables and an optional .env file.

    Every field has a default, so the service starts with an empty
    environment.  Instances are frozen: build a new one (or use
    ``model_copy(update=...)``) rather than mutating.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # ------------------------------------------------------------------
    # HTTP server
    # ------------------------------------------------------------------

    port: int = Field(default=3000, ge=1, le=65535)
    """TCP port uvicorn listens on.  Read from ``PORT``."""

    host: str = "0.0.0.0"
    """Interface uvicorn binds to."""

    allowed_origins: list[str] = ["*"]
    """Origins permitted by the CORS middleware."""

    # ------------------------------------------------------------------
    # Application identity
    # ------------------------------------------------------------------

    app_name: str = "JihyoAPI"
    """Human-readable name shown on the status page and in the OpenAPI docs."""

    app_version: str = "1.0.0"
    """Version reported by ``GET /health``."""

    # ------------------------------------------------------------------
    # Upstream provider
    # ------------------------------------------------------------------

    tikwm_host: str = "https://www.tikwm.com"
    """Scheme and host of the tikwm.com API, without a trailing slash."""

    upstream_timeout_seconds: float = Field(default=5.0, gt=0)
    """Total timeout for a single upstream call.  A slow upstream is abandoned
    after this many seconds and surfaced as a transport error."""

    video_variant: Literal["full", "compact"] = "full"
    """Which upstream video field set the normalizer reads.

    ``full`` reads duration and cover URLs and exposes ``downloadCount``;
    ``compact`` skips them and exposes ``collectCount``.
    """

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    log_level: str = "INFO"
    """Logging verbosity.  One of: DEBUG, INFO, WARNING, ERROR, CRITICAL."""

    @property
    def upstream_api_name(self) -> str:
        """Bare upstream host name reported by the health endpoint (``tikwm.com``)."""
        hostname = urlparse(self.tikwm_host).hostname or self.tikwm_host
        return hostname.removeprefix("www.")


def load_settings() -> Settings:
    """Read the environment and return a fresh, validated ``Settings``.

    Called once by the process entry point.  Tests build ``Settings(...)``
    directly with explicit values instead.

    Returns:
        Settings: The validated, immutable settings object.
    """
    return Settings()

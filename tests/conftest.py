"""Shared pytest fixtures for the TikTok gateway tests.

Fixture summary
---------------
settings            — Explicit ``Settings`` pointing at the default tikwm.com host.
app                 — FastAPI application built from ``settings``.
client              — ``fastapi.testclient.TestClient`` bound to ``app``.
user_info_payload   — Recorded ``/api/user/info`` body (fresh copy per test).
user_posts_payload  — Recorded ``/api/user/posts`` body.
search_payload      — Recorded ``/api/feed/search`` body.

No test talks to the real tikwm.com: upstream traffic is mocked with respx.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from tiktok_gateway.api.main import create_app
from tiktok_gateway.config.settings import Settings

FIXTURES_DIR = Path(__file__).parent / "fixtures" / "api_responses" / "tikwm"


def load_fixture(name: str) -> dict[str, Any]:
    """Load a recorded tikwm.com response body from ``fixtures/``."""
    return json.loads((FIXTURES_DIR / name).read_text(encoding="utf-8"))


# ---------------------------------------------------------------------------
# Application fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    return Settings(
        port=3000,
        tikwm_host="https://www.tikwm.com",
        upstream_timeout_seconds=2.0,
        video_variant="full",
        log_level="INFO",
        app_name="JihyoAPI",
        app_version="1.0.0",
    )


@pytest.fixture
def app(settings: Settings) -> FastAPI:
    return create_app(settings)


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client


# ---------------------------------------------------------------------------
# Upstream payload fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def user_info_payload() -> dict[str, Any]:
    return load_fixture("user_info_response.json")


@pytest.fixture
def user_posts_payload() -> dict[str, Any]:
    return load_fixture("user_posts_response.json")


@pytest.fixture
def search_payload() -> dict[str, Any]:
    return load_fixture("search_response.json")

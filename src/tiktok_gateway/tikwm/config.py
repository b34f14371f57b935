"""tikwm.com upstream configuration.

tikwm.com exposes unauthenticated GET endpoints that answer with a JSON
envelope ``{"code": int, "msg": str, "data": {...}}``.  ``code == 0``
signals success.

Key facts:
- No API key; requests are anonymous.
- Each endpoint takes exactly one query parameter.
- Video arrays are returned in provider order (newest first for user feeds,
  relevance for search).
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# API endpoints
# ---------------------------------------------------------------------------

TIKWM_HOST: str = "https://www.tikwm.com"
"""Default scheme and host of the provider.  Overridable via ``TIKWM_HOST``."""

TIKWM_USER_INFO_PATH: str = "/api/user/info"
"""User profile endpoint.  Query parameter: ``unique_id``."""

TIKWM_USER_POSTS_PATH: str = "/api/user/posts"
"""User video feed endpoint.  Query parameter: ``unique_id``."""

TIKWM_SEARCH_PATH: str = "/api/feed/search"
"""Video keyword search endpoint.  Query parameter: ``keywords``."""

# ---------------------------------------------------------------------------
# Query parameter names
# ---------------------------------------------------------------------------

TIKWM_USERNAME_PARAM: str = "unique_id"
"""Query parameter carrying the TikTok handle (without ``@``)."""

TIKWM_KEYWORD_PARAM: str = "keywords"
"""Query parameter carrying the search phrase."""

# ---------------------------------------------------------------------------
# HTTP behaviour
# ---------------------------------------------------------------------------

TIKWM_DEFAULT_TIMEOUT_SECONDS: float = 5.0
"""Default upper bound for one upstream call."""

TIKWM_REQUEST_HEADERS: dict[str, str] = {
    "Accept": "application/json",
    "User-Agent": "tiktok-gateway/1.0",
}
"""Headers sent with every upstream request."""

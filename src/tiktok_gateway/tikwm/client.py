"""tikwm.com upstream client.

Performs the single outbound call each gateway request needs and hands the
decoded body to :mod:`tiktok_gateway.core.normalizer`.

- :meth:`TikwmClient.get_user` — ``/api/user/info`` -> ``UserProfile``.
- :meth:`TikwmClient.get_user_videos` — ``/api/user/posts`` -> video list.
- :meth:`TikwmClient.search_videos` — ``/api/feed/search`` -> video list.

Every call runs with the configured total timeout and is never retried.
Network failures, timeouts and non-2xx statuses surface as
:class:`TransportError`; a body that is not JSON surfaces as
:class:`MalformedResponseError`.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from tiktok_gateway.config.settings import Settings
from tiktok_gateway.core.exceptions import MalformedResponseError, TransportError
from tiktok_gateway.core.normalizer import (
    SEARCH_FALLBACK_MESSAGE,
    USER_INFO_FALLBACK_MESSAGE,
    USER_VIDEOS_FALLBACK_MESSAGE,
    VideoVariant,
    normalize_user,
    normalize_video_list,
    resolve_variant,
)
from tiktok_gateway.core.schemas.tiktok import UserProfile, VideoList
from tiktok_gateway.tikwm.config import (
    TIKWM_DEFAULT_TIMEOUT_SECONDS,
    TIKWM_HOST,
    TIKWM_KEYWORD_PARAM,
    TIKWM_REQUEST_HEADERS,
    TIKWM_SEARCH_PATH,
    TIKWM_USER_INFO_PATH,
    TIKWM_USER_POSTS_PATH,
    TIKWM_USERNAME_PARAM,
)

logger = logging.getLogger(__name__)


def build_upstream_url(
    endpoint_path: str,
    params: dict[str, Any] | None = None,
    host: str = TIKWM_HOST,
) -> str:
    """Return ``host + endpoint_path`` with each of ``params`` appended as a query parameter.

    Parameters are appended in insertion order and URL-encoded; their values
    are not otherwise validated.

    Example::

        >>> build_upstream_url("/api/user/info", {"unique_id": "abc"})
        'https://www.tikwm.com/api/user/info?unique_id=abc'
    """
    url = httpx.URL(host.rstrip("/") + endpoint_path)
    if params:
        url = url.copy_merge_params(params)
    return str(url)


class TikwmClient:
    """Fetches and normalizes TikTok data from tikwm.com.

    The client is stateless: a fresh ``httpx.AsyncClient`` is opened for each
    upstream call, so one instance can serve any number of concurrent
    requests.

    Args:
        host: Scheme and host of the provider.
        timeout_seconds: Total timeout applied to each upstream call.
        variant: Video field set the normalizer reads.
        http_client: Optional injected ``httpx.AsyncClient`` for testing.
    """

    def __init__(
        self,
        host: str = TIKWM_HOST,
        timeout_seconds: float = TIKWM_DEFAULT_TIMEOUT_SECONDS,
        variant: VideoVariant | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.host = host.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.variant = variant or resolve_variant("full")
        self._http_client = http_client

    @classmethod
    def from_settings(cls, settings: Settings) -> TikwmClient:
        """Build a client from the application settings."""
        return cls(
            host=settings.tikwm_host,
            timeout_seconds=settings.upstream_timeout_seconds,
            variant=resolve_variant(settings.video_variant),
        )

    # ------------------------------------------------------------------
    # Endpoint operations
    # ------------------------------------------------------------------

    async def get_user(self, username: str) -> UserProfile:
        """Return the normalized profile of ``username``.

        Raises:
            UpstreamError: tikwm.com reported a failure.
            MalformedResponseError: The payload did not match the user mapping.
            TransportError: tikwm.com could not be reached in time.
        """
        payload = await self._get_json(TIKWM_USER_INFO_PATH, {TIKWM_USERNAME_PARAM: username})
        return normalize_user(payload, fallback_message=USER_INFO_FALLBACK_MESSAGE)

    async def get_user_videos(self, username: str) -> VideoList:
        """Return the normalized video feed of ``username``, newest first."""
        payload = await self._get_json(TIKWM_USER_POSTS_PATH, {TIKWM_USERNAME_PARAM: username})
        return normalize_video_list(
            payload,
            variant=self.variant,
            fallback_message=USER_VIDEOS_FALLBACK_MESSAGE,
        )

    async def search_videos(self, keyword: str) -> VideoList:
        """Return normalized videos matching ``keyword``, in relevance order."""
        payload = await self._get_json(TIKWM_SEARCH_PATH, {TIKWM_KEYWORD_PARAM: keyword})
        return normalize_video_list(
            payload,
            variant=self.variant,
            fallback_message=SEARCH_FALLBACK_MESSAGE,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def build_url(self, endpoint_path: str, params: dict[str, Any] | None = None) -> str:
        """Build an upstream URL against this client's host."""
        return build_upstream_url(endpoint_path, params, host=self.host)

    def _build_http_client(self) -> httpx.AsyncClient:
        """Return a fresh ``httpx.AsyncClient`` for use as a context manager."""
        return httpx.AsyncClient(
            timeout=self.timeout_seconds,
            headers=TIKWM_REQUEST_HEADERS,
        )

    async def _get_json(self, endpoint_path: str, params: dict[str, Any]) -> Any:
        """GET ``endpoint_path`` and return the decoded JSON body.

        Raises:
            TransportError: On timeout, connection error or non-2xx status.
            MalformedResponseError: When the body is not valid JSON.
        """
        url = self.build_url(endpoint_path, params)

        try:
            if self._http_client is not None:
                # Injected clients are owned by the caller; only bound the call.
                response = await self._http_client.get(url, timeout=self.timeout_seconds)
            else:
                async with self._build_http_client() as client:
                    response = await client.get(url)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise TransportError(
                f"tikwm: request to {endpoint_path} timed out after {self.timeout_seconds}s"
            ) from exc
        except httpx.HTTPStatusError as exc:
            raise TransportError(
                f"tikwm: HTTP {exc.response.status_code} from {endpoint_path}",
                status_code_upstream=exc.response.status_code,
            ) from exc
        except httpx.RequestError as exc:
            raise TransportError(f"tikwm: connection error on {endpoint_path}: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise MalformedResponseError(
                f"tikwm: {endpoint_path} returned a non-JSON body"
            ) from exc

        logger.debug("tikwm: %s answered code=%s", endpoint_path, _peek_code(payload))
        return payload


def _peek_code(payload: Any) -> Any:
    return payload.get("code") if isinstance(payload, dict) else None

"""Tests for the tikwm.com upstream client.

Covers:
- build_upstream_url(): documented example, parameter order, URL-encoding
  of non-ASCII values, custom host with trailing slash, no parameters
- TikwmClient.get_user / get_user_videos / search_videos with mocked
  upstream responses (respx)
- Request shape: query parameter names and default headers
- Timeout, connection error, HTTP 5xx -> TransportError
- Non-JSON body -> MalformedResponseError
- code != 0 -> UpstreamError carrying the upstream msg
- from_settings() wiring (host, timeout, variant)
- Injected http_client is used instead of a fresh one

These tests run without a network connection.
"""

from __future__ import annotations

from typing import Any

import httpx
import pytest
import respx

from tiktok_gateway.config.settings import Settings
from tiktok_gateway.core.exceptions import (
    MalformedResponseError,
    TransportError,
    UpstreamError,
)
from tiktok_gateway.core.normalizer import COMPACT_VARIANT, FULL_VARIANT
from tiktok_gateway.tikwm.client import TikwmClient, build_upstream_url
from tiktok_gateway.tikwm.config import (
    TIKWM_HOST,
    TIKWM_SEARCH_PATH,
    TIKWM_USER_INFO_PATH,
    TIKWM_USER_POSTS_PATH,
)

USERNAME = "nordicfoodlab"
USER_INFO_URL = build_upstream_url(TIKWM_USER_INFO_PATH, {"unique_id": USERNAME})
USER_POSTS_URL = build_upstream_url(TIKWM_USER_POSTS_PATH, {"unique_id": USERNAME})
SEARCH_URL = build_upstream_url(TIKWM_SEARCH_PATH, {"keywords": "climate"})


# ---------------------------------------------------------------------------
# build_upstream_url()
# ---------------------------------------------------------------------------


class TestBuildUpstreamUrl:
    def test_documented_example(self) -> None:
        """The user-info URL for 'abc' matches the documented form exactly."""
        url = build_upstream_url("/api/user/info", {"unique_id": "abc"})

        assert url == "https://www.tikwm.com/api/user/info?unique_id=abc"

    def test_default_host_is_tikwm(self) -> None:
        assert TIKWM_HOST == "https://www.tikwm.com"
        assert build_upstream_url("/api/feed/search").startswith(TIKWM_HOST + "/api/")

    def test_no_params_has_no_query_string(self) -> None:
        assert build_upstream_url("/api/user/posts") == "https://www.tikwm.com/api/user/posts"

    def test_params_appended_in_insertion_order(self) -> None:
        url = build_upstream_url("/api/feed/search", {"keywords": "cats", "count": 10, "cursor": 0})

        assert url.endswith("?keywords=cats&count=10&cursor=0")

    def test_non_ascii_value_is_encoded_and_round_trips(self) -> None:
        """Danish characters and spaces are URL-encoded and decode back unchanged."""
        url = build_upstream_url("/api/feed/search", {"keywords": "grøn omstilling"})

        assert "ø" not in url
        assert " " not in url
        assert httpx.URL(url).params["keywords"] == "grøn omstilling"

    def test_reserved_characters_are_encoded(self) -> None:
        url = build_upstream_url("/api/feed/search", {"keywords": "a&b=c"})

        params = httpx.URL(url).params
        assert params["keywords"] == "a&b=c"
        assert list(params.keys()) == ["keywords"]

    def test_custom_host_trailing_slash_is_stripped(self) -> None:
        url = build_upstream_url("/api/user/info", {"unique_id": "abc"}, host="http://localhost:8080/")

        assert url == "http://localhost:8080/api/user/info?unique_id=abc"

    def test_client_build_url_uses_client_host(self) -> None:
        client = TikwmClient(host="http://mirror.example/")

        assert client.build_url("/api/user/info") == "http://mirror.example/api/user/info"


# ---------------------------------------------------------------------------
# Successful calls
# ---------------------------------------------------------------------------


class TestTikwmClientSuccess:
    @pytest.mark.asyncio
    async def test_get_user_returns_normalized_profile(
        self, user_info_payload: dict[str, Any]
    ) -> None:
        """get_user() calls /api/user/info and returns the normalized profile."""
        client = TikwmClient()

        with respx.mock:
            route = respx.get(USER_INFO_URL).mock(
                return_value=httpx.Response(200, json=user_info_payload)
            )
            profile = await client.get_user(USERNAME)

        assert route.call_count == 1
        assert profile.username == USERNAME
        assert profile.nickname == "Nordic Food Lab"
        assert profile.stats.followers == 254300

    @pytest.mark.asyncio
    async def test_get_user_sends_unique_id_param_and_headers(
        self, user_info_payload: dict[str, Any]
    ) -> None:
        client = TikwmClient()

        with respx.mock:
            route = respx.get(USER_INFO_URL).mock(
                return_value=httpx.Response(200, json=user_info_payload)
            )
            await client.get_user(USERNAME)

        request = route.calls.last.request
        assert request.url.params["unique_id"] == USERNAME
        assert request.headers["Accept"] == "application/json"
        assert "tiktok-gateway" in request.headers["User-Agent"]

    @pytest.mark.asyncio
    async def test_get_user_videos_returns_videos_in_upstream_order(
        self, user_posts_payload: dict[str, Any]
    ) -> None:
        client = TikwmClient()

        with respx.mock:
            respx.get(USER_POSTS_URL).mock(
                return_value=httpx.Response(200, json=user_posts_payload)
            )
            videos = await client.get_user_videos(USERNAME)

        assert [v.id for v in videos] == ["7339472510493478150", "7338901277650238726"]
        assert videos[0].stats.download_count == 57

    @pytest.mark.asyncio
    async def test_search_videos_sends_keywords_param(
        self, search_payload: dict[str, Any]
    ) -> None:
        """search_videos() passes the keyword as the 'keywords' query parameter."""
        client = TikwmClient()

        with respx.mock:
            respx.get(SEARCH_URL).mock(return_value=httpx.Response(200, json=search_payload))
            videos = await client.search_videos("climate")

        assert len(videos) == 1
        assert videos[0].id == "7321887104512269573"

    @pytest.mark.asyncio
    async def test_search_videos_encodes_non_ascii_keyword(
        self, search_payload: dict[str, Any]
    ) -> None:
        client = TikwmClient()

        with respx.mock:
            route = respx.get(host="www.tikwm.com", path=TIKWM_SEARCH_PATH).mock(
                return_value=httpx.Response(200, json=search_payload)
            )
            await client.search_videos("grøn omstilling")

        assert route.calls.last.request.url.params["keywords"] == "grøn omstilling"

    @pytest.mark.asyncio
    async def test_empty_video_list(self) -> None:
        client = TikwmClient()

        with respx.mock:
            respx.get(USER_POSTS_URL).mock(
                return_value=httpx.Response(200, json={"code": 0, "msg": "success", "data": {"videos": []}})
            )
            videos = await client.get_user_videos(USERNAME)

        assert videos == []

    @pytest.mark.asyncio
    async def test_compact_variant_reads_collect_count(
        self, user_posts_payload: dict[str, Any]
    ) -> None:
        client = TikwmClient(variant=COMPACT_VARIANT)

        with respx.mock:
            respx.get(USER_POSTS_URL).mock(
                return_value=httpx.Response(200, json=user_posts_payload)
            )
            videos = await client.get_user_videos(USERNAME)

        assert videos[0].stats.collect_count == 1433
        assert videos[0].stats.download_count is None
        assert videos[0].cover is None


# ---------------------------------------------------------------------------
# Failure mapping
# ---------------------------------------------------------------------------


class TestTikwmClientErrors:
    @pytest.mark.asyncio
    async def test_timeout_raises_transport_error(self) -> None:
        """A slow upstream is abandoned and reported as a transport failure."""
        client = TikwmClient(timeout_seconds=0.5)

        with respx.mock:
            respx.get(USER_INFO_URL).mock(side_effect=httpx.ReadTimeout("timed out"))
            with pytest.raises(TransportError) as exc_info:
                await client.get_user(USERNAME)

        assert "timed out after 0.5s" in str(exc_info.value)
        assert exc_info.value.status_code_upstream is None

    @pytest.mark.asyncio
    async def test_connect_error_raises_transport_error(self) -> None:
        client = TikwmClient()

        with respx.mock:
            respx.get(SEARCH_URL).mock(side_effect=httpx.ConnectError("connection refused"))
            with pytest.raises(TransportError) as exc_info:
                await client.search_videos("climate")

        assert "connection error" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_http_503_raises_transport_error_with_status(self) -> None:
        client = TikwmClient()

        with respx.mock:
            respx.get(USER_POSTS_URL).mock(return_value=httpx.Response(503, text="busy"))
            with pytest.raises(TransportError) as exc_info:
                await client.get_user_videos(USERNAME)

        assert exc_info.value.status_code_upstream == 503
        assert "HTTP 503" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_non_json_body_raises_malformed(self) -> None:
        client = TikwmClient()

        with respx.mock:
            respx.get(USER_INFO_URL).mock(
                return_value=httpx.Response(200, text="<html>maintenance</html>")
            )
            with pytest.raises(MalformedResponseError) as exc_info:
                await client.get_user(USERNAME)

        assert "non-JSON" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_upstream_failure_code_raises_upstream_error(self) -> None:
        """code != 0 is surfaced with the upstream msg, not as a transport error."""
        client = TikwmClient()

        with respx.mock:
            respx.get(USER_INFO_URL).mock(
                return_value=httpx.Response(200, json={"code": -1, "msg": "User not exist"})
            )
            with pytest.raises(UpstreamError) as exc_info:
                await client.get_user(USERNAME)

        assert exc_info.value.message == "User not exist"
        assert exc_info.value.code == -1

    @pytest.mark.asyncio
    async def test_upstream_failure_without_msg_uses_search_fallback(self) -> None:
        client = TikwmClient()

        with respx.mock:
            respx.get(SEARCH_URL).mock(return_value=httpx.Response(200, json={"code": 5}))
            with pytest.raises(UpstreamError) as exc_info:
                await client.search_videos("climate")

        assert exc_info.value.message == "Failed to search TikTok videos"

    @pytest.mark.asyncio
    async def test_malformed_payload_names_path(self, user_posts_payload: dict[str, Any]) -> None:
        del user_posts_payload["data"]["videos"][1]["music_info"]["id"]
        client = TikwmClient()

        with respx.mock:
            respx.get(USER_POSTS_URL).mock(
                return_value=httpx.Response(200, json=user_posts_payload)
            )
            with pytest.raises(MalformedResponseError) as exc_info:
                await client.get_user_videos(USERNAME)

        assert exc_info.value.path == "data.videos[1].music_info.id"


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class TestTikwmClientConstruction:
    def test_defaults(self) -> None:
        client = TikwmClient()

        assert client.host == TIKWM_HOST
        assert client.timeout_seconds == 5.0
        assert client.variant is FULL_VARIANT

    def test_from_settings_copies_host_timeout_and_variant(self) -> None:
        settings = Settings(
            tikwm_host="http://mirror.example/",
            upstream_timeout_seconds=1.5,
            video_variant="compact",
        )

        client = TikwmClient.from_settings(settings)

        assert client.host == "http://mirror.example"
        assert client.timeout_seconds == 1.5
        assert client.variant is COMPACT_VARIANT

    @pytest.mark.asyncio
    async def test_injected_http_client_is_used(self, user_info_payload: dict[str, Any]) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=user_info_payload)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
            client = TikwmClient(host="http://mirror.example", http_client=http_client)
            profile = await client.get_user(USERNAME)

        assert profile.id == "6784563164518679557"
        assert len(seen) == 1
        assert str(seen[0].url) == f"http://mirror.example{TIKWM_USER_INFO_PATH}?unique_id={USERNAME}"

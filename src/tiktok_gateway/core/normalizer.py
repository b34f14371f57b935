"""Normalizer: raw tikwm.com payloads -> stable gateway schemas.

Every normalized field is read from one fixed path of the upstream
document.  A missing path, or a value of the wrong type, raises
:class:`MalformedResponseError` naming that path; nothing is silently
defaulted.  The functions are pure and hold no state, so they are safe to
call concurrently from any number of requests.

Upstream envelopes look like ``{"code": 0, "msg": "success", "data": {...}}``.
``code == 0`` is the success sentinel; any other value (or no ``code`` at
all) is a provider-reported failure and raises :class:`UpstreamError`
carrying ``msg``.

Video entries come in more than one field set depending on the upstream
API version.  Callers pick one explicitly with a :class:`VideoVariant`::

    from tiktok_gateway.core.normalizer import COMPACT_VARIANT, normalize_video_list

    videos = normalize_video_list(payload, variant=COMPACT_VARIANT)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Literal

import pydantic

from tiktok_gateway.core.exceptions import MalformedResponseError, UpstreamError
from tiktok_gateway.core.schemas.tiktok import (
    MusicInfo,
    UserProfile,
    UserStats,
    VideoStats,
    VideoSummary,
)

logger = logging.getLogger(__name__)

USER_INFO_FALLBACK_MESSAGE = "Failed to fetch user information"
USER_VIDEOS_FALLBACK_MESSAGE = "Failed to fetch user videos"
SEARCH_FALLBACK_MESSAGE = "Failed to search TikTok videos"


# ---------------------------------------------------------------------------
# Video variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class VideoVariant:
    """Selects which optional video fields the normalizer reads.

    Attributes:
        name: Preset name, as used by the ``VIDEO_VARIANT`` setting.
        media_details: Read ``duration``, ``cover``, ``origin_cover`` and
            ``ai_dynamic_cover``.
        engagement_counter: ``"download"`` maps ``download_count`` to
            ``downloadCount``; ``"collect"`` maps ``collect_count`` to
            ``collectCount``.
    """

    name: str
    media_details: bool
    engagement_counter: Literal["download", "collect"]


FULL_VARIANT = VideoVariant(name="full", media_details=True, engagement_counter="download")
COMPACT_VARIANT = VideoVariant(name="compact", media_details=False, engagement_counter="collect")

VIDEO_VARIANTS: dict[str, VideoVariant] = {
    FULL_VARIANT.name: FULL_VARIANT,
    COMPACT_VARIANT.name: COMPACT_VARIANT,
}


def resolve_variant(name: str) -> VideoVariant:
    """Return the variant preset registered under ``name``.

    Raises:
        ValueError: If ``name`` is not a known variant.
    """
    try:
        return VIDEO_VARIANTS[name]
    except KeyError:
        known = ", ".join(sorted(VIDEO_VARIANTS))
        raise ValueError(f"Unknown video variant '{name}' (expected one of: {known})") from None


# ---------------------------------------------------------------------------
# Public normalization entry points
# ---------------------------------------------------------------------------


def normalize_user(
    raw: Any,
    fallback_message: str = USER_INFO_FALLBACK_MESSAGE,
) -> UserProfile:
    """Normalize a ``/api/user/info`` response body to a :class:`UserProfile`.

    Args:
        raw: Decoded upstream JSON body.
        fallback_message: Error text used when the upstream reports a
            failure with an empty ``msg``.

    Returns:
        The normalized profile.

    Raises:
        UpstreamError: When ``raw["code"] != 0``.
        MalformedResponseError: When a mapped path is missing or mistyped.
    """
    data = _require_success(raw, fallback_message)
    user = _require_mapping(data, "user", "data")
    stats = _require_mapping(data, "stats", "data")

    return _build(
        UserProfile,
        "data",
        id=_require_str(user, "id", "data.user"),
        username=_require_str(user, "uniqueId", "data.user"),
        nickname=_require_str(user, "nickname", "data.user"),
        avatar=_require_str(user, "avatarLarger", "data.user"),
        verified=_require_bool(user, "verified", "data.user"),
        bio=_require_str(user, "signature", "data.user"),
        stats=UserStats(
            following=_require_count(stats, "followingCount", "data.stats"),
            followers=_require_count(stats, "followerCount", "data.stats"),
            likes=_require_count(stats, "heartCount", "data.stats"),
            videos=_require_count(stats, "videoCount", "data.stats"),
        ),
    )


def normalize_video_list(
    raw: Any,
    variant: VideoVariant = FULL_VARIANT,
    fallback_message: str = USER_VIDEOS_FALLBACK_MESSAGE,
) -> list[VideoSummary]:
    """Normalize a ``/api/user/posts`` or ``/api/feed/search`` response body.

    Every entry of ``data.videos`` must conform; the first entry that does
    not fails the whole call.  Upstream order is preserved.

    Args:
        raw: Decoded upstream JSON body.
        variant: Which video field set to read.
        fallback_message: Error text used when the upstream reports a
            failure with an empty ``msg``.

    Returns:
        The normalized videos, in upstream order.

    Raises:
        UpstreamError: When ``raw["code"] != 0``.
        MalformedResponseError: When ``data.videos`` is not a list, or any
            entry is missing or mistypes a mapped field.
    """
    data = _require_success(raw, fallback_message)
    videos = _require(data, "videos", "data", list, "a list")
    return [
        normalize_video(video, variant=variant, path=f"data.videos[{index}]")
        for index, video in enumerate(videos)
    ]


def normalize_video(
    video: Any,
    variant: VideoVariant = FULL_VARIANT,
    path: str = "video",
) -> VideoSummary:
    """Normalize a single upstream video entry to a :class:`VideoSummary`.

    Args:
        video: One element of the upstream ``data.videos`` array.
        variant: Which video field set to read.
        path: Location of ``video`` in the enclosing document, used in
            error messages.

    Raises:
        MalformedResponseError: When a mapped path is missing or mistyped.
    """
    if not isinstance(video, dict):
        raise MalformedResponseError(f"Expected an object at '{path}'", path=path)

    music_path = f"{path}.music_info"
    music = _require_mapping(video, "music_info", path)

    counters: dict[str, int] = {
        "play_count": _require_count(video, "play_count", path),
        "digg_count": _require_count(video, "digg_count", path),
        "comment_count": _require_count(video, "comment_count", path),
        "share_count": _require_count(video, "share_count", path),
    }
    if variant.engagement_counter == "download":
        counters["download_count"] = _require_count(video, "download_count", path)
    else:
        counters["collect_count"] = _require_count(video, "collect_count", path)

    fields: dict[str, Any] = {
        "id": _require_str(video, "video_id", path),
        "title": _require_str(video, "title", path),
        "play": _require_str(video, "play", path),
        "music": _require_str(video, "music", path),
        "music_info": MusicInfo(
            id=_require_str(music, "id", music_path),
            title=_require_str(music, "title", music_path),
            play=_require_str(music, "play", music_path),
            cover=_require_str(music, "cover", music_path),
            author=_require_str(music, "author", music_path),
        ),
        "stats": _build(VideoStats, path, **counters),
        "create_time": _require_count(video, "create_time", path),
    }
    if variant.media_details:
        fields["duration"] = _require_count(video, "duration", path)
        fields["cover"] = _require_str(video, "cover", path)
        fields["origin_cover"] = _require_str(video, "origin_cover", path)
        fields["ai_dynamic_cover"] = _require_str(video, "ai_dynamic_cover", path)

    return _build(VideoSummary, path, **fields)


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------


def _require_success(raw: Any, fallback_message: str) -> dict[str, Any]:
    """Check the success sentinel and return the ``data`` object."""
    if not isinstance(raw, dict):
        raise MalformedResponseError("Upstream response body is not a JSON object")

    code = raw.get("code")
    if code != 0 or isinstance(code, bool):
        message = raw.get("msg") or fallback_message
        logger.warning("tikwm: upstream reported failure code=%s msg=%s", code, raw.get("msg"))
        raise UpstreamError(str(message), code=code)

    return _require_mapping(raw, "data", "")


def _require(
    node: dict[str, Any],
    key: str,
    parent: str,
    expected: type | tuple[type, ...],
    description: str,
) -> Any:
    path = f"{parent}.{key}" if parent else key
    if key not in node:
        raise MalformedResponseError(f"Missing field '{path}' in upstream response", path=path)
    value = node[key]
    # bool is a subclass of int; never accept it where a number is expected.
    if not isinstance(value, expected) or (isinstance(value, bool) and bool not in _as_tuple(expected)):
        raise MalformedResponseError(
            f"Field '{path}' should be {description}, got {type(value).__name__}",
            path=path,
        )
    return value


def _require_mapping(node: dict[str, Any], key: str, parent: str) -> dict[str, Any]:
    return _require(node, key, parent, dict, "an object")


def _require_str(node: dict[str, Any], key: str, parent: str) -> str:
    return _require(node, key, parent, str, "a string")


def _require_bool(node: dict[str, Any], key: str, parent: str) -> bool:
    return _require(node, key, parent, bool, "a boolean")


def _require_count(node: dict[str, Any], key: str, parent: str) -> int:
    value = _require(node, key, parent, int, "an integer")
    if value < 0:
        path = f"{parent}.{key}" if parent else key
        raise MalformedResponseError(
            f"Field '{path}' should be non-negative, got {value}",
            path=path,
        )
    return value


def _as_tuple(expected: type | tuple[type, ...]) -> tuple[type, ...]:
    return expected if isinstance(expected, tuple) else (expected,)


def _build(model: type[pydantic.BaseModel], path: str, **fields: Any) -> Any:
    """Instantiate ``model``, reporting schema violations as malformed upstream data."""
    try:
        return model(**fields)
    except pydantic.ValidationError as exc:
        raise MalformedResponseError(
            f"Upstream data at '{path}' does not fit {model.__name__}: {exc.errors()[0]['msg']}",
            path=path,
        ) from exc

"""Pydantic response schemas for the normalized TikTok entities.

These are the shapes the gateway returns to callers.  All models are
frozen: they are built once per request by the normalizer and never
mutated afterwards.

Python attribute names are snake_case; the JSON names callers see are set
through field aliases (``playCount``, ``createTime``, ...).  FastAPI
serializes response models by alias, so the wire format matches the
aliases exactly.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class _FrozenSchema(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


# ---------------------------------------------------------------------------
# User profile
# ---------------------------------------------------------------------------


class UserStats(_FrozenSchema):
    """Audience and content counters of a TikTok account."""

    following: int = Field(ge=0)
    followers: int = Field(ge=0)
    likes: int = Field(ge=0)
    videos: int = Field(ge=0)


class UserProfile(_FrozenSchema):
    """A TikTok account as returned by ``GET /api/tiktok/user``.

    Attributes:
        id: Numeric TikTok user id, as a string.
        username: The ``@handle`` (upstream ``uniqueId``).
        nickname: Display name.
        avatar: URL of the large avatar image.
        verified: Whether the account carries the verified badge.
        bio: Profile signature text (may be empty).
        stats: Follower/following/like/video counters.
    """

    id: str
    username: str
    nickname: str
    avatar: str
    verified: bool
    bio: str
    stats: UserStats


# ---------------------------------------------------------------------------
# Videos
# ---------------------------------------------------------------------------


class MusicInfo(_FrozenSchema):
    """Soundtrack metadata attached to a video."""

    id: str
    title: str
    play: str
    cover: str
    author: str


class VideoStats(_FrozenSchema):
    """Engagement counters of a video.

    Exactly one of ``download_count`` / ``collect_count`` is populated,
    depending on the upstream variant the video was read with; the other is
    ``None`` and left out of the JSON output.
    """

    play_count: int = Field(ge=0, alias="playCount")
    digg_count: int = Field(ge=0, alias="diggCount")
    comment_count: int = Field(ge=0, alias="commentCount")
    share_count: int = Field(ge=0, alias="shareCount")
    download_count: Optional[int] = Field(default=None, ge=0, alias="downloadCount")
    collect_count: Optional[int] = Field(default=None, ge=0, alias="collectCount")


class VideoSummary(_FrozenSchema):
    """A single video entry of a user feed or a search result.

    ``duration`` and the three cover URLs are only read by the full
    variant; under the compact variant they are ``None`` and omitted from
    the JSON output.
    """

    id: str
    title: str
    duration: Optional[int] = Field(default=None, ge=0)
    cover: Optional[str] = None
    origin_cover: Optional[str] = None
    ai_dynamic_cover: Optional[str] = None
    play: str
    music: str
    music_info: MusicInfo
    stats: VideoStats
    create_time: int = Field(ge=0, alias="createTime")


VideoList = list[VideoSummary]
"""Videos in upstream order (relevance for search, newest first for feeds)."""

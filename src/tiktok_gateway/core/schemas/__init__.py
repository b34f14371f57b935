"""Response schemas for the TikTok gateway."""

from __future__ import annotations

from tiktok_gateway.core.schemas.tiktok import (
    MusicInfo,
    UserProfile,
    UserStats,
    VideoList,
    VideoStats,
    VideoSummary,
)

__all__ = [
    "MusicInfo",
    "UserProfile",
    "UserStats",
    "VideoList",
    "VideoStats",
    "VideoSummary",
]

"""Configuration package for the TikTok gateway.

Re-exports the settings symbols so that callers can write::

    from tiktok_gateway.config import Settings, load_settings
"""

from __future__ import annotations

from tiktok_gateway.config.settings import Settings, load_settings

__all__ = [
    "Settings",
    "load_settings",
]

"""TikTok gateway.

A thin FastAPI service that proxies the tikwm.com TikTok data API and
reshapes its responses into a small, stable JSON schema.
"""

__version__ = "1.0.0"

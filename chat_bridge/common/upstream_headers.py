"""
Upstream request header utilities.

Upstream only accepts requests that look like they come from its own web client,
so every call carries fixed browser headers alongside the caller's credential.
"""

from __future__ import annotations

from typing import Optional

from chat_bridge.config import Settings, get_settings

JSON_CONTENT_TYPE = "application/json"
EVENT_STREAM_CONTENT_TYPE = "text/event-stream"


def build_upstream_headers(
    credential: str,
    accept: str = JSON_CONTENT_TYPE,
    settings: Optional[Settings] = None,
) -> dict[str, str]:
    """
    Build headers for an upstream call.

    The credential is forwarded unmodified as the Authorization header.
    """
    settings = settings or get_settings()
    return {
        "Authorization": credential,
        "Content-Type": JSON_CONTENT_TYPE,
        "Accept": accept,
        "Origin": settings.UPSTREAM_ORIGIN,
        "Referer": settings.UPSTREAM_REFERER,
        "User-Agent": settings.UPSTREAM_USER_AGENT,
    }

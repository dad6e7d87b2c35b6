"""
Utility Functions Module

Identifier generation, title derivation and log masking helpers.
"""

import time
import uuid
from typing import Optional

SESSION_TITLE_MAX_CHARS = 20


def generate_chat_id() -> str:
    """
    Generate a request-scoped upstream chat identifier

    A new value is produced on every call and never reused.

    Example:
        >>> generate_chat_id()
        'a1b2c3d4e5f67890abcdef1234567890'
    """
    return uuid.uuid4().hex


def generate_completion_id() -> str:
    """Generate an OpenAI style completion identifier (chatcmpl-...)."""
    return f"chatcmpl-{uuid.uuid4().hex}"


def unix_timestamp() -> int:
    return int(time.time())


def build_session_title(
    seed_text: Optional[str],
    default_title: str,
    max_chars: int = SESSION_TITLE_MAX_CHARS,
) -> str:
    """
    Derive an upstream conversation title from the first user message

    Args:
        seed_text: Text of the first user message, None when there is none
        default_title: Title used when no seed text is available
        max_chars: Number of characters kept before the ellipsis

    Returns:
        str: The title, suffixed with "..." when truncated
    """
    if not seed_text:
        return default_title
    if len(seed_text) <= max_chars:
        return seed_text
    return f"{seed_text[:max_chars]}..."


def mask_string(s: str, visible_start: int = 4, visible_end: int = 2) -> str:
    """
    Mask a string for logging

    Example:
        >>> mask_string("abcdefghijklmnop")
        'abcd***...***op'
    """
    if len(s) <= visible_start + visible_end:
        return "***"
    return f"{s[:visible_start]}***...***{s[-visible_end:]}"

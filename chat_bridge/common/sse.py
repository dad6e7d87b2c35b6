"""
Server-Sent Event Framing

Re-segments an upstream SSE byte stream into complete events and encodes
downstream events.
"""

from __future__ import annotations

from typing import AsyncGenerator, AsyncIterable

EVENT_DELIMITER = b"\n\n"
DATA_PREFIX = "data:"
DONE_MARKER = "[DONE]"
TERMINATOR = f"{DATA_PREFIX} {DONE_MARKER}\n\n"


class SSEReframer:
    """
    Splits a byte stream into event blocks regardless of transport chunking.

    - Uses empty line (\\n\\n) as event boundary
    - Supports CRLF (\\r\\n)
    - Keeps the trailing partial event buffered until more bytes arrive
    - Blank segments are dropped

    Bytes are decoded per complete event, so a UTF-8 sequence split across
    fragments is reassembled before decoding.
    """

    def __init__(self) -> None:
        self._buf = b""

    def feed(self, chunk: bytes) -> list[str]:
        """
        Append bytes and return every event completed by them.
        """
        if not chunk:
            return []

        data = (self._buf + chunk).replace(b"\r\n", b"\n")
        parts = data.split(EVENT_DELIMITER)
        self._buf = parts.pop()  # Keep last incomplete event

        return [event for event in (self._decode(part) for part in parts) if event]

    def flush(self) -> list[str]:
        """
        Emit the buffered remainder as a final event at end of data.

        The buffer is cleared, so a second call returns nothing.
        """
        remainder = self._decode(self._buf.replace(b"\r\n", b"\n"))
        self._buf = b""
        return [remainder] if remainder else []

    @property
    def pending(self) -> bytes:
        """Bytes received but not yet emitted as an event."""
        return self._buf

    @staticmethod
    def _decode(segment: bytes) -> str:
        text = segment.decode("utf-8", errors="replace")
        if not text.strip():
            return ""
        return text


async def reframe(upstream: AsyncIterable[bytes]) -> AsyncGenerator[str, None]:
    """
    Lazily reframe an async byte source into complete events, flushing the
    trailing buffer once the source is exhausted.
    """
    reframer = SSEReframer()
    async for chunk in upstream:
        for event in reframer.feed(chunk):
            yield event
    for event in reframer.flush():
        yield event


def encode_sse_data(payload: str) -> str:
    return f"{DATA_PREFIX} {payload}\n\n"

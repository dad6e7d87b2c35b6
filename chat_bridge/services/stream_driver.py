"""
Stream Driver

Owns the read, translate and write loop of one streaming response.
"""

import logging
from dataclasses import dataclass, field
from typing import AsyncGenerator, AsyncIterable, Awaitable, Callable, Optional

import anyio

from chat_bridge.common.sse import TERMINATOR, reframe
from chat_bridge.common.utils import generate_completion_id, unix_timestamp
from chat_bridge.services.chunk_translator import (
    FINISH_REASON_ERROR,
    build_chunk,
    diagnostic_message,
    translate_chunk,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StreamContext:
    """Identity of one downstream stream, repeated on every chunk"""

    model: str
    id: str = field(default_factory=generate_completion_id)
    created: int = field(default_factory=unix_timestamp)


class StreamDriver:
    """
    Streaming response pipeline

    Fragments are processed strictly in order: every event derived from
    fragment N is yielded before fragment N+1 is read. The stream always ends
    with exactly one driver-emitted terminator, whether the upstream finished,
    failed, or sent its own [DONE].
    """

    def __init__(
        self,
        model: str,
        upstream: AsyncIterable[bytes],
        on_close: Optional[Callable[[], Awaitable[None]]] = None,
    ):
        """
        Initialize driver

        The stream id and creation timestamp are fixed here, before any
        upstream bytes are read.

        Args:
            model: Model name reported on every chunk
            upstream: Raw upstream byte fragments
            on_close: Releases the upstream response, awaited once at the end
        """
        self.context = StreamContext(model=model)
        self._upstream = upstream
        self._on_close = on_close

    async def stream(self) -> AsyncGenerator[str, None]:
        """
        Yield downstream SSE text

        Upstream read faults are turned into one diagnostic chunk with an error
        finish reason; nothing is raised to the response writer.
        """
        ctx = self.context
        try:
            async for event in reframe(self._upstream):
                result = translate_chunk(event, ctx.id, ctx.created, ctx.model)
                if result is not None:
                    yield result.data
        except Exception as e:
            logger.error(
                "Upstream stream interrupted: stream_id=%s error=%s: %s",
                ctx.id,
                type(e).__name__,
                e,
            )
            yield build_chunk(
                ctx.id,
                ctx.created,
                ctx.model,
                diagnostic_message("Upstream stream error", type(e).__name__, str(e)),
                finish_reason=FINISH_REASON_ERROR,
            )
        finally:
            await self._close()

        yield TERMINATOR

    async def _close(self) -> None:
        if self._on_close is None:
            return
        try:
            # Client disconnects cancel the generator; still release upstream
            with anyio.CancelScope(shield=True):
                await self._on_close()
        except Exception:
            logger.debug("Error closing upstream stream: stream_id=%s", self.context.id, exc_info=True)

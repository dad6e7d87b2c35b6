"""
Chunk Translator

Converts one upstream stream event into at most one OpenAI
chat.completion.chunk event.

translate_chunk() never raises: payloads that cannot be parsed and unexpected
internal faults both become diagnostic chunks, so a bad event never breaks the
client stream.
"""

import logging
from typing import Optional

from pydantic import ValidationError

from chat_bridge.common.sse import DATA_PREFIX, DONE_MARKER, TERMINATOR, encode_sse_data
from chat_bridge.domain.event import (
    ChatCompletionChunk,
    ChunkChoice,
    ChunkDelta,
    ChunkResult,
    ChunkUsage,
    CompletionTokensDetails,
    DataEvent,
    ErrorTextEvent,
    TerminatorEvent,
    UnparseableEvent,
    UpstreamChunkPayload,
    UpstreamEvent,
)

logger = logging.getLogger(__name__)

# Upstream reports failures as plain text starting with this marker
ERROR_TEXT_PREFIX = "[ERROR]"

FINISH_REASON_STOP = "stop"
FINISH_REASON_ERROR = "error"

# Upstream never reports prompt tokens while streaming
PROMPT_TOKENS_PLACEHOLDER = 6

DIAGNOSTIC_PREVIEW_CHARS = 200


def parse_upstream_event(raw_event: str) -> Optional[UpstreamEvent]:
    """
    Classify one raw upstream event

    Args:
        raw_event: Event text as produced by the reframer

    Returns:
        UpstreamEvent variant, or None when the event carries no content
    """
    text = raw_event.strip()
    if text.startswith(DATA_PREFIX):
        text = text[len(DATA_PREFIX):].strip()
    if not text:
        return None

    if text == DONE_MARKER:
        return TerminatorEvent()
    if text.startswith(ERROR_TEXT_PREFIX):
        return ErrorTextEvent(text=text)

    try:
        payload = UpstreamChunkPayload.model_validate_json(text)
    except ValidationError as e:
        return UnparseableEvent(text=text, error=_describe_validation_error(e))

    return DataEvent(
        message=payload.message or "",
        reasoning=payload.reasoning or None,
        done=bool(payload.done),
        used_token=payload.used_token,
    )


def build_chunk(
    stream_id: str,
    created: int,
    model: str,
    content: str,
    finish_reason: Optional[str] = None,
    reasoning: Optional[str] = None,
    completion_tokens: int = 0,
) -> str:
    """Render one downstream chunk as SSE text."""
    chunk = ChatCompletionChunk(
        id=stream_id,
        created=created,
        model=model,
        choices=[
            ChunkChoice(
                delta=ChunkDelta(content=content, reasoning_content=reasoning),
                finish_reason=finish_reason,
            )
        ],
        usage=ChunkUsage(
            prompt_tokens=PROMPT_TOKENS_PLACEHOLDER,
            completion_tokens=completion_tokens,
            total_tokens=completion_tokens + PROMPT_TOKENS_PLACEHOLDER,
            completion_tokens_details=CompletionTokensDetails(
                reasoning_tokens=1 if reasoning else 0,
            ),
        ),
    )
    return encode_sse_data(chunk.model_dump_json())


def translate_event(
    event: UpstreamEvent,
    stream_id: str,
    created: int,
    model: str,
) -> ChunkResult:
    """
    Translate a classified upstream event

    Args:
        event: Upstream event variant
        stream_id: Completion id shared by every chunk of the stream
        created: Creation timestamp shared by every chunk of the stream
        model: Model name reported to the client

    Returns:
        ChunkResult: Tagged downstream event
    """
    if isinstance(event, TerminatorEvent):
        return ChunkResult(kind="terminator", data=TERMINATOR)

    if isinstance(event, ErrorTextEvent):
        return ChunkResult(
            kind="event",
            data=build_chunk(stream_id, created, model, event.text, finish_reason=FINISH_REASON_ERROR),
        )

    if isinstance(event, DataEvent):
        return ChunkResult(
            kind="event",
            data=build_chunk(
                stream_id,
                created,
                model,
                event.message,
                finish_reason=FINISH_REASON_STOP if event.done else None,
                reasoning=event.reasoning,
                completion_tokens=event.used_token or 0,
            ),
        )

    if isinstance(event, UnparseableEvent):
        return ChunkResult(
            kind="diagnostic",
            data=build_chunk(
                stream_id,
                created,
                model,
                diagnostic_message("Failed to parse upstream event", event.error, event.text),
            ),
        )

    raise TypeError(f"Unknown upstream event: {event!r}")


def translate_chunk(
    raw_event: str,
    stream_id: str,
    created: int,
    model: str,
) -> Optional[ChunkResult]:
    """
    Translate one raw upstream event

    Returns:
        ChunkResult, or None for events without content
    """
    try:
        event = parse_upstream_event(raw_event)
        if event is None:
            return None
        result = translate_event(event, stream_id, created, model)
    except Exception as e:
        logger.exception("Unexpected error translating upstream event")
        return ChunkResult(
            kind="diagnostic",
            data=build_chunk(
                stream_id,
                created,
                model,
                diagnostic_message("Failed to translate upstream event", str(e), raw_event),
            ),
        )

    if result.kind == "diagnostic":
        logger.warning("Unparseable upstream event: %s", _preview(raw_event))
    return result


def diagnostic_message(summary: str, error: str, text: str) -> str:
    return f"[{summary}: {error}] {_preview(text)}"


def _preview(text: str) -> str:
    return text[:DIAGNOSTIC_PREVIEW_CHARS]


def _describe_validation_error(exc: ValidationError) -> str:
    errors = exc.errors(include_url=False)
    if not errors:
        return str(exc)
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "invalid payload")
    return f"{location}: {message}" if location else message

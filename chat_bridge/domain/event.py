"""
Stream Event Domain Model

Upstream stream events are modelled as a closed set of variants, one per
recognised shape. Downstream events follow the OpenAI chat.completion.chunk
schema.
"""

from dataclasses import dataclass
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# ============ Upstream events ============


@dataclass(frozen=True)
class TerminatorEvent:
    """Upstream end-of-stream sentinel ([DONE])"""


@dataclass(frozen=True)
class ErrorTextEvent:
    """Plain error text reported by upstream in place of a JSON payload"""

    text: str


@dataclass(frozen=True)
class DataEvent:
    """Structured upstream payload"""

    message: str = ""
    reasoning: Optional[str] = None
    done: bool = False
    used_token: Optional[int] = None


@dataclass(frozen=True)
class UnparseableEvent:
    """Payload that matched no known shape"""

    text: str
    error: str


UpstreamEvent = Union[TerminatorEvent, ErrorTextEvent, DataEvent, UnparseableEvent]


class UpstreamChunkPayload(BaseModel):
    """Wire shape of a structured upstream event"""

    message: Optional[str] = ""
    reasoning: Optional[str] = None
    done: Optional[bool] = False
    used_token: Optional[int] = Field(None, alias="usedToken")

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


# ============ Downstream events ============


class CompletionTokensDetails(BaseModel):
    reasoning_tokens: int = 0


class ChunkUsage(BaseModel):
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int
    completion_tokens_details: CompletionTokensDetails = Field(default_factory=CompletionTokensDetails)


class ChunkDelta(BaseModel):
    content: str = ""
    reasoning_content: Optional[str] = None
    role: Literal["assistant"] = "assistant"


class ChunkChoice(BaseModel):
    index: int = 0
    delta: ChunkDelta
    finish_reason: Optional[str] = None


class ChatCompletionChunk(BaseModel):
    """One downstream streaming event"""

    id: str
    object: Literal["chat.completion.chunk"] = "chat.completion.chunk"
    created: int
    model: str
    choices: list[ChunkChoice]
    usage: ChunkUsage


# ============ Translation result ============


ChunkResultKind = Literal["event", "diagnostic", "terminator"]


@dataclass(frozen=True)
class ChunkResult:
    """
    Tagged outcome of translating one upstream event

    kind:
        event: a regular downstream chunk
        diagnostic: a chunk describing a translation failure
        terminator: the downstream end-of-stream marker
    data: SSE text ready to be written to the client
    """

    kind: ChunkResultKind
    data: str

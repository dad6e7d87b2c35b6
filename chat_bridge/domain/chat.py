"""
Chat Domain Model

Downstream (OpenAI-style) request/response models and the upstream request shape.
"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ChatMessage(BaseModel):
    """Downstream chat message"""

    role: str = Field(..., description="Message role")
    content: Optional[str] = Field("", description="Message text")

    model_config = ConfigDict(frozen=True, extra="ignore")


class ChatRequest(BaseModel):
    """
    Downstream chat completion request

    Immutable once received; unknown fields are ignored.
    """

    model: Optional[str] = Field(None, description="Downstream model identifier")
    messages: list[ChatMessage] = Field(default_factory=list, description="Conversation messages")
    temperature: Optional[float] = Field(None, description="Sampling temperature")
    max_tokens: Optional[int] = Field(None, description="Max completion tokens")
    top_p: Optional[float] = Field(None, description="Nucleus sampling")
    frequency_penalty: Optional[float] = Field(None, description="Frequency penalty")
    stream: bool = Field(False, description="Stream the response as SSE")

    model_config = ConfigDict(frozen=True, extra="ignore")

    def first_user_text(self) -> Optional[str]:
        """Content of the first user message, None when there is none."""
        for message in self.messages:
            if message.role == "user":
                return message.content
        return None


class UpstreamMessage(BaseModel):
    """Upstream chat message ("content" is named "message" upstream)"""

    role: str
    message: str


class UpstreamRequest(BaseModel):
    """
    Upstream chat completion request

    Serialized with camelCase aliases: ``model_dump(by_alias=True)``.
    """

    chat_id: str = Field(..., description="Request-scoped chat identifier")
    conversation_id: str = Field(..., description="Conversation identifier, stable per credential")
    knowledge_base_id: Optional[str] = Field(None, description="Always null")
    messages: list[UpstreamMessage] = Field(default_factory=list)
    model_id: str = Field(..., description="Upstream model id")
    model: str = Field(..., description="Upstream model name")
    model_provider: str = Field(..., description="Upstream provider tag")
    max_tokens: int
    temperature: float
    top_p: float
    frequency_penalty: float
    top_k: int
    stream: bool = False

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        protected_namespaces=(),
    )

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class Usage(BaseModel):
    """Token usage block"""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class ResponseMessage(BaseModel):
    role: Literal["assistant"] = "assistant"
    content: str = ""
    reasoning_content: Optional[str] = None


class ResponseChoice(BaseModel):
    index: int = 0
    message: ResponseMessage
    finish_reason: Optional[str] = "stop"


class ChatResponse(BaseModel):
    """Downstream non-streaming chat completion"""

    id: str
    object: Literal["chat.completion"] = "chat.completion"
    created: int
    model: str
    choices: list[ResponseChoice]
    usage: Usage = Field(default_factory=Usage)

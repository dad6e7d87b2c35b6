"""
Request Translator

Converts a downstream chat completion request into the upstream request shape.
"""

from chat_bridge.common.utils import generate_chat_id
from chat_bridge.domain.chat import ChatRequest, UpstreamMessage, UpstreamRequest
from chat_bridge.services.model_table import ModelTable
from chat_bridge.services.session_service import SessionService

DEFAULT_MAX_TOKENS = 4000
DEFAULT_TEMPERATURE = 0.7
DEFAULT_TOP_P = 0.7
DEFAULT_FREQUENCY_PENALTY = 0.0
TOP_K = 50


class RequestTranslator:
    """
    Builds UpstreamRequest objects

    Values are passed through without validation; only missing sampling
    parameters are filled in.
    """

    def __init__(self, sessions: SessionService, models: ModelTable):
        self.sessions = sessions
        self.models = models

    async def translate(self, request: ChatRequest, credential: str) -> UpstreamRequest:
        """
        Translate a downstream request

        Args:
            request: Downstream request
            credential: Opaque upstream credential

        Returns:
            UpstreamRequest: Upstream request with a fresh chat id

        Raises:
            UpstreamError, SessionError: Conversation could not be created
        """
        conversation_id = await self.sessions.get_or_create(credential, request.first_user_text())
        descriptor = self.models.resolve(request.model)

        return UpstreamRequest(
            chat_id=generate_chat_id(),
            conversation_id=conversation_id,
            knowledge_base_id=None,
            messages=[
                UpstreamMessage(role=message.role, message=message.content or "")
                for message in request.messages
            ],
            model_id=descriptor.id,
            model=descriptor.name,
            model_provider=descriptor.provider,
            max_tokens=_default(request.max_tokens, DEFAULT_MAX_TOKENS),
            temperature=_default(request.temperature, DEFAULT_TEMPERATURE),
            top_p=_default(request.top_p, DEFAULT_TOP_P),
            frequency_penalty=_default(request.frequency_penalty, DEFAULT_FREQUENCY_PENALTY),
            top_k=TOP_K,
            stream=request.stream,
        )


def _default(value, fallback):
    return fallback if value is None else value

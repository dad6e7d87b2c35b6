"""Proxy Core Service Module

Runs one downstream chat completion against the upstream service."""

import logging
from typing import Any

from chat_bridge.common.utils import generate_completion_id, mask_string, unix_timestamp
from chat_bridge.domain.chat import ChatRequest, ChatResponse, ResponseChoice, ResponseMessage, Usage
from chat_bridge.providers.upstream_client import UpstreamClient
from chat_bridge.services.request_translator import RequestTranslator
from chat_bridge.services.stream_driver import StreamDriver

logger = logging.getLogger(__name__)


class ProxyService:
    """
    Proxy Core Service

    Handles the complete flow of a proxied request:
    1. Resolve the conversation and translate the request
    2. Call the upstream chat endpoint
    3. Reshape the JSON body, or hand the byte stream to a StreamDriver
    """

    def __init__(self, translator: RequestTranslator, client: UpstreamClient):
        self.translator = translator
        self.client = client

    async def complete(self, request: ChatRequest, credential: str) -> ChatResponse:
        """
        Process a non-streaming request

        Raises:
            UpstreamError: Upstream answered with a non-2xx status
            SessionError: Conversation could not be created
        """
        upstream_request = await self.translator.translate(request, credential)
        logger.debug(
            "Chat completion: credential=%s model=%s upstream_model=%s chat_id=%s",
            mask_string(credential),
            request.model,
            upstream_request.model,
            upstream_request.chat_id,
        )
        body = await self.client.chat(credential, upstream_request.to_payload())
        return reshape_response(body, request.model or upstream_request.model)

    async def open_stream(self, request: ChatRequest, credential: str) -> StreamDriver:
        """
        Process a streaming request

        The upstream call is made before returning, so upstream HTTP errors are
        raised here rather than in the middle of the response.

        Returns:
            StreamDriver: Driver whose stream() feeds the StreamingResponse
        """
        upstream_request = await self.translator.translate(request, credential)
        logger.debug(
            "Chat completion stream: credential=%s model=%s upstream_model=%s chat_id=%s",
            mask_string(credential),
            request.model,
            upstream_request.model,
            upstream_request.chat_id,
        )
        upstream = await self.client.open_stream(credential, upstream_request.to_payload())
        return StreamDriver(
            model=request.model or upstream_request.model,
            upstream=upstream.aiter_bytes(),
            on_close=upstream.aclose,
        )


def reshape_response(body: Any, model: str) -> ChatResponse:
    """
    Reshape an upstream JSON body into a chat.completion

    The payload is read from "result" when upstream wraps it in an envelope;
    a text "result" is the reply itself.
    Usage is reported as zeros: upstream token counts are not carried over.
    """
    content = ""
    reasoning = None
    if isinstance(body, dict) and isinstance(body.get("result"), str):
        content = body["result"]
    elif isinstance(body, dict):
        data = body.get("result") if isinstance(body.get("result"), dict) else body
        message = data.get("message")
        content = message if isinstance(message, str) else ""
        if isinstance(data.get("reasoning"), str) and data["reasoning"]:
            reasoning = data["reasoning"]
    elif isinstance(body, str):
        content = body

    return ChatResponse(
        id=generate_completion_id(),
        created=unix_timestamp(),
        model=model,
        choices=[
            ResponseChoice(
                message=ResponseMessage(content=content, reasoning_content=reasoning),
                finish_reason="stop",
            )
        ],
        usage=Usage(),
    )

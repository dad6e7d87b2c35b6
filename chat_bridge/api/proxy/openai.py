"""
OpenAI Proxy API

Provides OpenAI-compatible API endpoints.
"""

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse, StreamingResponse

from chat_bridge.api.deps import Credential, ModelTableDep, ProxyServiceDep
from chat_bridge.common.errors import AppError
from chat_bridge.common.upstream_headers import EVENT_STREAM_CONTENT_TYPE
from chat_bridge.domain.chat import ChatRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Proxy - OpenAI"])

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "X-Accel-Buffering": "no",
}


@router.get("/v1/models")
async def list_models(models: ModelTableDep):
    """
    OpenAI Models API (List)

    Returns the downstream model identifiers of the mapping table.
    """
    return {
        "object": "list",
        "data": [
            {
                "id": model_id,
                "object": "model",
                "owned_by": models.resolve(model_id).provider.lower(),
            }
            for model_id in models.model_ids()
        ],
    }


@router.post("/v1/chat/completions")
async def chat_completions(
    body: ChatRequest,
    credential: Credential,
    service: ProxyServiceDep,
):
    """
    OpenAI Chat Completions API Proxy

    Streams text/event-stream when "stream" is true, otherwise returns a
    single chat.completion object.
    """
    try:
        if body.stream:
            driver = await service.open_stream(body, credential)
            return StreamingResponse(
                driver.stream(),
                media_type=EVENT_STREAM_CONTENT_TYPE,
                headers=STREAM_HEADERS,
            )

        response = await service.complete(body, credential)
        return JSONResponse(content=response.model_dump())

    except AppError as e:
        return JSONResponse(content=e.to_dict(), status_code=e.status_code)
    except Exception as e:
        # Unexpected errors return 500
        logger.error(f"Unexpected error: {str(e)}", exc_info=True)
        return JSONResponse(
            content={
                "error": {
                    "message": "Internal server error",
                    "type": "internal_error",
                    "code": "internal_error",
                }
            },
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

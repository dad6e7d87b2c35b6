"""
Test Configuration Module
"""

import json
from typing import AsyncIterator, Callable, Optional

import httpx
import pytest

from chat_bridge.config import Settings
from chat_bridge.providers.upstream_client import UpstreamClient
from chat_bridge.repositories.memory import InMemorySessionRepository
from chat_bridge.services import ModelTable, ProxyService, RequestTranslator, SessionService
from chat_bridge.services.model_table import BUILTIN_MODELS

UPSTREAM_BASE_URL = "http://upstream.test"


async def iter_fragments(fragments: list[bytes]) -> AsyncIterator[bytes]:
    for fragment in fragments:
        yield fragment


class FakeUpstream:
    """
    In-process upstream service for httpx.MockTransport

    Records every request and answers from configurable factories.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.session_requests: list[httpx.Request] = []
        self.chat_requests: list[httpx.Request] = []
        self.conversation_ids = iter(f"conv-{i}" for i in range(1, 1000))

        self.session_response: Optional[Callable[[], httpx.Response]] = None
        self.chat_response: Callable[[], httpx.Response] = lambda: httpx.Response(
            200, json={"message": "Hello there", "reasoning": None, "usedToken": 12}
        )
        self.stream_fragments: list[bytes] = [
            b'data:{"message":"Hel","done":false,"usedToken":1}\n\n',
            b'data:{"message":"lo","done":true,"usedToken":2}\n\n',
            b"data:[DONE]\n\n",
        ]
        self.stream_status = 200

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == self.settings.UPSTREAM_SESSION_PATH:
            self.session_requests.append(request)
            if self.session_response is not None:
                return self.session_response()
            return httpx.Response(
                200,
                json={"code": 200, "message": "success", "result": {"id": next(self.conversation_ids)}},
            )

        if request.url.path == self.settings.UPSTREAM_CHAT_PATH:
            self.chat_requests.append(request)
            if json.loads(request.content).get("stream"):
                if self.stream_status != 200:
                    return httpx.Response(self.stream_status, json={"message": "upstream says no"})
                return httpx.Response(
                    200,
                    headers={"Content-Type": "text/event-stream"},
                    content=iter_fragments(self.stream_fragments),
                )
            return self.chat_response()

        return httpx.Response(404, text="unknown upstream path")

    def last_chat_body(self) -> dict:
        return json.loads(self.chat_requests[-1].content)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        UPSTREAM_BASE_URL=UPSTREAM_BASE_URL,
        UPSTREAM_ORIGIN="https://chat.upstream.test",
        UPSTREAM_REFERER="https://chat.upstream.test/",
        UPSTREAM_USER_AGENT="test-agent/1.0",
        MODEL_TABLE_FILE=None,
    )


@pytest.fixture
def fake_upstream(settings) -> FakeUpstream:
    return FakeUpstream(settings)


@pytest.fixture
def upstream_client(settings, fake_upstream) -> UpstreamClient:
    return UpstreamClient(settings=settings, transport=httpx.MockTransport(fake_upstream.handler))


@pytest.fixture
def session_service(settings, upstream_client) -> SessionService:
    return SessionService(InMemorySessionRepository(), upstream_client, settings=settings)


@pytest.fixture
def model_table() -> ModelTable:
    return ModelTable(BUILTIN_MODELS)


@pytest.fixture
def proxy_service(session_service, model_table, upstream_client) -> ProxyService:
    return ProxyService(RequestTranslator(session_service, model_table), upstream_client)

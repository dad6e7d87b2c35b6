"""
Session Resolver Unit Tests
"""

import asyncio
import json

import httpx
import pytest

from chat_bridge.common.errors import SessionError, UpstreamError
from chat_bridge.repositories.memory import InMemorySessionRepository
from chat_bridge.services.session_service import SessionService


@pytest.mark.asyncio
async def test_creates_once_then_reuses(session_service, fake_upstream):
    first = await session_service.get_or_create("token-a", "hello")
    second = await session_service.get_or_create("token-a", "something else")
    third = await session_service.get_or_create("token-a", None)

    assert first == second == third == "conv-1"
    assert len(fake_upstream.session_requests) == 1


@pytest.mark.asyncio
async def test_distinct_credentials_get_distinct_conversations(session_service, fake_upstream):
    a = await session_service.get_or_create("token-a", "hi")
    b = await session_service.get_or_create("token-b", "hi")

    assert a != b
    assert len(fake_upstream.session_requests) == 2


@pytest.mark.asyncio
async def test_session_request_shape(session_service, fake_upstream, settings):
    await session_service.get_or_create("Bearer secret", "Explain quantum entanglement simply")

    request = fake_upstream.session_requests[0]
    assert request.method == "POST"
    assert str(request.url) == f"{settings.UPSTREAM_BASE_URL}{settings.UPSTREAM_SESSION_PATH}"
    assert request.headers["Authorization"] == "Bearer secret"
    assert request.headers["Origin"] == settings.UPSTREAM_ORIGIN
    assert request.headers["Referer"] == settings.UPSTREAM_REFERER
    assert request.headers["User-Agent"] == settings.UPSTREAM_USER_AGENT
    assert json.loads(request.content) == {
        "type": settings.UPSTREAM_SESSION_TYPE,
        "title": "Explain quantum enta...",
    }


@pytest.mark.asyncio
async def test_default_title_without_user_message(session_service, fake_upstream, settings):
    await session_service.get_or_create("token", None)
    assert json.loads(fake_upstream.session_requests[0].content)["title"] == settings.DEFAULT_SESSION_TITLE


@pytest.mark.asyncio
async def test_concurrent_first_requests_create_one_session(session_service, fake_upstream):
    results = await asyncio.gather(*(session_service.get_or_create("token", "hi") for _ in range(10)))

    assert set(results) == {"conv-1"}
    assert len(fake_upstream.session_requests) == 1


@pytest.mark.asyncio
async def test_http_failure_raises_upstream_error(session_service, fake_upstream):
    fake_upstream.session_response = lambda: httpx.Response(403, json={"message": "forbidden"})

    with pytest.raises(UpstreamError) as exc_info:
        await session_service.get_or_create("token", "hi")

    assert exc_info.value.status_code == 403
    assert exc_info.value.details == {"message": "forbidden"}
    assert "forbidden" in exc_info.value.message


@pytest.mark.asyncio
async def test_failure_is_not_cached_and_not_retried(session_service, fake_upstream):
    fake_upstream.session_response = lambda: httpx.Response(500, text="boom")

    with pytest.raises(UpstreamError):
        await session_service.get_or_create("token", "hi")
    assert len(fake_upstream.session_requests) == 1

    fake_upstream.session_response = None
    assert await session_service.get_or_create("token", "hi") == "conv-1"
    assert len(fake_upstream.session_requests) == 2


@pytest.mark.asyncio
async def test_body_failure_code_raises_session_error(session_service, fake_upstream):
    fake_upstream.session_response = lambda: httpx.Response(
        200, json={"code": 401, "message": "token expired", "result": None}
    )

    with pytest.raises(SessionError) as exc_info:
        await session_service.get_or_create("token", "hi")

    assert "token expired" in exc_info.value.message
    assert exc_info.value.status_code == 502


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body, expected",
    [
        ({"code": 200, "message": "ok", "result": {"id": "abc"}}, "abc"),
        ({"code": 200, "message": "ok", "result": "xyz"}, "xyz"),
        ({"code": "200", "message": "ok", "result": 12345}, "12345"),
    ],
)
async def test_result_shapes(settings, upstream_client, fake_upstream, body, expected):
    fake_upstream.session_response = lambda: httpx.Response(200, json=body)
    service = SessionService(InMemorySessionRepository(), upstream_client, settings=settings)

    assert await service.get_or_create("token", "hi") == expected


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        lambda: httpx.Response(200, text="not json"),
        lambda: httpx.Response(200, json={"code": 200, "message": "ok", "result": None}),
        lambda: httpx.Response(200, json={"code": 200, "message": "ok", "result": {"name": "x"}}),
    ],
)
async def test_unusable_bodies_raise_session_error(session_service, fake_upstream, response):
    fake_upstream.session_response = response

    with pytest.raises(SessionError):
        await session_service.get_or_create("token", "hi")

"""
Chat Completions API Integration Tests

Runs the FastAPI app in-process with the proxy service wired to a mocked
upstream.
"""

import json

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from chat_bridge.api.deps import get_proxy_service
from chat_bridge.common.sse import TERMINATOR
from chat_bridge.main import app
from chat_bridge.services import get_model_table

CHAT_BODY = {"model": "gpt-4o", "messages": [{"role": "user", "content": "hello"}]}


@pytest_asyncio.fixture
async def client(proxy_service, model_table):
    app.dependency_overrides[get_proxy_service] = lambda: proxy_service
    app.dependency_overrides[get_model_table] = lambda: model_table

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides = {}


@pytest.mark.asyncio
async def test_root_returns_liveness_text(client):
    resp = await client.get("/")

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/plain")
    assert resp.text
    assert resp.headers["access-control-allow-origin"] == "*"


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.json() == {"status": "healthy"}


@pytest.mark.asyncio
async def test_missing_authorization_is_rejected(client, fake_upstream):
    resp = await client.post("/v1/chat/completions", json=CHAT_BODY)

    assert resp.status_code == 401
    assert resp.json()["error"]["type"] == "authentication_error"
    assert resp.headers["access-control-allow-origin"] == "*"
    assert fake_upstream.session_requests == []
    assert fake_upstream.chat_requests == []


@pytest.mark.asyncio
async def test_non_streaming_completion(client, fake_upstream):
    resp = await client.post("/v1/chat/completions", json=CHAT_BODY, headers={"Authorization": "Bearer abc"})

    assert resp.status_code == 200
    data = resp.json()
    assert data["object"] == "chat.completion"
    assert data["model"] == "gpt-4o"
    assert data["choices"][0]["message"]["content"] == "Hello there"
    assert fake_upstream.chat_requests[-1].headers["Authorization"] == "Bearer abc"


@pytest.mark.asyncio
async def test_streaming_completion(client, fake_upstream):
    resp = await client.post(
        "/v1/chat/completions",
        json={**CHAT_BODY, "stream": True},
        headers={"Authorization": "Bearer abc"},
    )

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/event-stream")
    assert resp.headers["cache-control"] == "no-cache"
    assert resp.headers["access-control-allow-origin"] == "*"

    body = resp.text
    assert body.endswith(TERMINATOR)
    events = [e for e in body.split("\n\n") if e]
    payloads = [json.loads(e[len("data: "):]) for e in events if e != "data: [DONE]"]
    assert "".join(p["choices"][0]["delta"]["content"] for p in payloads) == "Hello"
    assert len({p["id"] for p in payloads}) == 1


@pytest.mark.asyncio
async def test_upstream_error_status_is_propagated(client, fake_upstream):
    fake_upstream.chat_response = lambda: httpx.Response(402, json={"message": "no credits"})

    resp = await client.post("/v1/chat/completions", json=CHAT_BODY, headers={"Authorization": "t"})

    assert resp.status_code == 402
    error = resp.json()["error"]
    assert error["status"] == 402
    assert error["statusText"] == "Payment Required"
    assert error["details"] == {"message": "no credits"}


@pytest.mark.asyncio
async def test_streaming_upstream_error_is_json(client, fake_upstream):
    fake_upstream.stream_status = 403

    resp = await client.post(
        "/v1/chat/completions",
        json={**CHAT_BODY, "stream": True},
        headers={"Authorization": "t"},
    )

    assert resp.status_code == 403
    assert resp.headers["content-type"].startswith("application/json")
    assert resp.json()["error"]["details"] == {"message": "upstream says no"}


@pytest.mark.asyncio
async def test_missing_model_uses_default_descriptor(client, fake_upstream):
    resp = await client.post(
        "/v1/chat/completions",
        json={"messages": [{"role": "user", "content": "hello"}]},
        headers={"Authorization": "t"},
    )

    assert resp.status_code == 200
    assert resp.json()["model"] == "grok-3-reasoning"
    body = fake_upstream.last_chat_body()
    assert body["modelId"] == "9"
    assert body["modelProvider"] == "GROK"


@pytest.mark.asyncio
async def test_malformed_body_is_rejected(client, fake_upstream):
    resp = await client.post(
        "/v1/chat/completions",
        json={"model": "gpt-4o", "messages": "not a list"},
        headers={"Authorization": "t"},
    )

    assert resp.status_code == 422
    assert resp.json()["error"]["type"] == "validation_error"
    assert fake_upstream.chat_requests == []


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["/v1/chat/completions", "/anything/else"])
async def test_preflight(client, path):
    resp = await client.options(path)

    assert resp.status_code == 204
    assert resp.headers["access-control-allow-origin"] == "*"
    assert resp.headers["access-control-max-age"] == "86400"
    assert "POST" in resp.headers["access-control-allow-methods"]


@pytest.mark.asyncio
async def test_unknown_route_is_plaintext_404(client):
    resp = await client.get("/v1/unknown")

    assert resp.status_code == 404
    assert resp.headers["content-type"].startswith("text/plain")
    assert resp.text == "Not Found: /v1/unknown"
    assert resp.headers["access-control-allow-origin"] == "*"


@pytest.mark.asyncio
async def test_wrong_method_is_plaintext_404(client):
    resp = await client.get("/v1/chat/completions")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_list_models(client):
    resp = await client.get("/v1/models")

    data = resp.json()
    assert data["object"] == "list"
    assert {m["id"] for m in data["data"]} == {"gpt-4o", "grok-3-reasoning"}
    assert {m["owned_by"] for m in data["data"]} == {"openai", "grok"}

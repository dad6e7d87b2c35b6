"""
Upstream Chat Service Client

Sends session creation and chat completion requests to the upstream service.
"""

import json
import logging
from typing import Any, AsyncGenerator, Optional

import httpx

from chat_bridge.common.errors import UpstreamError
from chat_bridge.common.upstream_headers import EVENT_STREAM_CONTENT_TYPE, build_upstream_headers
from chat_bridge.common.utils import mask_string
from chat_bridge.config import Settings, get_settings

logger = logging.getLogger(__name__)


class UpstreamStream:
    """
    An open upstream streaming response

    Owns the httpx client and response; aclose() releases both.
    """

    def __init__(self, client: httpx.AsyncClient, response: httpx.Response):
        self._client = client
        self._response = response

    async def aiter_bytes(self) -> AsyncGenerator[bytes, None]:
        async for chunk in self._response.aiter_bytes():
            yield chunk

    async def aclose(self) -> None:
        try:
            await self._response.aclose()
        finally:
            await self._client.aclose()


class UpstreamClient:
    """
    Upstream Chat Service Client

    Every call carries the caller's credential plus fixed browser headers.
    Non-success statuses and transport failures are raised as UpstreamError.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize client

        Args:
            settings: Configuration, defaults to get_settings()
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        self.settings = settings or get_settings()
        self._transport = transport

    def _url(self, path: str) -> str:
        return f"{self.settings.UPSTREAM_BASE_URL.rstrip('/')}{path}"

    def _new_client(self, timeout: httpx.Timeout) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout, transport=self._transport)

    async def create_session(self, credential: str, title: str) -> Any:
        """
        Create an upstream conversation

        Args:
            credential: Opaque upstream credential
            title: Conversation title

        Returns:
            Any: Parsed response body ({code, message, result} on success)

        Raises:
            UpstreamError: Non-2xx status or transport failure
        """
        body = {"type": self.settings.UPSTREAM_SESSION_TYPE, "title": title}
        return await self._post_json(self.settings.UPSTREAM_SESSION_PATH, credential, body)

    async def chat(self, credential: str, payload: dict[str, Any]) -> Any:
        """
        Send a non-streaming chat completion request

        Returns:
            Any: Parsed JSON body, or raw text when the body is not JSON

        Raises:
            UpstreamError: Non-2xx status or transport failure
        """
        return await self._post_json(self.settings.UPSTREAM_CHAT_PATH, credential, payload)

    async def open_stream(self, credential: str, payload: dict[str, Any]) -> UpstreamStream:
        """
        Send a streaming chat completion request

        The status is checked before returning, so a non-2xx upstream answer
        surfaces as UpstreamError before any downstream bytes are written.

        Returns:
            UpstreamStream: Open stream, to be closed by the caller

        Raises:
            UpstreamError: Non-2xx status or transport failure
        """
        url = self._url(self.settings.UPSTREAM_CHAT_PATH)
        headers = build_upstream_headers(credential, accept=EVENT_STREAM_CONTENT_TYPE, settings=self.settings)
        logger.debug(
            "Upstream Stream Request: url=%s credential=%s body=%s",
            url,
            mask_string(credential),
            json.dumps(payload, ensure_ascii=False),
        )

        timeout = httpx.Timeout(
            self.settings.HTTP_TIMEOUT,
            read=self.settings.STREAM_READ_TIMEOUT,
        )
        client = self._new_client(timeout)
        try:
            request = client.build_request("POST", url, headers=headers, json=payload)
            response = await client.send(request, stream=True)
        except httpx.HTTPError as e:
            await client.aclose()
            raise self._transport_error(e) from e

        if not response.is_success:
            try:
                try:
                    await response.aread()
                    error = self._status_error(response)
                except httpx.HTTPError as e:
                    # Error body unreadable, report the status alone
                    logger.warning(
                        "Upstream error body unreadable: url=%s status=%s error=%s",
                        url,
                        response.status_code,
                        e,
                    )
                    error = UpstreamError(
                        message=f"Upstream request failed with status {response.status_code}",
                        status_code=response.status_code,
                        status_text=response.reason_phrase,
                    )
            finally:
                await response.aclose()
                await client.aclose()
            raise error

        return UpstreamStream(client, response)

    async def _post_json(self, path: str, credential: str, body: dict[str, Any]) -> Any:
        url = self._url(path)
        headers = build_upstream_headers(credential, settings=self.settings)
        logger.debug(
            "Upstream Request: url=%s credential=%s body=%s",
            url,
            mask_string(credential),
            json.dumps(body, ensure_ascii=False),
        )

        try:
            async with self._new_client(httpx.Timeout(self.settings.HTTP_TIMEOUT)) as client:
                response = await client.post(url, headers=headers, json=body)
        except httpx.HTTPError as e:
            raise self._transport_error(e) from e

        if not response.is_success:
            raise self._status_error(response)

        try:
            return response.json()
        except json.JSONDecodeError:
            return response.text

    @staticmethod
    def _status_error(response: httpx.Response) -> UpstreamError:
        try:
            details: Any = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            details = response.text

        message = f"Upstream request failed with status {response.status_code}"
        if isinstance(details, dict):
            upstream_message = details.get("message") or details.get("error")
            if isinstance(upstream_message, str) and upstream_message:
                message = f"{message}: {upstream_message}"

        logger.warning(
            "Upstream error: url=%s status=%s body=%s",
            response.request.url,
            response.status_code,
            response.text[:500],
        )
        return UpstreamError(
            message=message,
            details=details,
            status_code=response.status_code,
            status_text=response.reason_phrase,
        )

    @staticmethod
    def _transport_error(exc: httpx.HTTPError) -> UpstreamError:
        if isinstance(exc, httpx.TimeoutException):
            logger.warning("Upstream timeout: %s", exc)
            return UpstreamError(
                message=f"Request timeout: {str(exc)}",
                code="upstream_timeout",
                status_code=504,
                status_text="Gateway Timeout",
            )
        logger.warning("Upstream request error: %s", exc)
        return UpstreamError(
            message=f"Request error: {str(exc)}",
            code="upstream_unreachable",
            status_code=502,
            status_text="Bad Gateway",
        )

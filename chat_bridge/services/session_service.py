"""
Session Resolver Service Module

Maps an opaque credential to a persistent upstream conversation.
"""

import asyncio
import logging
from typing import Any, Optional

from chat_bridge.common.errors import SessionError
from chat_bridge.common.utils import build_session_title, mask_string
from chat_bridge.config import Settings, get_settings
from chat_bridge.domain.session import SessionEntry
from chat_bridge.providers.upstream_client import UpstreamClient
from chat_bridge.repositories.session_repo import SessionRepository

logger = logging.getLogger(__name__)


class SessionService:
    """
    Session Resolver

    Creates one upstream conversation per credential on first use and reuses it
    for the rest of the process lifetime. Creation is serialized per credential
    with an asyncio.Lock, so concurrent first requests for the same credential
    create exactly one upstream conversation. Requests for different credentials
    never wait on each other.
    """

    def __init__(
        self,
        repo: SessionRepository,
        client: UpstreamClient,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize Service

        Args:
            repo: Session store, process-scoped
            client: Upstream client used for session creation
            settings: Configuration, defaults to get_settings()
        """
        self.repo = repo
        self.client = client
        self.settings = settings or get_settings()
        self._locks: dict[str, asyncio.Lock] = {}

    async def get_or_create(self, credential: str, seed_text: Optional[str]) -> str:
        """
        Get the conversation id bound to a credential, creating it if needed

        Args:
            credential: Opaque upstream credential
            seed_text: First user message, used for the conversation title

        Returns:
            str: Upstream conversation id

        Raises:
            UpstreamError: Session endpoint answered with a non-2xx status
            SessionError: Session endpoint reported failure in its body
        """
        entry = await self.repo.get(credential)
        if entry is not None:
            return entry.conversation_id

        lock = self._locks.setdefault(credential, asyncio.Lock())
        async with lock:
            # Another request may have created it while we waited
            entry = await self.repo.get(credential)
            if entry is not None:
                return entry.conversation_id

            title = build_session_title(seed_text, self.settings.DEFAULT_SESSION_TITLE)
            body = await self.client.create_session(credential, title)
            conversation_id = self._parse_conversation_id(body)

            entry = await self.repo.set(
                SessionEntry(
                    credential=credential,
                    conversation_id=conversation_id,
                    title=title,
                )
            )
            logger.info(
                "Created upstream conversation: credential=%s conversation_id=%s title=%r",
                mask_string(credential),
                entry.conversation_id,
                title,
            )
            return entry.conversation_id

    def _parse_conversation_id(self, body: Any) -> str:
        """
        Extract the conversation id from a {code, message, result} body

        result is either the id itself or an object carrying it under "id".
        """
        if not isinstance(body, dict):
            raise SessionError(
                message="Unexpected session creation response",
                details={"body": str(body)[:500]},
            )

        code = body.get("code")
        if str(code) != str(self.settings.UPSTREAM_SESSION_SUCCESS_CODE):
            raise SessionError(
                message=f"Session creation failed: {body.get('message') or 'unknown error'}",
                details={"code": code, "message": body.get("message")},
            )

        result = body.get("result")
        if isinstance(result, dict):
            result = result.get("id") or result.get("conversationId")
        if isinstance(result, (str, int)) and not isinstance(result, bool) and str(result):
            return str(result)

        raise SessionError(
            message="Session creation response carries no conversation id",
            details={"result": body.get("result")},
        )

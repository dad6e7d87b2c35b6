"""
Session Store Repository In-Memory Implementation

Process-scoped store: entries live until the process exits, with no eviction
and no TTL.
"""

from typing import Optional

from chat_bridge.domain.session import SessionEntry
from chat_bridge.repositories.session_repo import SessionRepository


class InMemorySessionRepository(SessionRepository):
    """
    Session Store Repository In-Memory Implementation

    Backed by a plain dict. All access happens on the event loop thread, so
    individual operations need no locking.
    """

    def __init__(self) -> None:
        self._entries: dict[str, SessionEntry] = {}

    async def get(self, credential: str) -> Optional[SessionEntry]:
        return self._entries.get(credential)

    async def set(self, entry: SessionEntry) -> SessionEntry:
        return self._entries.setdefault(entry.credential, entry)

"""
Session Store Repository Interface

Defines the data access interface for credential to conversation bindings.
"""

from abc import ABC, abstractmethod
from typing import Optional

from chat_bridge.domain.session import SessionEntry


class SessionRepository(ABC):
    """Session Store Repository Interface"""

    @abstractmethod
    async def get(self, credential: str) -> Optional[SessionEntry]:
        """
        Get the session bound to a credential

        Args:
            credential: Opaque upstream credential

        Returns:
            SessionEntry if the credential has one, None otherwise
        """
        pass

    @abstractmethod
    async def set(self, entry: SessionEntry) -> SessionEntry:
        """
        Bind a session to its credential

        Implementations never replace an existing binding: when the credential
        is already bound, the stored entry is returned unchanged.

        Args:
            entry: Session to store

        Returns:
            SessionEntry: The entry bound to the credential after the call
        """
        pass

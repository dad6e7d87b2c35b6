"""
Repository Module Initialization
"""

from chat_bridge.repositories.session_repo import SessionRepository
from chat_bridge.repositories.memory import InMemorySessionRepository

__all__ = [
    "SessionRepository",
    "InMemorySessionRepository",
]

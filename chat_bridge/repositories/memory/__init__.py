"""
In-Memory Repository Implementations
"""

from chat_bridge.repositories.memory.session_repo import InMemorySessionRepository

__all__ = ["InMemorySessionRepository"]

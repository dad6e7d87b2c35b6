"""
Domain Model Module
"""

from chat_bridge.domain.chat import ChatMessage, ChatRequest, ChatResponse, UpstreamMessage, UpstreamRequest
from chat_bridge.domain.model import ModelDescriptor
from chat_bridge.domain.session import SessionEntry

__all__ = [
    "ChatMessage",
    "ChatRequest",
    "ChatResponse",
    "UpstreamMessage",
    "UpstreamRequest",
    "ModelDescriptor",
    "SessionEntry",
]

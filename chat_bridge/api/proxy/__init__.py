"""
Proxy API Module Initialization
"""

from chat_bridge.api.proxy.openai import router as openai_router

__all__ = [
    "openai_router",
]

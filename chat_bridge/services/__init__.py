"""
Service Layer Module Initialization
"""

from chat_bridge.services.model_table import ModelTable, get_model_table
from chat_bridge.services.session_service import SessionService
from chat_bridge.services.request_translator import RequestTranslator
from chat_bridge.services.stream_driver import StreamDriver
from chat_bridge.services.proxy_service import ProxyService

__all__ = [
    "ModelTable",
    "get_model_table",
    "SessionService",
    "RequestTranslator",
    "StreamDriver",
    "ProxyService",
]

"""
Middleware Package

Contains application middleware components.
"""

from chat_bridge.middleware.cors import PermissiveCORSMiddleware

__all__ = ["PermissiveCORSMiddleware"]

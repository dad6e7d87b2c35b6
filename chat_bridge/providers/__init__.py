"""
Upstream Client Module Initialization
"""

from chat_bridge.providers.upstream_client import UpstreamClient, UpstreamStream

__all__ = [
    "UpstreamClient",
    "UpstreamStream",
]

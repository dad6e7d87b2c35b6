"""
API Dependency Injection Module

Provides the dependencies required by FastAPI routes.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Header

from chat_bridge.common.errors import AuthenticationError
from chat_bridge.providers.upstream_client import UpstreamClient
from chat_bridge.repositories.memory import InMemorySessionRepository
from chat_bridge.services import (
    ModelTable,
    ProxyService,
    RequestTranslator,
    SessionService,
    get_model_table,
)


# ============ Process-wide singletons ============


@lru_cache()
def get_upstream_client() -> UpstreamClient:
    """Get upstream client"""
    return UpstreamClient()


@lru_cache()
def get_session_service() -> SessionService:
    """
    Get session service

    Shared by every request so the credential cache and its creation locks
    live for the whole process.
    """
    return SessionService(InMemorySessionRepository(), get_upstream_client())


# ============ Service dependencies ============


def get_proxy_service() -> ProxyService:
    """Get proxy service"""
    translator = RequestTranslator(get_session_service(), get_model_table())
    return ProxyService(translator, get_upstream_client())


# ============ Credential dependency ============


async def get_credential(
    authorization: str = Header(None, description="Upstream credential"),
) -> str:
    """
    Get the caller's upstream credential

    The value is opaque and forwarded to upstream unmodified.

    Raises:
        AuthenticationError: Authorization header missing or blank
    """
    if not authorization or not authorization.strip():
        raise AuthenticationError(message="Missing Authorization header")
    return authorization


# Dependency type aliases
ProxyServiceDep = Annotated[ProxyService, Depends(get_proxy_service)]
ModelTableDep = Annotated[ModelTable, Depends(get_model_table)]
Credential = Annotated[str, Depends(get_credential)]

"""
CORS Middleware Module

Browser clients call the proxy from arbitrary origins: every response allows
any origin, and every OPTIONS request is answered as a preflight without
reaching the routes.
"""

from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

CORS_MAX_AGE_SECONDS = 86400

ALLOW_ORIGIN_HEADERS = {"Access-Control-Allow-Origin": "*"}

PREFLIGHT_HEADERS = {
    **ALLOW_ORIGIN_HEADERS,
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "*",
    "Access-Control-Max-Age": str(CORS_MAX_AGE_SECONDS),
}


class PermissiveCORSMiddleware(BaseHTTPMiddleware):
    """Answer preflights and stamp Access-Control-Allow-Origin on responses."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=204, headers=PREFLIGHT_HEADERS)

        response = await call_next(request)
        for key, value in ALLOW_ORIGIN_HEADERS.items():
            response.headers.setdefault(key, value)
        return response

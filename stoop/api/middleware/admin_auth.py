"""
Admin authentication middleware.

Validates ``Authorization: Bearer <key>`` headers on ``/api/v1/`` routes
when an admin API key is configured. The public page, media files, health
and docs endpoints are never guarded.
"""

import secrets

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp


def _unauthorized() -> JSONResponse:
    return JSONResponse(
        status_code=401,
        content={"error": "Invalid API key", "detail": "Invalid API key", "code": "AUTH_REQUIRED"},
    )


class AdminAuthMiddleware(BaseHTTPMiddleware):
    """Enforce Bearer token auth on /api/v1/ routes when *api_key* is set."""

    _OPEN_PATHS = ("/api/v1/health",)

    def __init__(self, app: ASGIApp, api_key: str = "") -> None:
        super().__init__(app)
        self._api_key = api_key

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        # No key configured: open admin API (local development)
        if not self._api_key:
            return await call_next(request)

        path = request.url.path
        if not path.startswith("/api/v1/") or path in self._OPEN_PATHS:
            return await call_next(request)

        # CORS preflight carries no credentials
        if request.method == "OPTIONS":
            return await call_next(request)

        auth_header = request.headers.get("authorization", "")
        if not auth_header.startswith("Bearer "):
            return _unauthorized()

        token = auth_header[len("Bearer ") :]
        if not secrets.compare_digest(token, self._api_key):
            return _unauthorized()

        return await call_next(request)

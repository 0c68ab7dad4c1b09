"""Local authentication middleware.

Checks X-Local-Token header on all /api/* paths except /api/health.
"""

from __future__ import annotations

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from app.services.local_auth import get_or_create_token, verify_local_token

_PUBLIC_PATHS = {"/api/health"}


class LocalAuthMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        path = request.url.path

        # Static renderer files are public
        if not path.startswith("/api/") or path in _PUBLIC_PATHS:
            return await call_next(request)

        # CORS preflight never carries the token
        if request.method == "OPTIONS":
            return await call_next(request)

        if get_or_create_token() is None:
            return await call_next(request)

        token = request.headers.get("X-Local-Token", "")
        if not token or not verify_local_token(token):
            return JSONResponse(
                status_code=401,
                content={"detail": "Invalid or missing local auth token"},
            )

        return await call_next(request)

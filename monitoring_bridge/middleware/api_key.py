"""Shared-secret authentication.

When API_KEY is configured, every request (including OPTIONS and
unknown paths) must carry ``X-API-Key`` with exactly that value.
Anything else is answered here with a 401 and never reaches CORS
handling, routing, or the state provider.
"""

from __future__ import annotations

import hmac
import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from monitoring_bridge.core.metrics import AUTH_REJECTIONS

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-API-Key"
UNAUTHORIZED_BODY = {"error": "Unauthorized - Invalid or missing X-API-Key header"}


class ApiKeyMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, api_key: str | None = None) -> None:
        super().__init__(app)
        self._api_key = api_key or None

    @staticmethod
    def _is_authorized(provided: str | None, expected: str) -> bool:
        if provided is None or not provided.strip():
            return False
        return hmac.compare_digest(provided.encode(), expected.encode())

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if self._api_key is None:
            return await call_next(request)

        provided = request.headers.get(API_KEY_HEADER)
        if not self._is_authorized(provided, self._api_key):
            reason = "missing X-API-Key" if not provided else "invalid X-API-Key"
            AUTH_REJECTIONS.inc()
            logger.warning(
                "401 Unauthorized - %s %s (%s)",
                request.method,
                request.url.path,
                reason,
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "reason": reason,
                },
            )
            return JSONResponse(UNAUTHORIZED_BODY, status_code=401)

        return await call_next(request)

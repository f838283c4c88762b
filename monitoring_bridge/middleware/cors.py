"""Permissive CORS for browser dashboards.

Starlette's CORSMiddleware only answers requests that carry an
``Origin`` header and only treats a request as a preflight when it
also carries ``Access-Control-Request-Method``.  Dashboards and
scrapers here expect the headers on every response and a bare 200 for
any OPTIONS, so this sets them unconditionally.
"""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, X-API-Key",
}


class CorsMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method == "OPTIONS":
            response = Response(status_code=200)
        else:
            response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response

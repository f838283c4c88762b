from __future__ import annotations

import json
from typing import Any

from fastapi import Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from monitoring_bridge.services.exposition import CONTENT_TYPE

SERVICE_NAME = "GrafanaMonitoringBridge"
SERVICE_VERSION = "1.0.0"

# Routes answer on path alone; OPTIONS never gets this far (see
# middleware/cors.py).
ANY_METHOD = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE"]

# Listed in 404 bodies.  The Prometheus API routes are deliberately not
# advertised here; they are for Grafana, not for people.
AVAILABLE_ENDPOINTS = (
    "/health",
    "/api/services",
    "/api/usage",
    "/api/summary",
    "/api/metrics",
)


class PrettyJSONResponse(JSONResponse):
    """JSON indented for humans reading it in a browser or curl."""

    def render(self, content: Any) -> bytes:
        return json.dumps(content, ensure_ascii=False, indent=2).encode("utf-8")


class PrometheusTextResponse(Response):
    media_type = CONTENT_TYPE


def not_found_body(path: str) -> dict[str, Any]:
    return {
        "error": "Not found",
        "path": path,
        "availableEndpoints": list(AVAILABLE_ENDPOINTS),
    }


def error_body(exc: BaseException) -> dict[str, str]:
    return {"error": str(exc), "type": type(exc).__name__}


async def not_found_handler(
    request: Request, exc: StarletteHTTPException
) -> Response:
    """Replace FastAPI's 404 body with the endpoint listing."""
    if exc.status_code != 404:
        return await http_exception_handler(request, exc)
    return JSONResponse(not_found_body(request.url.path), status_code=404)

"""Request context middleware: request IDs and the per-request log line.

Concurrent scrapes interleave their log lines.  Each request gets an
ID (the caller's ``X-Request-ID`` if it sent one, else a UUID) which is
stored in a ContextVar, stamped on every log record emitted while the
request is in flight (see core/logging.py), and echoed back in the
``X-Request-ID`` response header (except on a 401).

Provider calls hop from the event loop to a worker thread via
run_in_threadpool; Starlette copies the context into that thread, so
the ID follows the call.
"""

from __future__ import annotations

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from monitoring_bridge.core.logging import request_id_var

logger = logging.getLogger(__name__)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Assign a request ID, time the request, and log one summary line."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        req_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request_id_var.set(req_id)

        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000, 1)

        logger.info(
            "%s %s → %d (%.1fms)",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            extra={
                "request_id": req_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )

        # A 401 goes out with the standard headers only.
        if response.status_code != 401:
            response.headers["X-Request-ID"] = req_id

        return response

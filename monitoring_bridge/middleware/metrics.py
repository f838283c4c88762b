"""Prometheus metrics middleware: instruments every HTTP request.

For each request:
  1. Increments the ACTIVE_REQUESTS gauge (decrement on completion)
  2. Times the request duration
  3. On completion: increments REQUEST_COUNT (by method/endpoint/status)
     and observes the duration in REQUEST_DURATION

The endpoint label is the template of the route the (already
lowercased) path belongs to, or "unmatched" when no route has that
path.  It is decided from the route table, not from the response, so
401s and OPTIONS answered before routing are folded the same way and
random paths cannot grow the label set.
"""

from __future__ import annotations

import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Match

from monitoring_bridge.core.metrics import (
    ACTIVE_REQUESTS,
    REQUEST_COUNT,
    REQUEST_DURATION,
)

UNMATCHED_ENDPOINT = "unmatched"
KNOWN_METHODS = frozenset(
    {"GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"}
)


def route_template(request: Request) -> str:
    """Path template of the route serving this path, else "unmatched"."""
    route = request.scope.get("route")
    if route is not None and hasattr(route, "path"):
        return route.path
    # Not routed (rejected or answered by an outer layer): a path match
    # is enough, whatever the method.
    for candidate in request.app.router.routes:
        match, _ = candidate.matches(request.scope)
        if match is not Match.NONE:
            return candidate.path
    return UNMATCHED_ENDPOINT


class MetricsMiddleware(BaseHTTPMiddleware):
    """Collect Prometheus metrics for every HTTP request."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # Scrapes of the bridge's own /metrics are not counted.
        if request.url.path == "/metrics":
            return await call_next(request)

        ACTIVE_REQUESTS.inc()
        start = time.monotonic()
        status_code = "500"

        try:
            response = await call_next(request)
            status_code = str(response.status_code)
        finally:
            duration = time.monotonic() - start
            ACTIVE_REQUESTS.dec()
            endpoint = route_template(request)
            method = request.method if request.method in KNOWN_METHODS else "other"
            REQUEST_COUNT.labels(
                method=method,
                endpoint=endpoint,
                status_code=status_code,
            ).inc()
            REQUEST_DURATION.labels(
                method=method,
                endpoint=endpoint,
            ).observe(duration)

        return response

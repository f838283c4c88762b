from __future__ import annotations

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from monitoring_bridge.api.responses import error_body

logger = logging.getLogger(__name__)


class ErrorEnvelopeMiddleware(BaseHTTPMiddleware):
    """Turn any exception a handler raises into a 500 JSON body.

    Sits inside the CORS middleware so error responses still carry the
    CORS headers, and inside the request logger so the 500 is logged
    like any other response.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            logger.exception(
                "Error handling %s %s", request.method, request.url.path
            )
            return JSONResponse(error_body(e), status_code=500)

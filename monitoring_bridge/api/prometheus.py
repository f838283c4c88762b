"""The slice of the Prometheus HTTP API that Grafana needs.

Grafana's Prometheus data source probes buildinfo, lists metric names
for the query editor, and then issues instant or range queries.  All
responses are compact JSON with HTTP 200; failures are reported inside
the envelope (``"status": "error"``) the way Prometheus does it.
"""

from __future__ import annotations

from typing import Annotated
from urllib.parse import parse_qs

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from monitoring_bridge.api.dependencies import get_query_evaluator
from monitoring_bridge.api.responses import ANY_METHOD, SERVICE_NAME, SERVICE_VERSION
from monitoring_bridge.services.query_evaluator import (
    KNOWN_METRIC_NAMES,
    QueryEvaluator,
)

router = APIRouter(prefix="/api/v1", tags=["prometheus"])

BUILD_INFO = {
    "version": SERVICE_VERSION,
    "revision": "gt-bridge",
    "branch": "main",
    "buildUser": SERVICE_NAME,
    "buildDate": "2025-11-26",
    "goVersion": "n/a",
}


async def read_query(request: Request) -> str | None:
    """The ``query`` parameter from the URL, else from a form-encoded body."""
    query = request.query_params.get("query")
    if query is not None and query.strip():
        return query

    body = await request.body()
    if not body:
        return query
    form = parse_qs(body.decode("utf-8", errors="replace"))
    values = form.get("query")
    return values[0] if values else query


# query_range shares the handler: there is no history to return, so a
# range query is answered with the current instant and start/end/step
# are ignored.
@router.api_route("/query", methods=ANY_METHOD)
@router.api_route("/query_range", methods=ANY_METHOD)
async def instant_query(
    request: Request,
    evaluator: Annotated[QueryEvaluator, Depends(get_query_evaluator)],
) -> JSONResponse:
    query = await read_query(request)
    result = await run_in_threadpool(evaluator.evaluate, query)
    return JSONResponse(result)


@router.api_route("/status/buildinfo", methods=ANY_METHOD)
async def build_info() -> JSONResponse:
    return JSONResponse({"status": "success", "data": BUILD_INFO})


@router.api_route("/labels", methods=ANY_METHOD)
@router.api_route("/label/__name__/values", methods=ANY_METHOD)
async def metric_names() -> JSONResponse:
    return JSONResponse({"status": "success", "data": list(KNOWN_METRIC_NAMES)})

"""Prometheus scrape endpoints.

Two scrape targets live here:

  /api/metrics: the application's state, rendered from a fresh
    provider snapshot on every scrape (see services/exposition.py).
    A provider failure midway still returns 200 with the families
    rendered so far and a trailing "# Error generating metrics" line,
    so one broken call does not blank every panel.

  /metrics: the bridge process itself (request counts, provider
    latency), straight from prometheus-client's default registry.

SECURITY NOTE: when API_KEY is set both require the X-API-Key header;
configure the scrape job with it.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from monitoring_bridge.api.dependencies import get_snapshot_reader
from monitoring_bridge.api.responses import ANY_METHOD, PrometheusTextResponse
from monitoring_bridge.services.exposition import render_exposition
from monitoring_bridge.services.snapshots import SnapshotReader

router = APIRouter(tags=["observability"])


@router.api_route("/api/metrics", methods=ANY_METHOD)
def application_metrics(
    reader: Annotated[SnapshotReader, Depends(get_snapshot_reader)],
) -> PrometheusTextResponse:
    """Expose the application's state in text exposition format."""
    return PrometheusTextResponse(content=render_exposition(reader))


@router.api_route("/metrics", methods=ANY_METHOD, include_in_schema=False)
async def bridge_metrics() -> Response:
    """Expose the bridge's own metrics in text exposition format."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )

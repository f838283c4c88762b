"""Health endpoint.

/health answers "can the bridge reach the application right now?" by
pinging the state provider.  It always returns 200: the ``status``
field carries the verdict, so uptime checks can tell "bridge down"
(connection refused) apart from "application down" (unhealthy).

  {"status": "healthy", "timestamp": "...Z", "service": ..., "version": ...}
  {"status": "unhealthy", "timestamp": "...Z", "service": ..., "error": "..."}
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends

from monitoring_bridge.api.dependencies import get_snapshot_reader
from monitoring_bridge.api.responses import (
    ANY_METHOD,
    SERVICE_NAME,
    SERVICE_VERSION,
    PrettyJSONResponse,
)
from monitoring_bridge.services.snapshots import SnapshotReader

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


def utc_timestamp() -> str:
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@router.api_route("/", methods=ANY_METHOD, include_in_schema=False)
@router.api_route("/health", methods=ANY_METHOD)
def health(
    reader: Annotated[SnapshotReader, Depends(get_snapshot_reader)],
) -> PrettyJSONResponse:
    """Ping the provider and report the result.

    Declared sync so FastAPI runs the blocking ping on its thread pool.
    """
    try:
        healthy = reader.ping()
    except Exception as e:
        logger.warning("Health check failed: %s", e)
        return PrettyJSONResponse(
            {
                "status": "unhealthy",
                "timestamp": utc_timestamp(),
                "service": SERVICE_NAME,
                "error": str(e),
            }
        )

    return PrettyJSONResponse(
        {
            "status": "healthy" if healthy else "unhealthy",
            "timestamp": utc_timestamp(),
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
        }
    )

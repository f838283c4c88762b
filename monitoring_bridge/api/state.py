"""Raw state as pretty-printed JSON.

These are for people and ad-hoc scripts: the provider's records are
decoded, given defaults for missing fields, and re-emitted with their
PascalCase wire keys.  Provider failures propagate and become a
500 with ``{"error", "type"}``.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from monitoring_bridge.api.dependencies import get_snapshot_reader
from monitoring_bridge.api.responses import ANY_METHOD, PrettyJSONResponse
from monitoring_bridge.services.snapshots import SnapshotReader

router = APIRouter(prefix="/api", tags=["state"])

Reader = Annotated[SnapshotReader, Depends(get_snapshot_reader)]


@router.api_route("/services", methods=ANY_METHOD)
def list_services(reader: Reader) -> PrettyJSONResponse:
    return PrettyJSONResponse([s.to_wire() for s in reader.services()])


@router.api_route("/usage", methods=ANY_METHOD)
def get_usage(reader: Reader) -> PrettyJSONResponse:
    return PrettyJSONResponse(reader.usage(include_extended_sessions=False).to_wire())


@router.api_route("/summary", methods=ANY_METHOD)
def get_summary(reader: Reader) -> PrettyJSONResponse:
    return PrettyJSONResponse(reader.summary().to_wire())

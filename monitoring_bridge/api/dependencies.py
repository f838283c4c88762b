from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from monitoring_bridge.services.query_evaluator import QueryEvaluator
from monitoring_bridge.services.snapshots import SnapshotReader
from monitoring_bridge.services.state_provider import StateProvider


def get_state_provider(request: Request) -> StateProvider:
    """The provider bound to this app instance by create_app()."""
    return request.app.state.state_provider


def get_snapshot_reader(
    provider: Annotated[StateProvider, Depends(get_state_provider)],
) -> SnapshotReader:
    return SnapshotReader(provider)


def get_query_evaluator(
    reader: Annotated[SnapshotReader, Depends(get_snapshot_reader)],
) -> QueryEvaluator:
    return QueryEvaluator(reader)

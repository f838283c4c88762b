from __future__ import annotations

import json
from typing import Any

from monitoring_bridge.models.service import ServiceRecord
from monitoring_bridge.models.summary import AppStateSummary
from monitoring_bridge.models.usage import UsageSnapshot
from monitoring_bridge.services.state_provider import StateProvider


class SnapshotReader:
    """Typed views over a state provider.

    Every call goes to the provider; nothing is cached between calls.
    """

    def __init__(self, provider: StateProvider) -> None:
        self._provider = provider

    def ping(self) -> bool:
        return bool(self._provider.ping())

    def services(self) -> list[ServiceRecord]:
        return decode_services(self._provider.get_running_services())

    def usage(self, *, include_extended_sessions: bool = False) -> UsageSnapshot:
        raw = self._provider.get_system_usage(include_extended_sessions)
        return UsageSnapshot.model_validate(raw or {})

    def summary(self) -> AppStateSummary:
        raw = self._provider.get_app_state_summary()
        return AppStateSummary.model_validate(raw or {})


def decode_services(raw: str | list[Any] | None) -> list[ServiceRecord]:
    """Decode GetRunningServices output.

    The remote returns its list pre-serialized as JSON text; providers
    that already decoded it may hand over the list itself.
    """
    if raw is None:
        return []
    items = json.loads(raw) if isinstance(raw, str) else raw
    if items is None:
        return []
    if not isinstance(items, list):
        raise ValueError(
            f"GetRunningServices must return a JSON array (got {type(items).__name__})"
        )
    return [ServiceRecord.model_validate(item) for item in items]

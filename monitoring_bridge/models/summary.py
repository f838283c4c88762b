from __future__ import annotations

from typing import Any

from pydantic import Field

from monitoring_bridge.models.wire import ProviderModel


class DomainSummary(ProviderModel):
    domain_id: int = Field(0, alias="DomainId")
    # Session records are opaque to the bridge; only their number is used.
    sessions: list[Any] = Field(default_factory=list, alias="Sessions")

    @property
    def session_count(self) -> int:
        return len(self.sessions)


class AppStateSummary(ProviderModel):
    domain_summaries: list[DomainSummary] = Field(
        default_factory=list, alias="DomainSummaries"
    )

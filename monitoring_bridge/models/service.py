from __future__ import annotations

import re
from datetime import datetime, timezone

from pydantic import Field

from monitoring_bridge.models.wire import ProviderModel

_COUNT_RE = re.compile(r"[0-9]+")
_FRACTION_RE = re.compile(r"(\.\d{6})\d+")
_NAME_TRANSLATION = str.maketrans({" ": "_", "-": "_", ".": "_"})

# Timestamps at or before this year are the provider's "never started"
# placeholder (DateTime.MinValue serializes as 0001-01-01).
SENTINEL_MAX_YEAR = 1900


class ServiceRecord(ProviderModel):
    """One background service as reported by GetRunningServices."""

    name: str = Field("unknown", alias="Name")
    is_running: bool = Field(False, alias="IsRunning")
    num_runs: int = Field(0, alias="NumRuns")
    time_used_ms: int = Field(0, alias="TimeUsed")
    errors: str = Field("0", alias="Errors")
    is_invokable: bool = Field(False, alias="IsInvokable")
    last_start: str | None = Field(None, alias="LastStart")

    @property
    def error_count(self) -> int:
        return parse_error_count(self.errors)

    @property
    def last_start_unix(self) -> int:
        return last_start_to_unix(self.last_start)

    @property
    def normalized_name(self) -> str:
        return normalize_service_name(self.name)


def parse_error_count(errors: str | None) -> int:
    """Return the leading count of an errors field.

    "0" -> 0, "2 (2025-11-19 14:24:48)" -> 2, "n/a" -> 0, "-1" -> 0.
    """
    if not errors:
        return 0
    token = errors.split(" ", 1)[0]
    if not _COUNT_RE.fullmatch(token):
        return 0
    return int(token)


def parse_timestamp(text: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp as the provider emits it.

    Accepts a ``T`` or space separator, a ``Z`` or numeric offset, and
    up to seven fractional digits.  Naive values are taken as UTC.
    Returns None when the text is empty or unparseable.
    """
    if not text:
        return None
    cleaned = _FRACTION_RE.sub(r"\1", text.strip())
    try:
        parsed = datetime.fromisoformat(cleaned)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def last_start_to_unix(text: str | None) -> int:
    parsed = parse_timestamp(text)
    if parsed is None or parsed.year <= SENTINEL_MAX_YEAR:
        return 0
    return int(parsed.timestamp())


def normalize_service_name(name: str) -> str:
    return name.translate(_NAME_TRANSLATION).lower()

from __future__ import annotations

import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

from monitoring_bridge.app_factory import create_app
from monitoring_bridge.core.config import Settings

# Ensure repo root is on sys.path so `import monitoring_bridge` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

API_KEY = "s3cret-key"

CHAT_HUB: dict[str, Any] = {
    "Name": "Chat Hub",
    "IsRunning": True,
    "NumRuns": 5,
    "TimeUsed": 1200,
    "Errors": "0",
    "IsInvokable": True,
    "LastStart": "2024-01-01T00:00:00Z",
}

LESSON_RUNNER: dict[str, Any] = {
    "Name": "Lesson-Runner",
    "IsRunning": False,
    "NumRuns": 0,
    "TimeUsed": 0,
    "Errors": "2 (2025-11-19 14:24:48)",
    "IsInvokable": False,
    "LastStart": "0001-01-01T00:00:00",
}

USAGE: dict[str, Any] = {
    "CpuUsage": 12.5,
    "MemoryUsageMB": 512.0,
    "UptimeSeconds": 3600.0,
    "NumActiveUsers": 4,
    "NumChatUsers": 7,
    "NumChatRooms": 3,
    "NumRunningLessons": 2,
}

SUMMARY: dict[str, Any] = {
    "DomainSummaries": [
        {"DomainId": 1, "Sessions": [{"Id": "a"}, {"Id": "b"}]},
        {"DomainId": 7, "Sessions": []},
    ]
}


class FakeStateProvider:
    """In-memory stand-in for the remote ApplicationState.

    ``calls`` records every operation in order; put an exception in
    ``failures[operation]`` to make that operation raise it.
    """

    def __init__(
        self,
        services: list[dict[str, Any]] | None = None,
        usage: dict[str, Any] | None = None,
        summary: dict[str, Any] | None = None,
        *,
        alive: bool = True,
        services_as_text: bool = True,
    ) -> None:
        self.services = (
            services if services is not None else [dict(CHAT_HUB), dict(LESSON_RUNNER)]
        )
        self.usage = usage if usage is not None else dict(USAGE)
        self.summary = summary if summary is not None else json.loads(json.dumps(SUMMARY))
        self.alive = alive
        self.services_as_text = services_as_text
        self.failures: dict[str, Exception] = {}
        self.calls: list[str] = []
        self.usage_flags: list[bool] = []
        self.closed = False

    def _record(self, operation: str) -> None:
        self.calls.append(operation)
        if operation in self.failures:
            raise self.failures[operation]

    def ping(self) -> bool:
        self._record("ping")
        return self.alive

    def get_running_services(self) -> str | list[dict[str, Any]]:
        self._record("get_running_services")
        if self.services_as_text:
            return json.dumps(self.services)
        return [dict(s) for s in self.services]

    def get_system_usage(self, include_extended_sessions: bool) -> dict[str, Any]:
        self._record("get_system_usage")
        self.usage_flags.append(include_extended_sessions)
        return dict(self.usage)

    def get_app_state_summary(self) -> dict[str, Any]:
        self._record("get_app_state_summary")
        return self.summary

    def close(self) -> None:
        self.closed = True


def make_settings(**overrides: Any) -> Settings:
    base = Settings(
        app_env="test",
        log_level="info",
        log_json=False,
        host="127.0.0.1",
        port=8080,
        app_state_host="localhost",
        app_state_port=20010,
    )
    return replace(base, **overrides)


@pytest.fixture
def provider() -> FakeStateProvider:
    return FakeStateProvider()


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def client(provider: FakeStateProvider, settings: Settings) -> TestClient:
    return TestClient(create_app(settings, provider))


@pytest.fixture
def secured_client(provider: FakeStateProvider) -> TestClient:
    return TestClient(create_app(make_settings(api_key=API_KEY), provider))

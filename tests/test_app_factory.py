from __future__ import annotations

import importlib
import logging
from collections.abc import Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from monitoring_bridge.app_factory import create_app
from monitoring_bridge.services.state_provider import (
    HttpStateProvider,
    InstrumentedStateProvider,
)
from tests.conftest import FakeStateProvider, make_settings


@pytest.fixture
def restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_provider_is_instrumented(provider: FakeStateProvider) -> None:
    app = create_app(make_settings(), provider)
    assert isinstance(app.state.state_provider, InstrumentedStateProvider)
    assert app.state.state_provider.inner is provider


def test_default_provider_comes_from_settings() -> None:
    app = create_app(make_settings(app_state_host="gt-host", app_state_port=20011))
    inner = app.state.state_provider.inner
    assert isinstance(inner, HttpStateProvider)
    inner.close()


def test_shutdown_closes_provider(provider: FakeStateProvider) -> None:
    with TestClient(create_app(make_settings(), provider)) as client:
        client.get("/health")
        assert provider.closed is False
    assert provider.closed is True


def test_docs_enabled_in_dev(provider: FakeStateProvider) -> None:
    client = TestClient(create_app(make_settings(app_env="dev"), provider))
    assert client.get("/openapi.json").status_code == 200


def test_main_module_exposes_app(restore_root_logger: None) -> None:
    module = importlib.import_module("monitoring_bridge.main")
    assert isinstance(module.app, FastAPI)
    assert isinstance(module.app.state.state_provider.inner, HttpStateProvider)

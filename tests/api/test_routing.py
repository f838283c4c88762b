from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from monitoring_bridge.middleware.cors import CORS_HEADERS
from tests.conftest import FakeStateProvider

ENDPOINTS = ["/health", "/api/services", "/api/usage", "/api/summary", "/api/metrics"]


def test_unknown_path_lists_endpoints(client: TestClient) -> None:
    resp = client.get("/nope")
    assert resp.status_code == 404
    assert resp.json() == {
        "error": "Not found",
        "path": "/nope",
        "availableEndpoints": ENDPOINTS,
    }


def test_404_reports_lowercased_path(client: TestClient) -> None:
    assert client.get("/Missing/Thing").json()["path"] == "/missing/thing"


def test_trailing_slash_is_not_found(client: TestClient, provider: FakeStateProvider) -> None:
    resp = client.get("/health/")
    assert resp.status_code == 404
    assert provider.calls == []


@pytest.mark.parametrize("path", ["/API/Metrics", "/Api/METRICS", "/HEALTH", "/Api/V1/Labels"])
def test_paths_are_case_insensitive(client: TestClient, path: str) -> None:
    assert client.get(path).status_code == 200


def test_uppercase_path_serves_same_content(client: TestClient) -> None:
    assert client.get("/API/Services").json() == client.get("/api/services").json()


@pytest.mark.parametrize("path", ["/health", "/api/services", "/nope", "/api/v1/query"])
def test_options_is_empty_200_with_cors(
    client: TestClient, provider: FakeStateProvider, path: str
) -> None:
    resp = client.options(path)
    assert resp.status_code == 200
    assert resp.content == b""
    for header, value in CORS_HEADERS.items():
        assert resp.headers[header] == value
    assert provider.calls == []


@pytest.mark.parametrize("path", ["/health", "/api/metrics", "/api/v1/labels", "/nope"])
def test_cors_headers_on_every_response(client: TestClient, path: str) -> None:
    resp = client.get(path)
    assert resp.headers["access-control-allow-origin"] == "*"
    assert resp.headers["access-control-allow-methods"] == "GET, POST, OPTIONS"
    assert resp.headers["access-control-allow-headers"] == "Content-Type, X-API-Key"


def test_cors_headers_on_500(client: TestClient, provider: FakeStateProvider) -> None:
    provider.failures["get_running_services"] = RuntimeError("boom")
    resp = client.get("/api/services")
    assert resp.status_code == 500
    assert resp.headers["access-control-allow-origin"] == "*"


def test_post_labels_lists_metric_names(client: TestClient) -> None:
    get = client.get("/api/v1/labels")
    for path in ("/api/v1/labels", "/api/v1/label/__name__/values"):
        resp = client.post(path, data={"start": "1", "end": "2"})
        assert resp.status_code == 200
        assert resp.json() == get.json()


@pytest.mark.parametrize("method", ["POST", "PUT", "DELETE"])
@pytest.mark.parametrize(
    "path", ["/health", "/api/metrics", "/api/services", "/api/v1/status/buildinfo"]
)
def test_routes_answer_any_method(client: TestClient, method: str, path: str) -> None:
    assert client.request(method, path).status_code == 200


def test_unknown_path_is_404_for_any_method(client: TestClient) -> None:
    resp = client.post("/nope")
    assert resp.status_code == 404
    assert resp.json()["path"] == "/nope"


def test_docs_disabled_outside_dev(client: TestClient) -> None:
    assert client.get("/docs").status_code == 404
    assert client.get("/openapi.json").status_code == 404

from __future__ import annotations

from fastapi.testclient import TestClient
from prometheus_client import REGISTRY

from tests.conftest import API_KEY


def _count(method: str, endpoint: str, status_code: str) -> float:
    return (
        REGISTRY.get_sample_value(
            "bridge_http_requests_total",
            {"method": method, "endpoint": endpoint, "status_code": status_code},
        )
        or 0.0
    )


def test_request_is_counted(client: TestClient) -> None:
    before = _count("GET", "/health", "200")
    client.get("/health")
    client.get("/health")
    assert _count("GET", "/health", "200") - before == 2


def test_endpoint_label_is_lowercased_path(client: TestClient) -> None:
    before = _count("GET", "/api/usage", "200")
    client.get("/API/Usage")
    assert _count("GET", "/api/usage", "200") - before == 1


def test_unmatched_paths_share_one_label(client: TestClient) -> None:
    before = _count("GET", "unmatched", "404")
    client.get("/random/probe/1")
    client.get("/random/probe/2")
    assert _count("GET", "unmatched", "404") - before == 2
    assert _count("GET", "/random/probe/1", "404") == 0


def test_500_is_counted(client: TestClient, provider) -> None:
    provider.failures["get_app_state_summary"] = RuntimeError("down")
    before = _count("GET", "/api/summary", "500")
    client.get("/api/summary")
    assert _count("GET", "/api/summary", "500") - before == 1


def test_401_is_counted(secured_client: TestClient) -> None:
    before = _count("GET", "/api/services", "401")
    secured_client.get("/api/services")
    secured_client.get("/api/services", headers={"X-API-Key": API_KEY})
    assert _count("GET", "/api/services", "401") - before == 1


def test_self_scrape_not_counted(client: TestClient) -> None:
    before = _count("GET", "/metrics", "200")
    client.get("/metrics")
    assert _count("GET", "/metrics", "200") == before


def test_duration_is_observed(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/api/v1/labels"}
    before = REGISTRY.get_sample_value(
        "bridge_http_request_duration_seconds_count", labels
    ) or 0.0
    client.get("/api/v1/labels")
    after = REGISTRY.get_sample_value("bridge_http_request_duration_seconds_count", labels)
    assert after == before + 1


def test_active_requests_returns_to_zero(client: TestClient) -> None:
    client.get("/health")
    assert REGISTRY.get_sample_value("bridge_http_active_requests") == 0.0


def _series_for(endpoint: str) -> list[float]:
    return [
        sample.value
        for metric in REGISTRY.collect()
        if metric.name == "bridge_http_requests"
        for sample in metric.samples
        if sample.labels.get("endpoint") == endpoint
    ]


def test_rejected_random_paths_share_one_label(secured_client: TestClient) -> None:
    before = _count("GET", "unmatched", "401")
    for i in range(3):
        assert secured_client.get(f"/scan-{i}").status_code == 401
    assert _count("GET", "unmatched", "401") - before == 3
    assert all(_series_for(f"/scan-{i}") == [] for i in range(3))


def test_options_random_paths_share_one_label(client: TestClient) -> None:
    before = _count("OPTIONS", "unmatched", "200")
    for i in range(3):
        assert client.options(f"/opt-{i}").status_code == 200
    assert _count("OPTIONS", "unmatched", "200") - before == 3
    assert all(_series_for(f"/opt-{i}") == [] for i in range(3))


def test_options_on_known_path_uses_route(client: TestClient) -> None:
    before = _count("OPTIONS", "/api/v1/labels", "200")
    client.options("/api/v1/labels")
    assert _count("OPTIONS", "/api/v1/labels", "200") - before == 1


def test_unknown_method_is_folded(client: TestClient) -> None:
    before = REGISTRY.get_sample_value(
        "bridge_http_request_duration_seconds_count",
        {"method": "other", "endpoint": "/health"},
    ) or 0.0
    client.request("PROPFIND", "/health")
    after = REGISTRY.get_sample_value(
        "bridge_http_request_duration_seconds_count",
        {"method": "other", "endpoint": "/health"},
    )
    assert after == before + 1

"""Self-observability metrics for the bridge process.

Two different metric streams leave this service:

  /api/metrics: the REMOTE application's state (services, sessions,
    chat rooms), rendered by hand from a provider snapshot on every
    scrape.  Nothing there lives in a prometheus-client registry.

  /metrics: the BRIDGE's own health: how many requests it served,
    how long the provider took to answer, how often the API key was
    wrong.  Those are defined here with prometheus-client and exposed
    through its default registry.

If dashboards built on /api/metrics go blank, /metrics tells you
whether the bridge is down, slow, or just failing to reach the
provider.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by the MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "bridge_http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "bridge_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    # Provider round-trips dominate: a healthy remote answers in tens of
    # milliseconds, a busy one in seconds.
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

ACTIVE_REQUESTS = Gauge(
    "bridge_http_active_requests",
    "Number of HTTP requests currently being processed",
)

AUTH_REJECTIONS = Counter(
    "bridge_auth_rejections_total",
    "Requests rejected for a missing or wrong X-API-Key header",
)

# ---------------------------------------------------------------------------
# State provider metrics (populated by InstrumentedStateProvider)
# ---------------------------------------------------------------------------

PROVIDER_CALLS = Counter(
    "bridge_provider_calls_total",
    "State provider calls by operation and outcome",
    ["operation", "outcome"],  # outcome: "ok" or "error"
)

PROVIDER_CALL_DURATION = Histogram(
    "bridge_provider_call_duration_seconds",
    "State provider call duration in seconds",
    ["operation"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

"""Minimal Prometheus instant-query evaluation.

Grafana's Prometheus data source only needs a handful of API calls to
work against the bridge.  Queries are NOT parsed as PromQL: the metric
name is everything before the first ``{``, label selectors are dropped,
and the name is looked up in a fixed catalogue.

  scalar names       -> one sample from the usage snapshot
  per-service names  -> one sample per service, labelled with its raw name
  anything else      -> an empty vector (success, not an error)

Responses follow the Prometheus HTTP API envelope:

  {"status": "success",
   "data": {"resultType": "vector",
            "result": [{"metric": {...}, "value": [<unix>, "<value>"]}]}}

There is no history, so range queries are answered with this same
instant evaluation.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

from monitoring_bridge.models.metric import MetricSample
from monitoring_bridge.models.service import ServiceRecord
from monitoring_bridge.models.usage import UsageSnapshot
from monitoring_bridge.services.snapshots import SnapshotReader

logger = logging.getLogger(__name__)

SCALAR_METRICS: dict[str, str] = {
    "gt_cpu_usage": "cpu_usage",
    "gt_memory_usage_mb": "memory_usage_mb",
    "gt_uptime_seconds": "uptime_seconds",
    "gt_active_users": "num_active_users",
    "gt_chat_users": "num_chat_users",
    "gt_running_lessons": "num_running_lessons",
}

SERVICE_METRICS: dict[str, str] = {
    "gt_service_status": "is_running",
    "gt_service_errors": "error_count",
    "gt_service_runs": "num_runs",
    "gt_service_time_used_ms": "time_used_ms",
    "gt_service_invokable": "is_invokable",
    "gt_service_last_start_timestamp": "last_start_unix",
}

# Names advertised through the label-values endpoints.
KNOWN_METRIC_NAMES: tuple[str, ...] = (
    "gt_service_status",
    "gt_service_errors",
    "gt_service_runs",
    "gt_service_time_used_ms",
    "gt_service_invokable",
    "gt_service_last_start_timestamp",
    "gt_services_total",
    "gt_services_running",
)


def metric_name(query: str) -> str:
    return query.split("{", 1)[0].strip()


def error_response(error_type: str, message: str) -> dict[str, Any]:
    return {"status": "error", "errorType": error_type, "error": message}


def vector_response(samples: list[MetricSample]) -> dict[str, Any]:
    return {
        "status": "success",
        "data": {
            "resultType": "vector",
            "result": [
                {
                    "metric": {"__name__": s.name, **s.labels},
                    "value": [s.timestamp_seconds, s.value_text],
                }
                for s in samples
            ],
        },
    }


def scalar_samples(name: str, usage: UsageSnapshot, now: int) -> list[MetricSample]:
    value = getattr(usage, SCALAR_METRICS[name])
    return [MetricSample(name, value, timestamp_seconds=now)]


def service_samples(
    name: str, services: list[ServiceRecord], now: int
) -> list[MetricSample]:
    attr = SERVICE_METRICS[name]
    # Query results always carry the raw service name, even for the
    # counter families that the exposition labels with normalized names.
    return [
        MetricSample(name, getattr(s, attr), {"name": s.name}, timestamp_seconds=now)
        for s in services
    ]


class QueryEvaluator:
    def __init__(
        self,
        reader: SnapshotReader,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._reader = reader
        self._clock = clock

    def evaluate(self, query: str | None) -> dict[str, Any]:
        """Answer one instant query.  Never raises."""
        if query is None or not query.strip():
            return error_response("bad_data", "query parameter is required")

        try:
            usage = self._reader.usage(include_extended_sessions=True)
        except Exception as e:
            logger.error("GetSystemUsage failed during query %r: %s", query, e)
            return error_response("internal", str(e))

        name = metric_name(query)
        now = int(self._clock())
        try:
            if name in SCALAR_METRICS:
                return vector_response(scalar_samples(name, usage, now))
            if name in SERVICE_METRICS:
                return vector_response(service_samples(name, self._reader.services(), now))
        except Exception as e:
            logger.exception("Query %r failed", query)
            return error_response("internal", str(e))

        logger.debug("Unknown metric %r in query, returning empty vector", name)
        return vector_response([])

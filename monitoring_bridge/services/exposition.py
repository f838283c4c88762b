"""Prometheus text exposition of the remote application's state.

Output looks like:

  # HELP gt_services_total Total number of services
  # TYPE gt_services_total gauge
  gt_services_total 2
  # HELP gt_service_runs Total number of runs per service
  # TYPE gt_service_runs counter
  gt_service_runs{service="chat_hub"} 5
  ...

Families are emitted in a fixed order.  Provider data is fetched
lazily as the families that need it are reached, so a failing
GetSystemUsage still leaves the service families in the output.  The
first failure ends the body with a single comment line:

  # Error generating metrics: <message>

and the scrape still succeeds with whatever was rendered before it.

The text is assembled by hand rather than through a prometheus-client
registry: the family names are fixed by existing dashboards, and the
client library would append ``_total`` to counters and render integers
as ``5.0``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Literal

from monitoring_bridge.models.metric import MetricSample
from monitoring_bridge.models.service import ServiceRecord
from monitoring_bridge.services.snapshots import SnapshotReader

logger = logging.getLogger(__name__)

CONTENT_TYPE = "text/plain; version=0.0.4"

MetricType = Literal["counter", "gauge"]


@dataclass(frozen=True, slots=True)
class MetricFamily:
    name: str
    help: str
    type: MetricType
    samples: list[MetricSample] = field(default_factory=list)

    def render(self) -> list[str]:
        lines = [f"# HELP {self.name} {self.help}", f"# TYPE {self.name} {self.type}"]
        lines.extend(render_sample(sample) for sample in self.samples)
        return lines


def escape_label_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


def render_sample(sample: MetricSample) -> str:
    if sample.labels:
        labels = ",".join(
            f'{key}="{escape_label_value(value)}"' for key, value in sample.labels.items()
        )
        return f"{sample.name}{{{labels}}} {sample.value_text}"
    return f"{sample.name} {sample.value_text}"


def _scalar(name: str, help_text: str, value: int | float) -> MetricFamily:
    return MetricFamily(name, help_text, "gauge", [MetricSample(name, value)])


def _per_service(
    name: str,
    help_text: str,
    metric_type: MetricType,
    services: list[ServiceRecord],
    label: str,
    attr: str,
) -> MetricFamily:
    samples = []
    for service in services:
        # Compatibility quirk: counter families label the service with its
        # normalized name under "service", gauge families with the raw name
        # under "name".  Existing scrape configs and dashboards key on both
        # forms, so they must stay exactly as they are.
        label_value = service.normalized_name if label == "service" else service.name
        value = getattr(service, attr)
        samples.append(MetricSample(name, value, {label: label_value}))
    return MetricFamily(name, help_text, metric_type, samples)


def service_families(services: list[ServiceRecord]) -> list[MetricFamily]:
    """The six per-service families, in exposition order."""
    return [
        _per_service(
            "gt_service_runs",
            "Total number of runs per service",
            "counter",
            services,
            "service",
            "num_runs",
        ),
        _per_service(
            "gt_service_time_used_ms",
            "Time used by service in milliseconds",
            "counter",
            services,
            "service",
            "time_used_ms",
        ),
        _per_service(
            "gt_service_status",
            "Service status (1=running, 0=stopped)",
            "gauge",
            services,
            "name",
            "is_running",
        ),
        _per_service(
            "gt_service_errors",
            "Total number of errors per service",
            "gauge",
            services,
            "name",
            "error_count",
        ),
        _per_service(
            "gt_service_invokable",
            "Service is invokable (1=yes, 0=no)",
            "gauge",
            services,
            "name",
            "is_invokable",
        ),
        _per_service(
            "gt_service_last_start_timestamp",
            "Unix timestamp of last service start",
            "gauge",
            services,
            "name",
            "last_start_unix",
        ),
    ]


def iter_families(reader: SnapshotReader) -> Iterator[MetricFamily]:
    services = reader.services()
    yield _scalar("gt_services_total", "Total number of services", len(services))
    yield _scalar(
        "gt_services_running",
        "Number of running services",
        sum(1 for s in services if s.is_running),
    )
    if services:
        yield from service_families(services)

    usage = reader.usage(include_extended_sessions=False)
    yield _scalar("gt_chat_rooms", "Total number of chat rooms", usage.num_chat_rooms)
    yield _scalar("gt_chat_users", "Total number of chat users", usage.num_chat_users)
    yield _scalar(
        "gt_running_lessons",
        "Total number of running lessons",
        usage.num_running_lessons,
    )

    summary = reader.summary()
    if summary.domain_summaries:
        yield MetricFamily(
            "gt_sessions_total",
            "Total number of sessions per domain",
            "gauge",
            [
                MetricSample(
                    "gt_sessions_total",
                    domain.session_count,
                    {"domain": str(domain.domain_id)},
                )
                for domain in summary.domain_summaries
            ],
        )


def render_exposition(reader: SnapshotReader) -> str:
    lines: list[str] = []
    try:
        for family in iter_families(reader):
            lines.extend(family.render())
    except Exception as e:
        logger.exception("Metrics exposition truncated after %d lines", len(lines))
        message = (str(e) or type(e).__name__).replace("\n", " ")
        lines.append(f"# Error generating metrics: {message}")
    return "\n".join(lines) + "\n"

"""Prometheus metrics for settlement report runs."""

from __future__ import annotations

from prometheus_client import REGISTRY, Counter, Histogram, push_to_gateway

SETTLEMENT_RUN_COUNTER = Counter(
    "settlement_report_runs_total",
    "Settlement report runs by program selector and outcome.",
    labelnames=("program", "outcome"),
)
SETTLEMENT_DETAIL_LINES_COUNTER = Counter(
    "settlement_report_detail_lines_total",
    "Detail records written to rendered settlement reports.",
    labelnames=("program",),
)
BACKUP_FAILURE_COUNTER = Counter(
    "settlement_report_backup_failures_total",
    "Backup copies that could not be persisted.",
)
STAGE_LATENCY_SECONDS = Histogram(
    "settlement_report_stage_latency_seconds",
    "Duration of individual settlement pipeline stages in seconds.",
    labelnames=("stage",),
)


def record_run(program: str, outcome: str) -> None:
    """Count a finished run."""
    SETTLEMENT_RUN_COUNTER.labels(program=program, outcome=outcome).inc()


def push_metrics(gateway: str | None, *, job: str) -> bool:
    """Push the default registry to a Prometheus push gateway.

    Batch jobs exit before they could be scraped, so metrics are pushed once the
    run finishes. Returns ``False`` when no gateway is configured.
    """
    if not gateway:
        return False
    push_to_gateway(gateway, job=job, registry=REGISTRY)
    return True


__all__ = [
    "BACKUP_FAILURE_COUNTER",
    "SETTLEMENT_DETAIL_LINES_COUNTER",
    "SETTLEMENT_RUN_COUNTER",
    "STAGE_LATENCY_SECONDS",
    "push_metrics",
    "record_run",
]

"""Observability utilities."""

from .metrics import (
    BACKUP_FAILURE_COUNTER,
    SETTLEMENT_DETAIL_LINES_COUNTER,
    SETTLEMENT_RUN_COUNTER,
    STAGE_LATENCY_SECONDS,
    push_metrics,
    record_run,
)
from .tracing import (
    initialise_tracing,
    inject_traceparent,
    instrument_sqlalchemy_engine,
    span_from_traceparent,
)

__all__ = [
    "BACKUP_FAILURE_COUNTER",
    "SETTLEMENT_DETAIL_LINES_COUNTER",
    "SETTLEMENT_RUN_COUNTER",
    "STAGE_LATENCY_SECONDS",
    "initialise_tracing",
    "inject_traceparent",
    "instrument_sqlalchemy_engine",
    "push_metrics",
    "record_run",
    "span_from_traceparent",
]

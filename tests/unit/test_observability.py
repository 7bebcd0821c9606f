from __future__ import annotations

import logging
from pathlib import Path

import pytest
from opentelemetry import trace
from prometheus_client import REGISTRY

from settlement.core.logging import configure_logging
from settlement.obs import initialise_tracing, inject_traceparent, push_metrics, record_run, span_from_traceparent


def test_record_run_counts_outcomes() -> None:
    labels = {"program": "primary", "outcome": "DONE"}
    before = REGISTRY.get_sample_value("settlement_report_runs_total", labels) or 0.0

    record_run("primary", "DONE")

    assert REGISTRY.get_sample_value("settlement_report_runs_total", labels) == before + 1


def test_push_metrics_without_gateway_is_noop() -> None:
    assert push_metrics(None, job="settlement-report-worker") is False


def test_push_metrics_uses_gateway(monkeypatch: pytest.MonkeyPatch) -> None:
    pushed: list[tuple[str, str]] = []

    def fake_push(gateway: str, *, job: str, registry: object) -> None:
        pushed.append((gateway, job))

    monkeypatch.setattr("settlement.obs.metrics.push_to_gateway", fake_push)

    assert push_metrics("pushgateway:9091", job="settlement-report-worker") is True
    assert pushed == [("pushgateway:9091", "settlement-report-worker")]


def test_span_from_traceparent_links_context() -> None:
    initialise_tracing(service_name="unit-test-service")
    tracer = trace.get_tracer(__name__)
    with tracer.start_as_current_span("parent"):
        carrier = inject_traceparent({})
    traceparent = carrier.get("traceparent")
    assert traceparent is not None

    with span_from_traceparent("child", traceparent) as span:
        assert (
            span.get_span_context().trace_id == trace.get_current_span().get_span_context().trace_id
        )


def test_configure_logging_falls_back_to_basic_config(tmp_path: Path) -> None:
    configure_logging(tmp_path / "missing.yaml")

    assert logging.getLogger().handlers


"""One-shot worker producing and delivering a settlement report."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable, Sequence
from contextlib import AbstractContextManager
from datetime import date

from sqlalchemy.orm import Session

from settlement.core.config import Settings, get_settings
from settlement.core.logging import configure_logging
from settlement.obs import push_metrics
from settlement.services.pipeline import PipelineResult, ProgramSelector, RunOutcome, create_pipeline
from settlement.services.sources import SqlAlchemySettlementSource
from settlement.workers.observability import configure_worker, worker_span

logger = logging.getLogger(__name__)
SERVICE_NAME = "settlement-report-worker"


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate and deliver the settlement report for one program.")
    parser.add_argument(
        "--date",
        dest="processing_date",
        type=date.fromisoformat,
        default=date.today(),
        help="Processing date (YYYY-MM-DD); defaults to today.",
    )
    parser.add_argument(
        "--program",
        required=True,
        help=f"Program selector: {', '.join(item.value for item in ProgramSelector)}.",
    )
    parser.add_argument(
        "--local",
        action="store_true",
        help="Run against a local environment (ephemeral keyring, unknown SFTP host keys accepted).",
    )
    return parser.parse_args(argv)


def run_once(
    processing_date: date,
    program: str,
    *,
    local: bool,
    session_factory: Callable[[], AbstractContextManager[Session]],
    settings: Settings | None = None,
) -> PipelineResult:
    """Execute a single settlement run inside its own database session."""

    settings = settings or get_settings()
    with worker_span("settlement_report.run", program=program, processing_date=processing_date.isoformat()):
        with session_factory() as session:
            pipeline = create_pipeline(SqlAlchemySettlementSource(session), settings=settings, local=local)
            return pipeline.run(processing_date, program)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging()
    configure_worker(SERVICE_NAME)
    settings = get_settings()

    from settlement.db.session import get_session  # engine is created on import

    result = run_once(
        args.processing_date,
        args.program,
        local=args.local,
        session_factory=get_session,
        settings=settings,
    )
    if settings.enable_metrics:
        try:
            push_metrics(settings.metrics_pushgateway_url, job=SERVICE_NAME)
        except OSError as exc:
            logger.warning("failed to push settlement metrics: %s", exc)

    logger.info(
        "settlement report worker finished",
        extra={"outcome": result.outcome.value, "stage": result.stage.value},
    )
    return 1 if result.outcome is RunOutcome.FAILED else 0


if __name__ == "__main__":
    sys.exit(main())

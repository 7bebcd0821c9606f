"""Settlement report orchestration.

One call to :meth:`SettlementReportPipeline.run` produces, backs up, encrypts
and delivers the settlement file for a single (processing date, program) pair.
Stages run strictly in sequence::

    validate -> fetch -> resolve -> build -> render -> backup -> encrypt -> transmit

Only configuration errors raised by ``validate`` escape ``run``. An empty fetch
ends the run with ``NO_DATA``; a failed backup is logged and skipped; any other
failure is logged once with the program and stage and reported as ``FAILED``.
"""
from __future__ import annotations

import enum
import logging
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime
from datetime import time as time_of_day

from settlement.core.config import Settings, get_settings
from settlement.core.exceptions import ConfigurationError, DeliveryError, StageFailedError
from settlement.obs import SETTLEMENT_DETAIL_LINES_COUNTER, STAGE_LATENCY_SECONDS, record_run
from settlement.services.backup import BackupSink, S3BackupSink
from settlement.services.encryption import GnuPGEncoder, SecureEncoder
from settlement.services.layout import (
    LayoutSerializer,
    backup_key,
    remote_delivery_path,
    render_file_name,
)
from settlement.services.report_builder import ReportProfile, build_report, parse_sequence_anchor
from settlement.services.resolver import resolve_records
from settlement.services.sources import SettlementSource
from settlement.services.transfer import SftpTransmitter, Transmitter
from settlement.workers.observability import current_traceparent, worker_span

logger = logging.getLogger(__name__)


class ProgramSelector(str, enum.Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"


class PipelineStage(str, enum.Enum):
    VALIDATE = "validate"
    FETCH = "fetch"
    RESOLVE = "resolve"
    BUILD = "build"
    RENDER = "render"
    BACKUP = "backup"
    ENCRYPT = "encrypt"
    TRANSMIT = "transmit"
    DONE = "done"


class RunOutcome(str, enum.Enum):
    DONE = "DONE"
    NO_DATA = "NO_DATA"
    FAILED = "FAILED"


@dataclass(slots=True, frozen=True)
class PipelineResult:
    """Outcome of a single settlement run."""

    outcome: RunOutcome
    stage: PipelineStage
    detail: str | None = None
    file_name: str | None = None
    remote_path: str | None = None
    detail_count: int = 0
    backed_up: bool = False

    @property
    def succeeded(self) -> bool:
        return self.outcome is not RunOutcome.FAILED


def resolve_program(selector: ProgramSelector | str, settings: Settings) -> tuple[ProgramSelector, str]:
    """Map a program selector onto its configured program identifier."""

    try:
        program = ProgramSelector(selector)
    except ValueError as exc:
        allowed = ", ".join(item.value for item in ProgramSelector)
        raise ConfigurationError(f"unknown program selector {selector!r}; expected one of: {allowed}") from exc

    program_id = {
        ProgramSelector.PRIMARY: settings.primary_program_id,
        ProgramSelector.SECONDARY: settings.secondary_program_id,
    }[program]
    if not program_id:
        raise ConfigurationError(f"no program identifier configured for {program.value!r}")
    return program, program_id


class SettlementReportPipeline:
    """Coordinates a settlement report run from fetch to delivery."""

    def __init__(
        self,
        *,
        source: SettlementSource,
        backup_sink: BackupSink,
        encoder: SecureEncoder,
        transmitter: Transmitter,
        settings: Settings | None = None,
        serializer: LayoutSerializer | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._source = source
        self._backup_sink = backup_sink
        self._encoder = encoder
        self._transmitter = transmitter
        self._serializer = serializer or LayoutSerializer(
            delimiter=self._settings.field_delimiter,
            terminator=self._settings.record_terminator,
        )
        self._clock = clock or datetime.now
        self._profile = ReportProfile(
            company_id=self._settings.company_id,
            file_type_code=self._settings.file_type_code,
            layout_version=self._settings.layout_version,
        )

    @contextmanager
    def _stage(self, stage: PipelineStage, program: ProgramSelector) -> Iterator[None]:
        start = time.perf_counter()
        try:
            with worker_span(f"settlement_report.{stage.value}", program=program.value):
                yield
        finally:
            STAGE_LATENCY_SECONDS.labels(stage=stage.value).observe(time.perf_counter() - start)

    def run(self, processing_date: date, selector: ProgramSelector | str) -> PipelineResult:
        program, program_id = resolve_program(selector, self._settings)
        context = {"program": program.value, "program_id": program_id, "processing_date": processing_date.isoformat()}
        logger.info("settlement run started", extra=context)

        stage = PipelineStage.FETCH
        try:
            with self._stage(stage, program):
                transactions = self._source.fetch_transactions(processing_date, program_id)
                if not transactions:
                    logger.info("no settlement transactions found; nothing to deliver", extra=context)
                    record_run(program.value, RunOutcome.NO_DATA.value)
                    return PipelineResult(outcome=RunOutcome.NO_DATA, stage=PipelineStage.DONE)
                merchants = self._source.fetch_merchants({item.merchant_id for item in transactions})
                accounts = self._source.fetch_accounts({item.uid for item in merchants})

            stage = PipelineStage.RESOLVE
            with self._stage(stage, program):
                lines = resolve_records(transactions, merchants, accounts)

            stage = PipelineStage.BUILD
            with self._stage(stage, program):
                generated_at = self._clock()
                report = build_report(
                    lines,
                    generated_at=generated_at,
                    sequence_anchor=parse_sequence_anchor(transactions[0].reference_number),
                    program_id=program_id,
                    profile=self._profile,
                )

            stage = PipelineStage.RENDER
            with self._stage(stage, program):
                data = self._serializer.render(report)
                file_name = render_file_name(self._settings.company_id, program_id, generated_at)
                backup_name = render_file_name(
                    self._settings.company_id,
                    program_id,
                    datetime.combine(processing_date, time_of_day.min),
                )

            stage = PipelineStage.BACKUP
            with self._stage(stage, program):
                try:
                    backed_up = self._backup_sink.persist(backup_key(backup_name, self._settings.backup_prefix), data)
                except Exception as exc:
                    logger.warning(
                        "settlement backup failed: program=%s %s",
                        program.value,
                        exc,
                        extra={**context, "stage": stage.value},
                    )
                    backed_up = False
                if not backed_up:
                    logger.warning("continuing settlement run without backup copy", extra=context)

            stage = PipelineStage.ENCRYPT
            with self._stage(stage, program):
                payload = self._encoder.encrypt(data, file_name, self._settings.pgp_public_key)

            stage = PipelineStage.TRANSMIT
            remote_path = remote_delivery_path(self._settings.sftp_user, file_name)
            with self._stage(stage, program):
                result = self._transmitter.upload(remote_path, payload)
                if not result.success:
                    raise DeliveryError(result.message)
        except Exception as exc:
            failure = StageFailedError(stage.value, str(exc) or exc.__class__.__name__)
            logger.error(
                "settlement run failed: program=%s %s",
                program.value,
                failure,
                extra={**context, "stage": stage.value, "traceparent": current_traceparent()},
            )
            record_run(program.value, RunOutcome.FAILED.value)
            return PipelineResult(outcome=RunOutcome.FAILED, stage=stage, detail=str(failure))

        SETTLEMENT_DETAIL_LINES_COUNTER.labels(program=program.value).inc(report.trailer.count)
        record_run(program.value, RunOutcome.DONE.value)
        logger.info(
            "settlement run delivered",
            extra={**context, "remote_path": remote_path, "detail_count": report.trailer.count},
        )
        return PipelineResult(
            outcome=RunOutcome.DONE,
            stage=PipelineStage.DONE,
            detail=result.message,
            file_name=file_name,
            remote_path=remote_path,
            detail_count=report.trailer.count,
            backed_up=backed_up,
        )


def create_pipeline(
    source: SettlementSource,
    *,
    settings: Settings | None = None,
    local: bool = False,
) -> SettlementReportPipeline:
    """Wire the production collaborators; ``local`` relaxes host keys and keyrings."""

    settings = settings or get_settings()
    return SettlementReportPipeline(
        source=source,
        backup_sink=S3BackupSink.from_settings(settings),
        encoder=GnuPGEncoder.from_settings(settings, local=local),
        transmitter=SftpTransmitter.from_settings(settings, local=local),
        settings=settings,
    )


__all__ = [
    "PipelineResult",
    "PipelineStage",
    "ProgramSelector",
    "RunOutcome",
    "SettlementReportPipeline",
    "create_pipeline",
    "resolve_program",
]

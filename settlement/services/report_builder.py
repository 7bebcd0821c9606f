"""Assemble settlement reports from resolved transaction lines."""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from settlement.services.records import ResolvedLine

HEADER_RECORD_TYPE = "H"
DETAIL_RECORD_TYPE = "D"
TRAILER_RECORD_TYPE = "T"
PROGRAM_TYPE = "ACH"

_CENTS = Decimal("0.01")


@dataclass(slots=True, frozen=True)
class ReportProfile:
    """Counterparty-assigned values stamped on every report."""

    company_id: str
    file_type_code: str
    layout_version: str


@dataclass(slots=True, frozen=True)
class ReportHeader:
    file_type_code: str
    layout_version: str
    company_id: str
    program_id: str
    generated_at: datetime
    program_type: str = PROGRAM_TYPE
    record_type: str = HEADER_RECORD_TYPE


@dataclass(slots=True, frozen=True)
class ReportDetail:
    company_id: str
    program_id: str
    account_number: str | None
    amount: Decimal
    sequence_anchor: int
    record_type: str = DETAIL_RECORD_TYPE


@dataclass(slots=True, frozen=True)
class ReportTrailer:
    count: int
    total: str
    record_type: str = TRAILER_RECORD_TYPE


@dataclass(slots=True, frozen=True)
class Report:
    header: ReportHeader
    details: tuple[ReportDetail, ...]
    trailer: ReportTrailer


def format_total(amount: Decimal) -> str:
    """Round ``amount`` half-up to cents and return it with two fractional digits."""

    rounded = amount.quantize(_CENTS, rounding=ROUND_HALF_UP)
    if rounded.is_zero():
        rounded = rounded.copy_abs()
    return f"{rounded:.2f}"


def parse_sequence_anchor(reference_number: str) -> int:
    """Return the batch sequence anchor carried by a transaction reference number."""

    text = str(reference_number).strip()
    if not text.isdigit():
        msg = f"reference number {reference_number!r} is not a sequence number"
        raise ValueError(msg)
    return int(text)


def build_report(
    lines: Sequence[ResolvedLine],
    *,
    generated_at: datetime,
    sequence_anchor: int,
    program_id: str,
    profile: ReportProfile,
) -> Report:
    """Build the header, detail and trailer records for ``lines``.

    Amounts are summed exactly and the total is rounded once when the trailer
    is formatted. ``lines`` must not be empty.
    """

    if not lines:
        raise ValueError("a settlement report requires at least one transaction")

    header = ReportHeader(
        file_type_code=profile.file_type_code,
        layout_version=profile.layout_version,
        company_id=profile.company_id,
        program_id=program_id,
        generated_at=generated_at,
    )

    total = Decimal("0")
    details: list[ReportDetail] = []
    for line in lines:
        amount = Decimal(str(line.transaction.amount))
        total += amount
        details.append(
            ReportDetail(
                company_id=profile.company_id,
                program_id=program_id,
                account_number=line.account_number,
                amount=amount,
                sequence_anchor=sequence_anchor,
            )
        )

    trailer = ReportTrailer(count=len(details), total=format_total(total))
    return Report(header=header, details=tuple(details), trailer=trailer)


__all__ = [
    "DETAIL_RECORD_TYPE",
    "HEADER_RECORD_TYPE",
    "PROGRAM_TYPE",
    "Report",
    "ReportDetail",
    "ReportHeader",
    "ReportProfile",
    "ReportTrailer",
    "TRAILER_RECORD_TYPE",
    "build_report",
    "format_total",
    "parse_sequence_anchor",
]

"""Fixed-layout rendering of settlement reports.

The counterparty validates the file byte for byte, so field order per record
type is part of the format::

    H|<file type>|<version>|ACH|<company id>|<program id>|<yyyyMMddHHmmss>
    D|<company id>|<program id>|<account number>|<amount>|<sequence anchor>
    T|<detail count>|<total>

There is no column-header row and every record, including the trailer, ends
with the record terminator.
"""
from __future__ import annotations

import io
from datetime import datetime
from decimal import Decimal

from settlement.core.exceptions import LayoutError
from settlement.services.report_builder import Report, ReportDetail, ReportHeader, ReportTrailer

TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"
BACKUP_PREFIX = "Settlement/TransactionalDataLayout/Backup"
_PATH_SEPARATORS = ("/", "\\")


def render_file_name(company_id: str, program_id: str, stamp: datetime) -> str:
    """Return the report file name with path separators stripped."""

    name = f"{company_id}_{program_id}_{stamp.strftime(TIMESTAMP_FORMAT)}.txt"
    for separator in _PATH_SEPARATORS:
        name = name.replace(separator, "")
    return name


def backup_key(file_name: str, prefix: str = BACKUP_PREFIX) -> str:
    return f"{prefix.rstrip('/')}/{file_name}"


def remote_delivery_path(sftp_user: str, file_name: str) -> str:
    return f"/users/{sftp_user}/incoming/{file_name}.pgp"


_MIN_AMOUNT_SCALE = Decimal("0.01")


def _format_amount(amount: Decimal) -> str:
    """Render at least cents, keeping further significant digits but not column padding."""

    value = amount.normalize()
    if value.as_tuple().exponent > -2:
        value = value.quantize(_MIN_AMOUNT_SCALE)
    if value.is_zero():
        value = value.copy_abs()
    return format(value, "f")


class LayoutSerializer:
    """Render a :class:`Report` into the delimiter-separated byte layout."""

    def __init__(self, *, delimiter: str = "|", terminator: str = "\r\n", encoding: str = "ascii") -> None:
        if not delimiter or delimiter in terminator:
            raise ValueError("delimiter must be non-empty and distinct from the record terminator")
        self._delimiter = delimiter
        self._terminator = terminator
        self._encoding = encoding

    def render(self, report: Report) -> bytes:
        with io.StringIO(newline="") as buffer:
            self._write(buffer, self._header_fields(report.header))
            for detail in report.details:
                self._write(buffer, self._detail_fields(detail))
            self._write(buffer, self._trailer_fields(report.trailer))
            text = buffer.getvalue()
        try:
            return text.encode(self._encoding)
        except UnicodeEncodeError as exc:
            raise LayoutError(f"report contains characters outside {self._encoding}") from exc

    @staticmethod
    def _header_fields(header: ReportHeader) -> list[str]:
        return [
            header.record_type,
            header.file_type_code,
            header.layout_version,
            header.program_type,
            header.company_id,
            header.program_id,
            header.generated_at.strftime(TIMESTAMP_FORMAT),
        ]

    @staticmethod
    def _detail_fields(detail: ReportDetail) -> list[str]:
        return [
            detail.record_type,
            detail.company_id,
            detail.program_id,
            detail.account_number or "",
            _format_amount(detail.amount),
            str(detail.sequence_anchor),
        ]

    @staticmethod
    def _trailer_fields(trailer: ReportTrailer) -> list[str]:
        return [trailer.record_type, str(trailer.count), trailer.total]

    def _write(self, buffer: io.StringIO, fields: list[str]) -> None:
        for value in fields:
            if self._delimiter in value or self._terminator in value or "\r" in value or "\n" in value:
                raise LayoutError(f"field value {value!r} would break the record layout")
        buffer.write(self._delimiter.join(fields))
        buffer.write(self._terminator)


__all__ = [
    "BACKUP_PREFIX",
    "LayoutSerializer",
    "TIMESTAMP_FORMAT",
    "backup_key",
    "remote_delivery_path",
    "render_file_name",
]

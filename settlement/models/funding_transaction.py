"""Funding transaction ORM model."""
from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from settlement.models.base import Base


class FundingTransaction(Base):
    """Funding transaction settled to a merchant on a processing date."""

    __tablename__ = "funding_transactions"
    __table_args__ = (
        Index("ix_funding_transactions_program_date", "program_id", "processing_date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    merchant_id: Mapped[str] = mapped_column(String(64), nullable=False)
    program_id: Mapped[str] = mapped_column(String(32), nullable=False)
    processing_date: Mapped[date] = mapped_column(Date, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 4), nullable=False)
    reference_number: Mapped[str] = mapped_column(String(32), nullable=False)


__all__ = ["FundingTransaction"]

"""Data access for settlement runs."""
from __future__ import annotations

from collections.abc import Collection
from datetime import date
from decimal import Decimal
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from settlement.models import FundingTransaction, Merchant, MerchantAccount
from settlement.services.records import MerchantAccountRecord, MerchantRecord, TransactionRecord


class SettlementSource(Protocol):
    """Protocol describing the lookups a settlement run needs."""

    def fetch_transactions(self, processing_date: date, program_id: str) -> list[TransactionRecord]:
        """Return the funding transactions for the date and program, in fetch order."""

    def fetch_merchants(self, merchant_ids: Collection[str]) -> list[MerchantRecord]:
        """Return merchants carrying any of ``merchant_ids``."""

    def fetch_accounts(self, merchant_uids: Collection[str]) -> list[MerchantAccountRecord]:
        """Return settlement accounts owned by any of ``merchant_uids``."""


class SqlAlchemySettlementSource:
    """Reads settlement inputs from the reporting database."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def fetch_transactions(self, processing_date: date, program_id: str) -> list[TransactionRecord]:
        statement = (
            select(FundingTransaction)
            .where(
                FundingTransaction.processing_date == processing_date,
                FundingTransaction.program_id == program_id,
            )
            .order_by(FundingTransaction.id)
        )
        return [
            TransactionRecord(
                merchant_id=row.merchant_id,
                amount=Decimal(str(row.amount)),
                reference_number=row.reference_number,
            )
            for row in self._session.scalars(statement)
        ]

    def fetch_merchants(self, merchant_ids: Collection[str]) -> list[MerchantRecord]:
        if not merchant_ids:
            return []
        statement = (
            select(Merchant)
            .where(Merchant.merchant_id.in_(set(merchant_ids)))
            .order_by(Merchant.id)
        )
        return [MerchantRecord(merchant_id=row.merchant_id, uid=row.uid) for row in self._session.scalars(statement)]

    def fetch_accounts(self, merchant_uids: Collection[str]) -> list[MerchantAccountRecord]:
        if not merchant_uids:
            return []
        statement = (
            select(MerchantAccount)
            .where(MerchantAccount.merchant_uid.in_(set(merchant_uids)))
            .order_by(MerchantAccount.id)
        )
        return [
            MerchantAccountRecord(merchant_uid=row.merchant_uid, account_number=row.account_number)
            for row in self._session.scalars(statement)
        ]


__all__ = ["SettlementSource", "SqlAlchemySettlementSource"]

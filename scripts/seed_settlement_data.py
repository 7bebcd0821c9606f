"""Seed script for a demo merchant and today's funding transactions."""
from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session

from settlement.core.config import get_settings
from settlement.db.session import SessionLocal, engine
from settlement.models import Base, FundingTransaction, Merchant, MerchantAccount

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DEMO_MERCHANT_ID = "MERCH-0001"
DEMO_ACCOUNT_NUMBER = "000123456789"


def seed(session: Session, *, processing_date: date | None = None) -> None:
    """Seed a merchant with a settlement account and a few funding transactions."""

    settings = get_settings()
    program_id = settings.primary_program_id or "PRG001"
    processing_date = processing_date or date.today()

    merchant = session.query(Merchant).filter(Merchant.merchant_id == DEMO_MERCHANT_ID).one_or_none()
    if merchant is None:
        merchant = Merchant(merchant_id=DEMO_MERCHANT_ID, name="Demo Merchant")
        session.add(merchant)
        session.flush()
        session.add(MerchantAccount(merchant_uid=merchant.uid, account_number=DEMO_ACCOUNT_NUMBER))
        logger.info("Created merchant %s", DEMO_MERCHANT_ID)
    else:
        logger.info("Merchant %s already exists", DEMO_MERCHANT_ID)

    existing = (
        session.query(FundingTransaction)
        .filter(
            FundingTransaction.processing_date == processing_date,
            FundingTransaction.program_id == program_id,
        )
        .count()
    )
    if existing:
        logger.info("%d transactions already seeded for %s", existing, processing_date)
        return

    for offset, amount in enumerate(("10.005", "20.00", "5.001")):
        session.add(
            FundingTransaction(
                merchant_id=DEMO_MERCHANT_ID,
                program_id=program_id,
                processing_date=processing_date,
                amount=Decimal(amount),
                reference_number=str(100200 + offset),
            )
        )
    logger.info("Added funding transactions for %s", processing_date)


def main() -> None:
    Base.metadata.create_all(bind=engine)
    with SessionLocal() as session:
        seed(session)
        session.commit()


if __name__ == "__main__":
    main()

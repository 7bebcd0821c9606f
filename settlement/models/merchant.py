"""Merchant and merchant account ORM models."""
from __future__ import annotations

import uuid

from sqlalchemy import ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from settlement.models.base import Base


class Merchant(Base):
    """Merchant receiving settlement funds.

    ``merchant_id`` is the business identifier carried on transactions; ``uid``
    is the surrogate key accounts are joined on.
    """

    __tablename__ = "merchants"
    __table_args__ = (
        Index("ix_merchants_merchant_id", "merchant_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    uid: Mapped[str] = mapped_column(
        String(36), unique=True, nullable=False, default=lambda: str(uuid.uuid4())
    )
    merchant_id: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str | None] = mapped_column(String(255))

    accounts = relationship("MerchantAccount", back_populates="merchant")


class MerchantAccount(Base):
    """Settlement bank account owned by a merchant."""

    __tablename__ = "merchant_accounts"
    __table_args__ = (
        Index("ix_merchant_accounts_merchant_uid", "merchant_uid"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    merchant_uid: Mapped[str] = mapped_column(
        String(36), ForeignKey("merchants.uid", ondelete="CASCADE"), nullable=False
    )
    account_number: Mapped[str] = mapped_column(String(34), nullable=False)

    merchant = relationship("Merchant", back_populates="accounts")


__all__ = ["Merchant", "MerchantAccount"]

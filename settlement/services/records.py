"""In-memory records flowing through a single settlement run."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(slots=True, frozen=True)
class TransactionRecord:
    """Funding transaction fetched for a run."""

    merchant_id: str
    amount: Decimal
    reference_number: str


@dataclass(slots=True, frozen=True)
class MerchantRecord:
    """Merchant reference data; ``uid`` joins to accounts."""

    merchant_id: str
    uid: str


@dataclass(slots=True, frozen=True)
class MerchantAccountRecord:
    """Settlement account owned by the merchant with ``merchant_uid``."""

    merchant_uid: str
    account_number: str


@dataclass(slots=True, frozen=True)
class ResolvedLine:
    """A transaction joined to its merchant and settlement account, when known."""

    transaction: TransactionRecord
    merchant: MerchantRecord | None = None
    account: MerchantAccountRecord | None = None

    @property
    def account_number(self) -> str | None:
        return self.account.account_number if self.account is not None else None


__all__ = ["MerchantAccountRecord", "MerchantRecord", "ResolvedLine", "TransactionRecord"]

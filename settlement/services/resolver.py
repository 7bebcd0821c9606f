"""Join transactions to merchants and settlement accounts."""
from __future__ import annotations

from collections.abc import Iterable, Sequence

from settlement.services.records import (
    MerchantAccountRecord,
    MerchantRecord,
    ResolvedLine,
    TransactionRecord,
)


def _first_by(items: Iterable, key: str) -> dict:
    index: dict = {}
    for item in items:
        index.setdefault(getattr(item, key), item)
    return index


def resolve_records(
    transactions: Sequence[TransactionRecord],
    merchants: Iterable[MerchantRecord],
    accounts: Iterable[MerchantAccountRecord],
) -> list[ResolvedLine]:
    """Return one resolved line per transaction, in transaction order.

    When several merchants share an identifier (or several accounts share a
    merchant uid) the first one encountered wins. Missing joins leave the
    corresponding field empty.
    """

    merchants_by_id: dict[str, MerchantRecord] = _first_by(merchants, "merchant_id")
    accounts_by_uid: dict[str, MerchantAccountRecord] = _first_by(accounts, "merchant_uid")

    lines: list[ResolvedLine] = []
    for transaction in transactions:
        merchant = merchants_by_id.get(transaction.merchant_id)
        account = accounts_by_uid.get(merchant.uid) if merchant is not None else None
        lines.append(ResolvedLine(transaction=transaction, merchant=merchant, account=account))
    return lines


__all__ = ["resolve_records"]

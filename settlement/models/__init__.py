"""ORM models package."""
from .base import Base
from .funding_transaction import FundingTransaction
from .merchant import Merchant, MerchantAccount

__all__ = [
    "Base",
    "FundingTransaction",
    "Merchant",
    "MerchantAccount",
]

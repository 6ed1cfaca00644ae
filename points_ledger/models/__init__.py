"""Domain models for the points ledger."""

from points_ledger.models.catalog import Bank, OptionTag, RedemptionOption
from points_ledger.models.enums import PaymentMethod, RedemptionStatus, TagType, ValuationMode
from points_ledger.models.ledger import Card, Redemption, Transaction, User

__all__ = [
    "Bank",
    "Card",
    "OptionTag",
    "PaymentMethod",
    "Redemption",
    "RedemptionOption",
    "RedemptionStatus",
    "TagType",
    "Transaction",
    "User",
    "ValuationMode",
]

"""Enumeration types for ledger entities."""

from enum import Enum


class RedemptionStatus(str, Enum):
    COMPLETED = "completed"


class TagType(str, Enum):
    BEST = "best"
    EXPIRING = "expiring"
    POPULAR = "popular"
    LIMITED = "limited"


class PaymentMethod(str, Enum):
    UPI = "upi"
    CARD = "card"
    POINTS = "points"


class ValuationMode(str, Enum):
    FLAT = "flat"  # every card at the default rate
    PER_CARD = "per_card"  # bank/card-type rate from the catalog

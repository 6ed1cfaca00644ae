"""User, card, transaction and redemption models."""

from dataclasses import dataclass, field
from datetime import date, datetime

from points_ledger.models.enums import RedemptionStatus


def _default_preferences() -> dict:
    return {"notifications": True, "theme": "light"}


@dataclass
class User:
    """Owner of cards, transactions and redemptions."""

    username: str
    name: str
    email: str
    preferences: dict = field(default_factory=_default_preferences)
    user_id: int | None = None


@dataclass
class Card:
    """Credit card tracked for rewards.

    ``expiry_date`` is the card's own expiry (``MM/YY``) and is display only.
    ``points_expiry_date`` applies to the whole balance; ``None`` means the
    points never expire.
    """

    user_id: int
    bank_id: str
    card_type: str
    last_four_digits: str
    expiry_date: str
    points: int = 0
    points_expiry_date: date | None = None
    card_id: int | None = None


@dataclass
class Transaction:
    """Earn or spend event on a single card.

    A negative ``points_earned`` records points spent (redemption or points
    payment).
    """

    card_id: int
    user_id: int
    date: datetime
    description: str
    amount: int
    points_earned: int
    transaction_id: int | None = None


@dataclass
class Redemption:
    """Conversion of card points into catalog value."""

    user_id: int
    card_id: int
    option_id: str
    points_used: int
    value_obtained: int
    date: datetime
    status: RedemptionStatus = RedemptionStatus.COMPLETED
    redemption_id: int | None = None

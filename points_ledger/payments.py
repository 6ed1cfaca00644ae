"""Mock UPI payments that earn or spend card points."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_CEILING, Decimal
from typing import TYPE_CHECKING, Any, Mapping

from points_ledger.config import PaymentConfig
from points_ledger.exceptions import InsufficientPointsError, InvalidInputError
from points_ledger.models import PaymentMethod, Transaction
from points_ledger.validation import (
    UPI_ID_PATTERN,
    parse_datetime,
    require_bool,
    require_int,
    require_str,
)

if TYPE_CHECKING:
    from points_ledger.service import LedgerService

logger = logging.getLogger(__name__)


@dataclass
class PaymentRequest:
    """A mock payment to a UPI id."""

    amount: int
    upi_id: str
    method: PaymentMethod
    card_id: int | None = None
    use_points: bool = False
    date: datetime | None = None

    @property
    def pays_with_points(self) -> bool:
        return self.method is PaymentMethod.POINTS or (
            self.method is PaymentMethod.UPI and self.use_points
        )


def parse_payment(data: Mapping[str, Any], max_amount: int = 100_000) -> PaymentRequest:
    """Build a ``PaymentRequest`` from a raw payload."""
    raw_method = data.get("method") or data.get("payment_method")
    try:
        method = PaymentMethod(raw_method)
    except ValueError as e:
        raise InvalidInputError("Please select a payment method", field="method") from e

    when = data.get("date")
    return PaymentRequest(
        amount=require_int(data, "amount", minimum=1, maximum=max_amount),
        upi_id=require_str(
            data, "upi_id", UPI_ID_PATTERN, "Invalid UPI ID format (e.g. name@upi)"
        ),
        method=method,
        card_id=require_int(data, "card_id", default=None),
        use_points=require_bool(data, "use_points", default=False),
        date=parse_datetime(when, "date") if when else None,
    )


class MockPaymentProcessor:
    """Turn mock payments into ledger transactions.

    Paying with points costs ``ceil(amount / points_rate)`` points; any other
    payment through a card earns ``ceil(amount * cashback_rate)`` points.

    Parameters
    ----------
    service : LedgerService
        Service that records the resulting transaction.
    config : PaymentConfig | None
        Rates and limits.
    """

    def __init__(self, service: LedgerService, config: PaymentConfig | None = None) -> None:
        self.service = service
        self.config = config or PaymentConfig()

    def quote(self, amount: int) -> int:
        """Points needed to pay ``amount`` with points."""
        return int((Decimal(amount) / self.config.points_rate).to_integral_value(rounding=ROUND_CEILING))

    def cashback(self, amount: int) -> int:
        return int((Decimal(amount) * self.config.cashback_rate).to_integral_value(rounding=ROUND_CEILING))

    def pay(self, user_id: int, request: PaymentRequest) -> Transaction:
        """Record a payment and its points effect on the chosen card."""
        card_id = request.card_id
        if card_id is None:
            if request.pays_with_points or request.method is PaymentMethod.CARD:
                raise InvalidInputError("Card ID is required", field="card_id")
            cards = self.service.get_cards(user_id)
            if not cards:
                raise InvalidInputError("No card available for this transaction", field="card_id")
            card_id = cards[0].card_id

        if request.pays_with_points:
            required = self.quote(request.amount)
            card = self.service.get_card(user_id, card_id)
            if card.points < required:
                logger.warning(
                    "Points payment of %d needs %d points, card %d has %d",
                    request.amount,
                    required,
                    card_id,
                    card.points,
                )
                raise InsufficientPointsError(card_id, required, card.points)
            points_earned = -required
        else:
            points_earned = self.cashback(request.amount)

        transaction = self.service.create_transaction(
            user_id,
            {
                "card_id": card_id,
                "date": request.date,
                "description": f"UPI Payment to {request.upi_id}",
                "amount": request.amount,
                "points_earned": points_earned,
            },
        )
        logger.info(
            "Payment of %d to %s via %s on card %d (%+d points)",
            request.amount,
            request.upi_id,
            request.method.value,
            card_id,
            points_earned,
        )
        return transaction

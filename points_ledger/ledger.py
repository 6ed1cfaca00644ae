"""Per-card points balance management."""

import logging

from points_ledger.exceptions import EntityNotFoundError, InsufficientPointsError, InvalidAmountError
from points_ledger.models import Card
from points_ledger.store.base import LedgerRepository

logger = logging.getLogger(__name__)


class PointsLedger:
    """Single source of truth for card point balances.

    Every balance change goes through ``apply_delta``, which delegates to the
    repository's conditional update so the balance never drops below zero,
    even with concurrent writers.

    Parameters
    ----------
    repository : LedgerRepository
        Storage holding the cards.
    """

    def __init__(self, repository: LedgerRepository) -> None:
        self.repository = repository

    def balance(self, card_id: int) -> int:
        """Current points on a card."""
        return self._require_card(card_id).points

    def apply_delta(self, card_id: int, delta: int) -> Card:
        """Add ``delta`` (any sign) to a card balance and return the updated card.

        Raises
        ------
        EntityNotFoundError
            If the card does not exist.
        InsufficientPointsError
            If the result would be negative. The balance is left unchanged.
        """
        try:
            card = self.repository.adjust_points(card_id, delta)
        except InsufficientPointsError as e:
            logger.warning(
                "Rejected points change on card %d: delta %d, balance %d",
                card_id,
                delta,
                e.available,
                extra={"card_id": card_id, "delta": delta, "balance": e.available},
            )
            raise

        logger.info(
            "Card %d points %+d -> %d",
            card_id,
            delta,
            card.points,
            extra={
                "user_id": card.user_id,
                "card_id": card_id,
                "delta": delta,
                "balance": card.points,
            },
        )
        return card

    def earn(self, card_id: int, points: int) -> Card:
        return self.apply_delta(card_id, points)

    def spend(self, card_id: int, points: int) -> Card:
        """Deduct ``points`` after checking the card can cover them."""
        if points <= 0:
            raise InvalidAmountError("Points to spend must be positive", field="points")

        available = self.balance(card_id)
        if points > available:
            logger.warning("Card %d cannot spend %d points (has %d)", card_id, points, available)
            raise InsufficientPointsError(card_id, points, available)

        return self.apply_delta(card_id, -points)

    def _require_card(self, card_id: int) -> Card:
        card = self.repository.get_card(card_id)
        if card is None:
            raise EntityNotFoundError(f"Card {card_id} not found")
        return card

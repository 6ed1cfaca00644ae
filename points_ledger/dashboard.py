"""Per-user dashboard figures."""

import logging
from dataclasses import dataclass, field
from decimal import Decimal

from points_ledger.catalog import ConversionCatalog
from points_ledger.expiry import ExpiryTracker
from points_ledger.models import Card, Transaction, ValuationMode
from points_ledger.store.base import LedgerRepository

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


@dataclass
class DashboardSummary:
    """Summary of a user's points across all cards."""

    total_points: int = 0
    points_value: Decimal = Decimal("0.00")
    expiring_points: int = 0
    cards: list[Card] = field(default_factory=list)
    recent_transactions: list[Transaction] = field(default_factory=list)


class DashboardAggregator:
    """Compose ledger, catalog and expiry data into dashboard figures.

    Parameters
    ----------
    repository : LedgerRepository
        Source of cards and transactions.
    catalog : ConversionCatalog
        Rates used for valuation.
    expiry : ExpiryTracker
        Classifies expiring balances.
    valuation : ValuationMode
        ``FLAT`` values every point at the catalog default rate;
        ``PER_CARD`` uses each card's bank/card-type rate.
    recent_limit : int
        Number of latest transactions to include.
    """

    def __init__(
        self,
        repository: LedgerRepository,
        catalog: ConversionCatalog,
        expiry: ExpiryTracker,
        valuation: ValuationMode = ValuationMode.FLAT,
        recent_limit: int = 5,
    ) -> None:
        self.repository = repository
        self.catalog = catalog
        self.expiry = expiry
        self.valuation = ValuationMode(valuation)
        self.recent_limit = recent_limit

    def rate_for_card(self, card: Card) -> Decimal:
        if self.valuation is ValuationMode.PER_CARD:
            return self.catalog.rate_for(card.bank_id, card.card_type)
        return self.catalog.default_rate

    def points_value(self, cards: list[Card]) -> Decimal:
        total = sum((card.points * self.rate_for_card(card) for card in cards), Decimal("0"))
        return total.quantize(CENTS)

    def summarize(self, user_id: int) -> DashboardSummary:
        """Build the dashboard summary for ``user_id``. Read only."""
        cards = self.repository.get_cards(user_id)
        recent = (
            self.repository.get_transactions(user_id, self.recent_limit) if self.recent_limit else []
        )

        summary = DashboardSummary(
            total_points=sum(card.points for card in cards),
            points_value=self.points_value(cards),
            expiring_points=self.expiry.sum_expiring_points(cards),
            cards=cards,
            recent_transactions=recent,
        )
        logger.debug(
            "Dashboard for user %d: %d points across %d cards",
            user_id,
            summary.total_points,
            len(cards),
        )
        return summary

"""Expiring-points classification."""

from datetime import date, timedelta
from typing import Callable, Iterable

from points_ledger.models import Card

DEFAULT_HORIZON_DAYS = 30


class ExpiryTracker:
    """Flag card balances whose points expire within a look-ahead window.

    A card without ``points_expiry_date`` never counts as expiring: its
    points do not expire. Dates already in the past count as expiring.

    Parameters
    ----------
    horizon_days : int
        Default look-ahead window in days.
    today : Callable[[], date]
        Clock used to anchor the window.
    """

    def __init__(
        self,
        horizon_days: int = DEFAULT_HORIZON_DAYS,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.horizon_days = horizon_days
        self._today = today

    def is_expiring_within(self, card: Card, days: int | None = None) -> bool:
        if card.points_expiry_date is None:
            return False
        horizon = self.horizon_days if days is None else days
        return card.points_expiry_date <= self._today() + timedelta(days=horizon)

    def expiring_cards(self, cards: Iterable[Card], days: int | None = None) -> list[Card]:
        return [card for card in cards if self.is_expiring_within(card, days)]

    def sum_expiring_points(self, cards: Iterable[Card], days: int | None = None) -> int:
        """Total points on cards expiring within the window."""
        return sum(card.points for card in self.expiring_cards(cards, days))

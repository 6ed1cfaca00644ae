"""Card and transaction payload generators."""

import random
from datetime import date, datetime, timedelta
from typing import Any, Iterator

from points_ledger.catalog import ConversionCatalog
from points_ledger.generators.base import BaseGenerator
from points_ledger.models import Card


class CardGenerator(BaseGenerator):
    """Generate ``create_card`` payloads for banks in the catalog.

    Parameters
    ----------
    catalog : ConversionCatalog | None
        Source of banks and card types.
    seed : int | None
        Random seed for reproducibility.
    """

    def __init__(self, catalog: ConversionCatalog | None = None, seed: int | None = None) -> None:
        super().__init__(seed)
        self.catalog = catalog or ConversionCatalog()

    def generate(
        self,
        points_range: tuple[int, int] = (0, 25_000),
        expiry_probability: float = 0.5,
        today: date | None = None,
    ) -> dict[str, Any]:
        """Generate one card payload.

        Parameters
        ----------
        points_range : tuple[int, int]
            Min and max opening balance.
        expiry_probability : float
            Chance that the card's points carry an expiry date.
        today : date | None
            Reference day for the card and points expiry dates.
        """
        today = today or date.today()
        bank = random.choice(self.catalog.banks())
        card_type = random.choice(bank.card_types)

        # Card valid for 1-5 more years
        expires = today + timedelta(days=random.randint(365, 5 * 365))

        points_expiry_date = None
        if random.random() < expiry_probability:
            points_expiry_date = (today + timedelta(days=random.randint(1, 180))).isoformat()

        return {
            "bank_id": bank.bank_id,
            "card_type": card_type,
            "last_four_digits": f"{random.randint(0, 9999):04d}",
            "expiry_date": expires.strftime("%m/%y"),
            "points": random.randint(*points_range),
            "points_expiry_date": points_expiry_date,
        }


class TransactionGenerator(BaseGenerator):
    """Generate card purchase payloads that earn points."""

    # Merchant and amount range
    MERCHANTS = {
        "Amazon Purchase": (300, 8000),
        "Swiggy Order": (150, 1200),
        "Zomato Order": (150, 1200),
        "Flipkart Purchase": (300, 10000),
        "Uber Ride": (80, 900),
        "BigBasket Groceries": (500, 4000),
        "BookMyShow Tickets": (200, 1500),
        "Indian Oil Fuel": (500, 3000),
        "MakeMyTrip Booking": (2000, 25000),
        "Myntra Purchase": (500, 5000),
    }

    def __init__(self, seed: int | None = None, points_per_100: int = 2) -> None:
        """Initialize transaction generator.

        Parameters
        ----------
        seed : int | None
            Random seed for reproducibility.
        points_per_100 : int
            Points earned per 100 currency units spent.
        """
        super().__init__(seed)
        self.points_per_100 = points_per_100

    def generate(self, card: Card, timestamp: datetime) -> dict[str, Any]:
        description = random.choice(list(self.MERCHANTS))
        amount = random.randint(*self.MERCHANTS[description])
        return {
            "card_id": card.card_id,
            "date": timestamp,
            "description": description,
            "amount": amount,
            "points_earned": amount * self.points_per_100 // 100,
        }

    def generate_for_card(
        self,
        card: Card,
        start_date: datetime,
        end_date: datetime,
        avg_transactions_per_day: float = 0.5,
    ) -> Iterator[dict[str, Any]]:
        """Generate purchases over a time period, oldest first."""
        current_date = start_date

        while current_date < end_date:
            num_transactions = max(0, int(random.expovariate(1 / avg_transactions_per_day)))

            for _ in range(num_transactions):
                timestamp = current_date.replace(hour=random.randint(8, 22), minute=random.randint(0, 59))
                yield self.generate(card, timestamp)

            current_date += timedelta(days=1)

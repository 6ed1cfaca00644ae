"""Demo wallet scenario: users, cards, purchases, redemptions and payments."""

import logging
import random
import re
from datetime import date, datetime, timedelta
from typing import Callable

from points_ledger.exceptions import LedgerError
from points_ledger.generators import CardGenerator, TransactionGenerator, UserGenerator
from points_ledger.models import Card, User
from points_ledger.service import LedgerService
from points_ledger.store import InMemoryLedgerStore

logger = logging.getLogger(__name__)


class DemoWalletScenario:
    """Populate a ledger with realistic wallets through ``LedgerService``.

    Every write goes through the service, so the generated data obeys the
    same validation, balance and ownership rules as real requests.
    """

    def __init__(
        self,
        num_users: int = 3,
        cards_per_user: tuple[int, int] = (2, 4),
        history_days: int = 60,
        avg_transactions_per_day: float = 0.5,
        redemption_probability: float = 0.7,
        payments_per_user: int = 2,
        seed: int | None = None,
        service: LedgerService | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        """Initialize demo wallet scenario.

        Parameters
        ----------
        num_users : int
            Number of users to register.
        cards_per_user : tuple[int, int]
            Min and max cards per user.
        history_days : int
            Days of purchase history per card.
        avg_transactions_per_day : float
            Average purchases per card per day.
        redemption_probability : float
            Chance that a user redeems points from their richest card.
        payments_per_user : int
            Mock UPI payments per user.
        seed : int | None
            Random seed for reproducibility.
        service : LedgerService | None
            Target service; an in-memory one is created when omitted.
        today : Callable[[], date]
            Reference day for generated dates.
        """
        self.num_users = num_users
        self.cards_per_user = cards_per_user
        self.history_days = history_days
        self.avg_transactions_per_day = avg_transactions_per_day
        self.redemption_probability = redemption_probability
        self.payments_per_user = payments_per_user
        self.seed = seed
        self._today = today

        if seed is not None:
            random.seed(seed)

        self.service = service or LedgerService(InMemoryLedgerStore(), today=today)
        self.users: list[User] = []
        self._user_gen = UserGenerator(seed=seed)
        self._card_gen = CardGenerator(self.service.catalog, seed=seed)
        self._transaction_gen = TransactionGenerator(seed=seed)

    def generate(self) -> LedgerService:
        """Generate all data for the scenario.

        Returns
        -------
        LedgerService
            Service holding the generated wallets.
        """
        logger.info("Starting demo wallet scenario: %d users", self.num_users)

        for _ in range(self.num_users):
            self._generate_wallet()

        logger.info("Generated demo wallets: %s", self.service.repository.summary())
        return self.service

    def _generate_wallet(self) -> None:
        user = self.service.register_user(self._user_gen.generate())
        self.users.append(user)

        today = self._today()
        end = datetime.combine(today, datetime.min.time())
        start = end - timedelta(days=self.history_days)

        for _ in range(random.randint(*self.cards_per_user)):
            card = self.service.create_card(user.user_id, self._card_gen.generate(today=today))
            for payload in self._transaction_gen.generate_for_card(
                card, start, end, self.avg_transactions_per_day
            ):
                self.service.create_transaction(user.user_id, payload)

        cards = self.service.get_cards(user.user_id)
        if cards and random.random() < self.redemption_probability:
            self._redeem(user, max(cards, key=lambda card: card.points))

        for _ in range(self.payments_per_user):
            self._pay(user, random.choice(cards) if cards else None)

    def _redeem(self, user: User, card: Card) -> None:
        options = self.service.catalog.affordable_options(card.points)
        if not options or card.points <= 0:
            return

        option = random.choice(options)
        low = max(option.min_points, 1)
        points = random.randint(low, max(low, card.points // 2))
        self.service.create_redemption(
            user.user_id,
            {"card_id": card.card_id, "option_id": option.option_id, "points_used": points},
        )

    def _pay(self, user: User, card: Card | None) -> None:
        handle = re.sub(r"[^a-zA-Z0-9._-]", "", user.username) or "user"
        payload = {
            "amount": random.randint(50, 2000),
            "upi_id": f"{handle}@okbank",
            "method": "upi",
            "card_id": card.card_id if card else None,
        }
        try:
            self.service.make_payment(user.user_id, payload)
        except LedgerError as e:
            logger.warning("Skipped demo payment for user %d: %s", user.user_id, e)

"""Ledger operations exposed to the REST layer."""

import logging
from datetime import date, datetime
from typing import Any, Callable, Mapping

from points_ledger.catalog import ConversionCatalog
from points_ledger.config import LedgerConfig
from points_ledger.dashboard import DashboardAggregator, DashboardSummary
from points_ledger.exceptions import (
    EntityNotFoundError,
    ForbiddenError,
    InsufficientPointsError,
    InvalidInputError,
)
from points_ledger.expiry import ExpiryTracker
from points_ledger.ledger import PointsLedger
from points_ledger.models import Card, Redemption, Transaction, User, ValuationMode
from points_ledger.payments import MockPaymentProcessor, parse_payment
from points_ledger.redemption import RedemptionRequest, RedemptionWorkflow
from points_ledger.store.base import UPDATABLE_CARD_FIELDS, LedgerRepository
from points_ledger.store.memory import InMemoryLedgerStore
from points_ledger.validation import (
    CARD_EXPIRY_PATTERN,
    EMAIL_PATTERN,
    LAST_FOUR_PATTERN,
    parse_date,
    parse_datetime,
    require_int,
    require_str,
)

logger = logging.getLogger(__name__)

_CARD_VALIDATORS: dict[str, Callable[[Mapping[str, Any]], Any]] = {
    "bank_id": lambda data: require_str(data, "bank_id"),
    "card_type": lambda data: require_str(data, "card_type"),
    "last_four_digits": lambda data: require_str(
        data, "last_four_digits", LAST_FOUR_PATTERN, "last_four_digits must be exactly 4 digits"
    ),
    "expiry_date": lambda data: require_str(
        data, "expiry_date", CARD_EXPIRY_PATTERN, "expiry_date has an invalid format (MM/YY)"
    ),
    "points_expiry_date": lambda data: parse_date(data.get("points_expiry_date"), "points_expiry_date"),
}


class LedgerService:
    """Card, transaction, redemption and dashboard operations for one repository.

    Every operation takes the requesting user's id. Cards belonging to
    someone else raise ``ForbiddenError``; missing ones raise
    ``EntityNotFoundError``. Payloads are plain mappings with snake_case
    keys and are validated before any write.

    Parameters
    ----------
    repository : LedgerRepository
        Storage backend.
    config : LedgerConfig | None
        Valuation, payment and redemption settings.
    catalog : ConversionCatalog | None
        Rates and options; built from ``config`` when omitted.
    today : Callable[[], date]
        Clock for expiry checks.
    clock : Callable[[], datetime]
        Timestamp source for writes without an explicit date.
    """

    def __init__(
        self,
        repository: LedgerRepository,
        config: LedgerConfig | None = None,
        catalog: ConversionCatalog | None = None,
        today: Callable[[], date] = date.today,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.config = config or LedgerConfig()
        self.repository = repository
        self.catalog = catalog or ConversionCatalog(default_rate=self.config.valuation.default_rate)
        self.ledger = PointsLedger(repository)
        self.expiry = ExpiryTracker(self.config.valuation.expiry_horizon_days, today)
        self.dashboard = DashboardAggregator(
            repository,
            self.catalog,
            self.expiry,
            valuation=ValuationMode(self.config.valuation.dashboard_valuation),
            recent_limit=self.config.valuation.recent_transactions_limit,
        )
        self.redemptions = RedemptionWorkflow(
            repository,
            self.catalog,
            ledger=self.ledger,
            record_transaction=self.config.record_redemption_transactions,
            clock=clock,
        )
        self.payments = MockPaymentProcessor(self, self.config.payments)
        self._clock = clock

    @classmethod
    def from_config(cls, config: LedgerConfig | None = None) -> "LedgerService":
        """Build a service on the backend named by ``config.backend``."""
        config = (config or LedgerConfig.from_env()).validate()
        if config.backend == "postgres":
            from points_ledger.store.postgres import PostgresLedgerStore

            store = PostgresLedgerStore.from_config(config.postgres)
            store.create_schema()
            repository: LedgerRepository = store
        else:
            repository = InMemoryLedgerStore()
        logger.info("Ledger service using %s backend", config.backend)
        return cls(repository, config=config)

    # Users
    def register_user(self, data: Mapping[str, Any]) -> User:
        preferences = data.get("preferences")
        if preferences is not None and not isinstance(preferences, dict):
            raise InvalidInputError("preferences must be an object", field="preferences")

        user = User(
            username=require_str(data, "username"),
            name=require_str(data, "name"),
            email=require_str(data, "email", EMAIL_PATTERN, "email has an invalid format"),
        )
        if preferences is not None:
            user.preferences = {**user.preferences, **preferences}

        stored = self.repository.add_user(user)
        logger.info("Registered user %d (%s)", stored.user_id, stored.username)
        return stored

    def get_user(self, user_id: int) -> User:
        user = self.repository.get_user(user_id)
        if user is None:
            raise EntityNotFoundError(f"User {user_id} not found")
        return user

    # Cards
    def get_cards(self, user_id: int) -> list[Card]:
        return self.repository.get_cards(user_id)

    def get_card(self, user_id: int, card_id: int) -> Card:
        """Fetch a card owned by ``user_id``."""
        card = self.repository.get_card(card_id)
        if card is None:
            raise EntityNotFoundError(f"Card {card_id} not found")
        if card.user_id != user_id:
            raise ForbiddenError(f"Card {card_id} does not belong to user {user_id}")
        return card

    def create_card(self, user_id: int, data: Mapping[str, Any]) -> Card:
        fields = {name: validate(data) for name, validate in _CARD_VALIDATORS.items()}
        card = Card(
            user_id=user_id,
            points=require_int(data, "points", default=0, minimum=0),
            **fields,
        )
        stored = self.repository.add_card(card)
        logger.info("User %d added card %d (%s %s)", user_id, stored.card_id, stored.bank_id, stored.card_type)
        return stored

    def update_card(self, user_id: int, card_id: int, changes: Mapping[str, Any]) -> Card:
        """Patch display fields of a card. Balances cannot be patched."""
        if "points" in changes:
            raise InvalidInputError(
                "points can only change through transactions and redemptions", field="points"
            )
        unknown = set(changes) - UPDATABLE_CARD_FIELDS
        if unknown:
            name = sorted(unknown)[0]
            raise InvalidInputError(f"{name} cannot be updated", field=name)

        self.get_card(user_id, card_id)
        validated = {name: _CARD_VALIDATORS[name](changes) for name in changes}
        updated = self.repository.update_card(card_id, validated)
        if updated is None:
            raise EntityNotFoundError(f"Card {card_id} not found")
        return updated

    def delete_card(self, user_id: int, card_id: int) -> bool:
        """Delete a card. Its transactions and redemptions stay in history."""
        self.get_card(user_id, card_id)
        deleted = self.repository.delete_card(card_id)
        if deleted:
            logger.info("User %d deleted card %d", user_id, card_id)
        return deleted

    # Transactions
    def get_transactions(self, user_id: int, limit: int | None = None) -> list[Transaction]:
        if limit is not None and limit < 0:
            raise InvalidInputError("limit cannot be negative", field="limit")
        return self.repository.get_transactions(user_id, limit)

    def get_card_transactions(self, user_id: int, card_id: int) -> list[Transaction]:
        self.get_card(user_id, card_id)
        return self.repository.get_card_transactions(card_id)

    def create_transaction(self, user_id: int, data: Mapping[str, Any]) -> Transaction:
        """Record a transaction and apply its points to the card in one unit."""
        card_id = require_int(data, "card_id")
        when = data.get("date")
        transaction = Transaction(
            card_id=card_id,
            user_id=user_id,
            date=parse_datetime(when, "date") if when else self._clock(),
            description=require_str(data, "description"),
            amount=require_int(data, "amount"),
            points_earned=require_int(data, "points_earned"),
        )

        card = self.get_card(user_id, card_id)
        if card.points + transaction.points_earned < 0:
            raise InsufficientPointsError(card_id, -transaction.points_earned, card.points)

        with self.repository.atomic():
            stored = self.repository.add_transaction(transaction)
            self.ledger.apply_delta(card_id, stored.points_earned)

        return stored

    # Redemptions
    def get_redemptions(self, user_id: int) -> list[Redemption]:
        return self.repository.get_redemptions(user_id)

    def create_redemption(self, user_id: int, data: Mapping[str, Any]) -> Redemption:
        """Redeem card points through a catalog option."""
        card_id = require_int(data, "card_id")
        when = data.get("date")
        request = RedemptionRequest(
            user_id=user_id,
            card_id=card_id,
            option_id=data.get("option_id") or None,
            points_used=require_int(data, "points_used"),
            date=parse_datetime(when, "date") if when else None,
        )
        self.get_card(user_id, card_id)
        return self.redemptions.redeem(request).redemption

    # Payments
    def make_payment(self, user_id: int, data: Mapping[str, Any]) -> Transaction:
        request = parse_payment(data, self.config.payments.max_amount)
        return self.payments.pay(user_id, request)

    # Dashboard
    def dashboard_summary(self, user_id: int) -> DashboardSummary:
        return self.dashboard.summarize(user_id)

"""Point-to-value redemption workflow."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Callable, Iterable

from points_ledger.catalog import ConversionCatalog
from points_ledger.exceptions import (
    BelowMinimumError,
    EntityNotFoundError,
    ForbiddenError,
    InsufficientPointsError,
    InvalidAmountError,
    LedgerError,
    NoOptionSelectedError,
    PartialFailureError,
)
from points_ledger.ledger import PointsLedger
from points_ledger.models import Card, Redemption, RedemptionOption, RedemptionStatus, Transaction
from points_ledger.store.base import LedgerRepository

logger = logging.getLogger(__name__)


class RedemptionState(str, Enum):
    START = "START"
    VALIDATING = "VALIDATING"
    REJECTED = "REJECTED"
    EXECUTING = "EXECUTING"
    RECORDED = "RECORDED"
    FAILED = "FAILED"


@dataclass
class RedemptionRequest:
    """A user's request to convert card points through a catalog option."""

    user_id: int
    card_id: int
    option_id: str | None
    points_used: int
    date: datetime | None = None


@dataclass
class RedemptionReceipt:
    """Everything written by a successful redemption."""

    redemption: Redemption
    card: Card
    transaction: Transaction | None = None
    states: list[RedemptionState] = field(default_factory=list)

    @property
    def state(self) -> RedemptionState:
        return self.states[-1]


@dataclass
class RedemptionRecommendation:
    """A catalog option suggested for a card."""

    option: RedemptionOption
    card: Card
    eligible: bool
    estimated_value: int


def redemption_value(points: int, rate: Decimal) -> int:
    """Currency value of ``points`` at ``rate``, rounded half up."""
    return int((Decimal(points) * rate).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class RedemptionWorkflow:
    """Validate and execute redemptions as one atomic unit.

    Attempts move ``START -> VALIDATING -> {REJECTED | EXECUTING} ->
    {RECORDED | FAILED}``. Validation failures raise the matching
    ``LedgerError`` before anything is written. Execution writes the
    redemption, deducts the points and, when ``record_transaction`` is set,
    adds a negative-points transaction so history lists redemptions inline
    with earnings. Those writes share one ``repository.atomic()`` block.

    Parameters
    ----------
    repository : LedgerRepository
        Storage for redemptions and transactions.
    catalog : ConversionCatalog
        Source of redemption options.
    ledger : PointsLedger | None
        Balance manager; built on ``repository`` when omitted.
    record_transaction : bool
        Write the paired history transaction.
    clock : Callable[[], datetime]
        Timestamp source for requests without a date.
    """

    def __init__(
        self,
        repository: LedgerRepository,
        catalog: ConversionCatalog,
        ledger: PointsLedger | None = None,
        record_transaction: bool = True,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.repository = repository
        self.catalog = catalog
        self.ledger = ledger or PointsLedger(repository)
        self.record_transaction = record_transaction
        self._clock = clock

    def validate(self, request: RedemptionRequest) -> tuple[Card, RedemptionOption]:
        """Run the pre-flight checks in order; the first failure is raised."""
        if not request.option_id:
            raise NoOptionSelectedError()

        option = self.catalog.option(request.option_id)
        if option is None:
            raise EntityNotFoundError(f"Redemption option {request.option_id} not found")

        if request.points_used <= 0:
            raise InvalidAmountError()

        card = self.repository.get_card(request.card_id)
        if card is None:
            raise EntityNotFoundError(f"Card {request.card_id} not found")
        if card.user_id != request.user_id:
            raise ForbiddenError(f"Card {request.card_id} does not belong to user {request.user_id}")

        if request.points_used > card.points:
            raise InsufficientPointsError(card.card_id, request.points_used, card.points)

        if option.min_points > 0 and request.points_used < option.min_points:
            raise BelowMinimumError(option.option_id, request.points_used, option.min_points)

        return card, option

    def redeem(self, request: RedemptionRequest) -> RedemptionReceipt:
        """Validate and record a redemption.

        Raises
        ------
        NoOptionSelectedError, EntityNotFoundError, ForbiddenError, InvalidAmountError,
        InsufficientPointsError, BelowMinimumError
            When validation rejects the request.
        PartialFailureError
            When a write fails; every write of the attempt is rolled back.
        """
        states = [RedemptionState.START, RedemptionState.VALIDATING]
        try:
            card, option = self.validate(request)
        except LedgerError as e:
            states.append(RedemptionState.REJECTED)
            logger.warning(
                "Redemption on card %s rejected: %s",
                request.card_id,
                e,
                extra={
                    "user_id": request.user_id,
                    "card_id": request.card_id,
                    "option_id": request.option_id,
                },
            )
            raise

        states.append(RedemptionState.EXECUTING)
        when = request.date or self._clock()
        try:
            with self.repository.atomic():
                redemption = self.repository.add_redemption(
                    Redemption(
                        user_id=request.user_id,
                        card_id=card.card_id,
                        option_id=option.option_id,
                        points_used=request.points_used,
                        value_obtained=redemption_value(request.points_used, option.conversion_rate),
                        date=when,
                        status=RedemptionStatus.COMPLETED,
                    )
                )
                card = self.ledger.apply_delta(card.card_id, -request.points_used)
                transaction = None
                if self.record_transaction:
                    transaction = self.repository.add_transaction(
                        Transaction(
                            card_id=card.card_id,
                            user_id=request.user_id,
                            date=when,
                            description=f"Redeemed {request.points_used:,} points for {option.name}",
                            amount=0,
                            points_earned=-request.points_used,
                        )
                    )
        except InsufficientPointsError:
            # Balance moved between validation and the conditional update.
            states.append(RedemptionState.FAILED)
            raise
        except Exception as e:
            states.append(RedemptionState.FAILED)
            logger.error("Redemption on card %d failed and was rolled back: %s", card.card_id, e)
            raise PartialFailureError(
                f"Redemption on card {card.card_id} failed and was rolled back: {e}"
            ) from e

        states.append(RedemptionState.RECORDED)
        logger.info(
            "Redeemed %d points on card %d for %s (value %d)",
            redemption.points_used,
            card.card_id,
            option.option_id,
            redemption.value_obtained,
            extra={
                "user_id": redemption.user_id,
                "card_id": card.card_id,
                "option_id": option.option_id,
                "delta": -redemption.points_used,
                "balance": card.points,
            },
        )
        return RedemptionReceipt(redemption=redemption, card=card, transaction=transaction, states=states)

    def recommend(
        self, cards: Iterable[Card], limit: int | None = None
    ) -> list[RedemptionRecommendation]:
        """Suggest options for the card holding the most points."""
        best = max(cards, key=lambda card: card.points, default=None)
        if best is None:
            return []

        options = self.catalog.options_by_category()
        if limit is not None:
            options = options[:limit]
        return [
            RedemptionRecommendation(
                option=option,
                card=best,
                eligible=best.points >= option.min_points,
                estimated_value=redemption_value(best.points, option.conversion_rate),
            )
            for option in options
        ]

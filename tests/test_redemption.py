"""Tests for the redemption workflow."""

from datetime import datetime
from decimal import Decimal
from unittest.mock import patch

import pytest

from points_ledger.catalog import ConversionCatalog
from points_ledger.exceptions import (
    BelowMinimumError,
    EntityNotFoundError,
    ForbiddenError,
    InsufficientPointsError,
    InvalidAmountError,
    NoOptionSelectedError,
    PartialFailureError,
)
from points_ledger.models import Card, RedemptionOption, RedemptionStatus, User
from points_ledger.redemption import (
    RedemptionRequest,
    RedemptionState,
    RedemptionWorkflow,
    redemption_value,
)
from points_ledger.store import InMemoryLedgerStore

NOW = datetime(2024, 6, 15, 12, 0)


@pytest.fixture
def workflow(store: InMemoryLedgerStore) -> RedemptionWorkflow:
    return RedemptionWorkflow(store, ConversionCatalog(), clock=lambda: NOW)


def _request(card: Card, option_id: str | None = "cb1", points: int = 1000) -> RedemptionRequest:
    return RedemptionRequest(user_id=card.user_id, card_id=card.card_id, option_id=option_id, points_used=points)


class TestRedemptionValue:
    """Rounding of redemption value."""

    @pytest.mark.parametrize(
        "points,rate,expected",
        [
            (1000, Decimal("0.25"), 250),
            (3, Decimal("0.25"), 1),
            (2, Decimal("0.25"), 1),
            (1, Decimal("0.25"), 0),
            (999, Decimal("0.33"), 330),
        ],
    )
    def test_rounds_half_up(self, points: int, rate: Decimal, expected: int) -> None:
        assert redemption_value(points, rate) == expected


class TestValidate:
    """Pre-flight checks, in order."""

    def test_no_option(self, workflow: RedemptionWorkflow, card: Card) -> None:
        with pytest.raises(NoOptionSelectedError):
            workflow.validate(_request(card, option_id=None, points=0))

    def test_unknown_option(self, workflow: RedemptionWorkflow, card: Card) -> None:
        with pytest.raises(EntityNotFoundError):
            workflow.validate(_request(card, option_id="zz9", points=0))

    @pytest.mark.parametrize("points", [0, -10])
    def test_non_positive_points(self, workflow: RedemptionWorkflow, card: Card, points: int) -> None:
        with pytest.raises(InvalidAmountError):
            workflow.validate(_request(card, points=points))

    def test_missing_card(self, workflow: RedemptionWorkflow, card: Card) -> None:
        request = _request(card)
        request.card_id = 999

        with pytest.raises(EntityNotFoundError):
            workflow.validate(request)

    def test_other_users_card(
        self, workflow: RedemptionWorkflow, store: InMemoryLedgerStore, card: Card, other_user: User
    ) -> None:
        request = _request(card, option_id="az1", points=100)
        request.user_id = other_user.user_id

        with pytest.raises(ForbiddenError):
            workflow.redeem(request)

        assert store.get_card(card.card_id).points == 1000
        assert store.get_redemptions(other_user.user_id) == []

    def test_insufficient_before_minimum(self, workflow: RedemptionWorkflow, card: Card) -> None:
        # 1500 is both over the balance and under fl1's 5000 minimum
        with pytest.raises(InsufficientPointsError):
            workflow.validate(_request(card, option_id="fl1", points=1500))

    def test_below_minimum(self, workflow: RedemptionWorkflow, card: Card) -> None:
        with pytest.raises(BelowMinimumError) as exc_info:
            workflow.validate(_request(card, option_id="cb1", points=500))

        assert exc_info.value.minimum == 1000

    def test_zero_minimum_option(self, workflow: RedemptionWorkflow, card: Card) -> None:
        checked_card, option = workflow.validate(_request(card, option_id="az1", points=1))

        assert checked_card == card
        assert option.option_id == "az1"


class TestRedeem:
    """Execution and rollback."""

    def test_full_balance_then_nothing_left(
        self, workflow: RedemptionWorkflow, store: InMemoryLedgerStore, card: Card
    ) -> None:
        receipt = workflow.redeem(_request(card, option_id="cb1", points=1000))

        assert receipt.redemption.value_obtained == 250
        assert receipt.redemption.status is RedemptionStatus.COMPLETED
        assert receipt.redemption.date == NOW
        assert receipt.card.points == 0
        assert store.get_card(card.card_id).points == 0
        assert receipt.state is RedemptionState.RECORDED
        assert receipt.states == [
            RedemptionState.START,
            RedemptionState.VALIDATING,
            RedemptionState.EXECUTING,
            RedemptionState.RECORDED,
        ]

        with pytest.raises(InsufficientPointsError):
            workflow.redeem(_request(card, option_id="az1", points=1))

    def test_paired_transaction(
        self, workflow: RedemptionWorkflow, store: InMemoryLedgerStore, card: Card
    ) -> None:
        receipt = workflow.redeem(_request(card, option_id="cb1", points=1000))

        assert receipt.transaction.points_earned == -1000
        assert receipt.transaction.amount == 0
        assert receipt.transaction.description == "Redeemed 1,000 points for Statement Credit"
        assert store.get_transactions(card.user_id) == [receipt.transaction]
        assert store.get_redemptions(card.user_id) == [receipt.redemption]

    def test_without_paired_transaction(self, store: InMemoryLedgerStore, card: Card) -> None:
        workflow = RedemptionWorkflow(store, ConversionCatalog(), record_transaction=False)

        receipt = workflow.redeem(_request(card, option_id="az1", points=100))

        assert receipt.transaction is None
        assert store.get_transactions(card.user_id) == []
        assert store.get_card(card.card_id).points == 900

    def test_explicit_date(self, workflow: RedemptionWorkflow, card: Card) -> None:
        request = _request(card)
        request.date = datetime(2024, 1, 2, 3, 4)

        assert workflow.redeem(request).redemption.date == datetime(2024, 1, 2, 3, 4)

    def test_rejected_writes_nothing(
        self, workflow: RedemptionWorkflow, store: InMemoryLedgerStore, card: Card
    ) -> None:
        with pytest.raises(BelowMinimumError):
            workflow.redeem(_request(card, option_id="cb1", points=10))

        assert store.summary()["redemptions"] == 0
        assert store.get_card(card.card_id).points == 1000

    def test_write_failure_rolls_back(
        self, workflow: RedemptionWorkflow, store: InMemoryLedgerStore, card: Card
    ) -> None:
        with patch.object(store, "add_transaction", side_effect=RuntimeError("disk full")):
            with pytest.raises(PartialFailureError) as exc_info:
                workflow.redeem(_request(card))

        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert store.get_card(card.card_id).points == 1000
        assert store.get_redemptions(card.user_id) == []

    def test_balance_race_reraised(
        self, workflow: RedemptionWorkflow, store: InMemoryLedgerStore, card: Card
    ) -> None:
        race = InsufficientPointsError(card.card_id, 1000, 0)
        with patch.object(workflow.ledger, "apply_delta", side_effect=race):
            with pytest.raises(InsufficientPointsError):
                workflow.redeem(_request(card))

        assert store.get_redemptions(card.user_id) == []


class TestRecommend:
    """Option suggestions."""

    def test_uses_richest_card(self, workflow: RedemptionWorkflow, card: Card, second_card: Card) -> None:
        recommendations = workflow.recommend([card, second_card], limit=3)

        assert [r.option.option_id for r in recommendations] == ["cb1", "fl1", "az1"]
        assert all(r.card == second_card for r in recommendations)
        assert [r.eligible for r in recommendations] == [True, False, True]
        assert recommendations[0].estimated_value == 500

    def test_no_cards(self, workflow: RedemptionWorkflow) -> None:
        assert workflow.recommend([]) == []


class TestCustomCatalog:
    """Workflow against a caller-supplied option list."""

    def test_minimum_500_option(self, store: InMemoryLedgerStore, card: Card) -> None:
        option = RedemptionOption(
            option_id="gv1",
            name="Gift Voucher",
            description="Generic voucher",
            conversion_rate=Decimal("0.25"),
            min_points=500,
            category="Shopping",
            icon="voucher.svg",
        )
        workflow = RedemptionWorkflow(store, ConversionCatalog(options=[option]))

        with pytest.raises(BelowMinimumError):
            workflow.redeem(_request(card, option_id="gv1", points=499))

        receipt = workflow.redeem(_request(card, option_id="gv1", points=1000))

        assert receipt.redemption.value_obtained == 250
        assert receipt.card.points == 0
        with pytest.raises(InsufficientPointsError):
            workflow.redeem(_request(card, option_id="gv1", points=1))

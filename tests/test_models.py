"""Tests for ledger and catalog models."""

from dataclasses import FrozenInstanceError
from datetime import datetime
from decimal import Decimal

import pytest

from points_ledger.models import (
    Bank,
    Card,
    OptionTag,
    PaymentMethod,
    Redemption,
    RedemptionOption,
    RedemptionStatus,
    TagType,
    Transaction,
    User,
    ValuationMode,
)


class TestUser:
    """Tests for User."""

    def test_default_preferences(self) -> None:
        user = User(username="asha", name="Asha Rao", email="asha@example.com")

        assert user.preferences == {"notifications": True, "theme": "light"}
        assert user.user_id is None

    def test_preferences_not_shared(self) -> None:
        first = User(username="a", name="A", email="a@example.com")
        second = User(username="b", name="B", email="b@example.com")
        first.preferences["theme"] = "dark"

        assert second.preferences["theme"] == "light"


class TestCard:
    """Tests for Card."""

    def test_defaults(self) -> None:
        card = Card(
            user_id=1, bank_id="hdfc", card_type="Regalia", last_four_digits="1234", expiry_date="12/26"
        )

        assert card.points == 0
        assert card.points_expiry_date is None
        assert card.card_id is None


class TestTransactionAndRedemption:
    """Tests for Transaction and Redemption."""

    def test_negative_points_allowed_on_transaction(self) -> None:
        transaction = Transaction(
            card_id=1,
            user_id=1,
            date=datetime(2024, 6, 1),
            description="UPI Payment to shop@upi",
            amount=100,
            points_earned=-400,
        )

        assert transaction.points_earned == -400

    def test_redemption_status_default(self) -> None:
        redemption = Redemption(
            user_id=1,
            card_id=1,
            option_id="cb1",
            points_used=1000,
            value_obtained=250,
            date=datetime(2024, 6, 1),
        )

        assert redemption.status is RedemptionStatus.COMPLETED


class TestCatalogModels:
    """Catalog models are immutable."""

    def test_option_is_frozen(self) -> None:
        option = RedemptionOption(
            option_id="x1",
            name="Test",
            description="Test option",
            conversion_rate=Decimal("0.25"),
            min_points=0,
            category="Cashback",
            icon="test.svg",
            tag=OptionTag("Best Value", TagType.BEST),
        )

        with pytest.raises(FrozenInstanceError):
            option.min_points = 10


class TestEnums:
    """String enums compare equal to their wire values."""

    def test_values(self) -> None:
        assert RedemptionStatus.COMPLETED == "completed"
        assert PaymentMethod("points") is PaymentMethod.POINTS
        assert ValuationMode("per_card") is ValuationMode.PER_CARD
        assert [t.value for t in TagType] == ["best", "expiring", "popular", "limited"]


class TestBank:
    """Tests for Bank."""

    def test_hashable(self) -> None:
        bank = Bank("demo", "Demo Bank", "", (("Basic", Decimal("0.5")), ("Gold", Decimal("0.3"))))

        assert {bank: "ok"}[bank] == "ok"
        assert hash(bank) == hash(Bank("demo", "Demo Bank", "", bank.conversion_rates))

    def test_card_types_and_rate(self) -> None:
        bank = Bank("demo", "Demo Bank", "", (("Basic", Decimal("0.5")), ("Gold", Decimal("0.3"))))

        assert bank.card_types == ("Basic", "Gold")
        assert bank.rate("Gold") == Decimal("0.3")
        assert bank.rate("Platinum") is None

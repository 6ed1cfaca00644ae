"""Tests for InMemoryLedgerStore."""

import threading
from datetime import date, datetime

import pytest

from points_ledger.exceptions import EntityNotFoundError, InsufficientPointsError, InvalidInputError
from points_ledger.models import Card, Redemption, Transaction, User
from points_ledger.store import InMemoryLedgerStore


def _transaction(card: Card, when: datetime, points: int = 10) -> Transaction:
    return Transaction(
        card_id=card.card_id,
        user_id=card.user_id,
        date=when,
        description="Amazon Purchase",
        amount=500,
        points_earned=points,
    )


class TestUsers:
    """User storage."""

    def test_ids_are_serial(self, store: InMemoryLedgerStore) -> None:
        first = store.add_user(User(username="a", name="A", email="a@example.com"))
        second = store.add_user(User(username="b", name="B", email="b@example.com"))

        assert (first.user_id, second.user_id) == (1, 2)
        assert store.get_user(2) == second

    def test_duplicate_username(self, store: InMemoryLedgerStore, user: User) -> None:
        with pytest.raises(InvalidInputError) as exc_info:
            store.add_user(User(username=user.username, name="Other", email="o@example.com"))

        assert exc_info.value.field == "username"

    def test_get_by_username(self, store: InMemoryLedgerStore, user: User) -> None:
        assert store.get_user_by_username("asha") == user
        assert store.get_user_by_username("nobody") is None


class TestCards:
    """Card storage."""

    def test_add_and_get(self, store: InMemoryLedgerStore, card: Card, second_card: Card) -> None:
        assert card.card_id == 1
        assert store.get_card(card.card_id) == card
        assert store.get_cards(card.user_id) == [card, second_card]

    def test_add_for_missing_user(self, store: InMemoryLedgerStore) -> None:
        with pytest.raises(EntityNotFoundError):
            store.add_card(Card(user_id=99, bank_id="hdfc", card_type="Regalia",
                                last_four_digits="1234", expiry_date="12/26"))

    def test_add_with_negative_points(self, store: InMemoryLedgerStore, user: User) -> None:
        with pytest.raises(InvalidInputError):
            store.add_card(Card(user_id=user.user_id, bank_id="hdfc", card_type="Regalia",
                                last_four_digits="1234", expiry_date="12/26", points=-1))

    def test_update(self, store: InMemoryLedgerStore, card: Card) -> None:
        updated = store.update_card(card.card_id, {"last_four_digits": "0000", "points_expiry_date": None})

        assert updated.last_four_digits == "0000"
        assert updated.points_expiry_date is None
        assert updated.points == card.points

    def test_update_rejects_points(self, store: InMemoryLedgerStore, card: Card) -> None:
        with pytest.raises(InvalidInputError):
            store.update_card(card.card_id, {"points": 999999})

    def test_update_missing(self, store: InMemoryLedgerStore) -> None:
        assert store.update_card(42, {"card_type": "Neo"}) is None

    def test_delete_keeps_history(self, store: InMemoryLedgerStore, card: Card) -> None:
        store.add_transaction(_transaction(card, datetime(2024, 6, 1)))

        assert store.delete_card(card.card_id) is True
        assert store.get_card(card.card_id) is None
        assert store.get_cards(card.user_id) == []
        assert len(store.get_transactions(card.user_id)) == 1
        assert store.delete_card(card.card_id) is False


class TestAdjustPoints:
    """Conditional balance updates."""

    def test_add_and_subtract(self, store: InMemoryLedgerStore, card: Card) -> None:
        assert store.adjust_points(card.card_id, 500).points == 1500
        assert store.adjust_points(card.card_id, -1500).points == 0

    def test_cannot_go_negative(self, store: InMemoryLedgerStore, card: Card) -> None:
        with pytest.raises(InsufficientPointsError) as exc_info:
            store.adjust_points(card.card_id, -1001)

        assert exc_info.value.available == 1000
        assert exc_info.value.requested == 1001
        assert store.get_card(card.card_id).points == 1000

    def test_missing_card(self, store: InMemoryLedgerStore) -> None:
        with pytest.raises(EntityNotFoundError):
            store.adjust_points(404, 10)

    def test_concurrent_spends_never_overdraw(self, store: InMemoryLedgerStore, card: Card) -> None:
        failures = []

        def spend() -> None:
            try:
                store.adjust_points(card.card_id, -300)
            except InsufficientPointsError as e:
                failures.append(e)

        threads = [threading.Thread(target=spend) for _ in range(10)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert store.get_card(card.card_id).points == 100
        assert len(failures) == 7


class TestTransactions:
    """Transaction storage."""

    def test_newest_first(self, store: InMemoryLedgerStore, card: Card) -> None:
        old = store.add_transaction(_transaction(card, datetime(2024, 5, 1)))
        new = store.add_transaction(_transaction(card, datetime(2024, 6, 1)))

        assert store.get_transactions(card.user_id) == [new, old]
        assert store.get_card_transactions(card.card_id) == [new, old]

    def test_same_timestamp_breaks_ties_by_id(self, store: InMemoryLedgerStore, card: Card) -> None:
        when = datetime(2024, 6, 1, 10, 0)
        first = store.add_transaction(_transaction(card, when))
        second = store.add_transaction(_transaction(card, when))

        assert store.get_transactions(card.user_id) == [second, first]

    def test_limit(self, store: InMemoryLedgerStore, card: Card) -> None:
        for day in range(1, 8):
            store.add_transaction(_transaction(card, datetime(2024, 6, day)))

        latest = store.get_transactions(card.user_id, limit=5)

        assert len(latest) == 5
        assert latest[0].date == datetime(2024, 6, 7)

    def test_unknown_user_is_empty(self, store: InMemoryLedgerStore) -> None:
        assert store.get_transactions(123) == []

    def test_requires_card(self, store: InMemoryLedgerStore, user: User) -> None:
        with pytest.raises(EntityNotFoundError):
            store.add_transaction(
                Transaction(card_id=9, user_id=user.user_id, date=datetime(2024, 6, 1),
                            description="x", amount=1, points_earned=1)
            )


class TestRedemptions:
    """Redemption storage."""

    def test_add_and_list(self, store: InMemoryLedgerStore, card: Card) -> None:
        stored = store.add_redemption(
            Redemption(user_id=card.user_id, card_id=card.card_id, option_id="cb1",
                       points_used=1000, value_obtained=250, date=datetime(2024, 6, 1))
        )

        assert stored.redemption_id == 1
        assert store.get_redemptions(card.user_id) == [stored]


class TestAtomic:
    """Unit-of-work rollback."""

    def test_commit(self, store: InMemoryLedgerStore, card: Card) -> None:
        with store.atomic():
            store.add_transaction(_transaction(card, datetime(2024, 6, 1), points=-200))
            store.adjust_points(card.card_id, -200)

        assert store.get_card(card.card_id).points == 800
        assert len(store.get_transactions(card.user_id)) == 1

    def test_rollback_on_error(self, store: InMemoryLedgerStore, card: Card) -> None:
        with pytest.raises(RuntimeError):
            with store.atomic():
                store.add_transaction(_transaction(card, datetime(2024, 6, 1), points=-200))
                store.adjust_points(card.card_id, -200)
                raise RuntimeError("crash")

        assert store.get_card(card.card_id).points == 1000
        assert store.get_transactions(card.user_id) == []
        assert store.get_card_transactions(card.card_id) == []

    def test_ids_reused_after_rollback(self, store: InMemoryLedgerStore, card: Card) -> None:
        with pytest.raises(InsufficientPointsError):
            with store.atomic():
                store.add_transaction(_transaction(card, datetime(2024, 6, 1)))
                store.adjust_points(card.card_id, -5000)

        stored = store.add_transaction(_transaction(card, datetime(2024, 6, 2)))
        assert stored.transaction_id == 1


class TestSummary:
    """Tests for summary()."""

    def test_counts(self, store: InMemoryLedgerStore, card: Card, second_card: Card) -> None:
        store.add_transaction(_transaction(card, datetime(2024, 6, 1)))

        assert store.summary() == {"users": 1, "cards": 2, "transactions": 1, "redemptions": 0}

    def test_card_expiry_date_is_date(self, card: Card) -> None:
        assert card.points_expiry_date == date(2024, 7, 1)

"""Tests for demo data generators."""

from datetime import date, datetime

from points_ledger.catalog import ConversionCatalog
from points_ledger.generators import CardGenerator, TransactionGenerator, UserGenerator
from points_ledger.models import Card
from points_ledger.validation import CARD_EXPIRY_PATTERN, EMAIL_PATTERN, LAST_FOUR_PATTERN

TODAY = date(2024, 6, 15)


class TestUserGenerator:
    """Tests for UserGenerator."""

    def test_generate(self, seed: int) -> None:
        payload = UserGenerator(seed=seed).generate()

        assert payload["username"] == payload["username"].lower()
        assert EMAIL_PATTERN.match(payload["email"])
        assert isinstance(payload["preferences"]["notifications"], bool)

    def test_reproducible(self, seed: int) -> None:
        assert UserGenerator(seed=seed).generate() == UserGenerator(seed=seed).generate()


class TestCardGenerator:
    """Tests for CardGenerator."""

    def test_generate(self, seed: int) -> None:
        catalog = ConversionCatalog()
        gen = CardGenerator(catalog, seed=seed)

        for _ in range(20):
            payload = gen.generate(today=TODAY)
            bank = catalog.bank(payload["bank_id"])

            assert payload["card_type"] in bank.card_types
            assert LAST_FOUR_PATTERN.match(payload["last_four_digits"])
            assert CARD_EXPIRY_PATTERN.match(payload["expiry_date"])
            assert 0 <= payload["points"] <= 25_000

    def test_expiry_probability(self, seed: int) -> None:
        gen = CardGenerator(seed=seed)

        never = [gen.generate(expiry_probability=0.0, today=TODAY) for _ in range(5)]
        always = [gen.generate(expiry_probability=1.0, today=TODAY) for _ in range(5)]

        assert all(p["points_expiry_date"] is None for p in never)
        assert all(date.fromisoformat(p["points_expiry_date"]) > TODAY for p in always)


class TestTransactionGenerator:
    """Tests for TransactionGenerator."""

    def _card(self) -> Card:
        return Card(user_id=1, bank_id="hdfc", card_type="Regalia", last_four_digits="1234",
                    expiry_date="12/27", card_id=7)

    def test_generate(self, seed: int) -> None:
        payload = TransactionGenerator(seed=seed).generate(self._card(), datetime(2024, 6, 1, 10, 0))
        low, high = TransactionGenerator.MERCHANTS[payload["description"]]

        assert payload["card_id"] == 7
        assert low <= payload["amount"] <= high
        assert payload["points_earned"] == payload["amount"] * 2 // 100

    def test_generate_for_card(self, seed: int) -> None:
        start = datetime(2024, 5, 1)
        end = datetime(2024, 6, 1)

        payloads = list(
            TransactionGenerator(seed=seed).generate_for_card(self._card(), start, end, avg_transactions_per_day=2)
        )

        assert payloads
        assert all(start <= p["date"] < end for p in payloads)

"""Pytest configuration and fixtures."""

from datetime import date, datetime

import pytest

from points_ledger.config import LedgerConfig
from points_ledger.models import Card, User
from points_ledger.service import LedgerService
from points_ledger.store import InMemoryLedgerStore

TODAY = date(2024, 6, 15)
NOW = datetime(2024, 6, 15, 12, 0)


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def store() -> InMemoryLedgerStore:
    """Create a fresh store for each test."""
    return InMemoryLedgerStore()


@pytest.fixture
def config() -> LedgerConfig:
    """Default configuration."""
    return LedgerConfig()


@pytest.fixture
def service(store: InMemoryLedgerStore, config: LedgerConfig) -> LedgerService:
    """Service on the in-memory store with a fixed clock."""
    return LedgerService(store, config=config, today=lambda: TODAY, clock=lambda: NOW)


@pytest.fixture
def user(store: InMemoryLedgerStore) -> User:
    """Registered sample user."""
    return store.add_user(User(username="asha", name="Asha Rao", email="asha@example.com"))


@pytest.fixture
def other_user(store: InMemoryLedgerStore) -> User:
    """A second user who does not own the sample cards."""
    return store.add_user(User(username="vikram", name="Vikram Shah", email="vikram@example.com"))


@pytest.fixture
def card(store: InMemoryLedgerStore, user: User) -> Card:
    """HDFC Regalia card with 1000 points expiring soon."""
    return store.add_card(
        Card(
            user_id=user.user_id,
            bank_id="hdfc",
            card_type="Regalia",
            last_four_digits="4321",
            expiry_date="08/27",
            points=1000,
            points_expiry_date=date(2024, 7, 1),
        )
    )


@pytest.fixture
def second_card(store: InMemoryLedgerStore, user: User) -> Card:
    """ICICI Amazon Pay card with 2000 non-expiring points."""
    return store.add_card(
        Card(
            user_id=user.user_id,
            bank_id="icici",
            card_type="Amazon Pay",
            last_four_digits="9876",
            expiry_date="01/28",
            points=2000,
        )
    )

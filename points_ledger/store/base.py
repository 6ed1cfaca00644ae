"""Repository interface shared by every ledger storage backend."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Any

from points_ledger.models import Card, Redemption, Transaction, User

# Columns a caller may change through ``update_card``. Balance changes go
# through ``adjust_points`` only.
UPDATABLE_CARD_FIELDS = frozenset(
    {"bank_id", "card_type", "last_four_digits", "expiry_date", "points_expiry_date"}
)


class LedgerRepository(ABC):
    """CRUD access to users, cards, transactions and redemptions.

    Implementations assign serial integer ids on insert and return read
    lists sorted newest first. ``adjust_points`` must be linearizable per
    card and ``atomic`` must make every write inside the block visible
    together or not at all.
    """

    # Users
    @abstractmethod
    def add_user(self, user: User) -> User: ...

    @abstractmethod
    def get_user(self, user_id: int) -> User | None: ...

    @abstractmethod
    def get_user_by_username(self, username: str) -> User | None: ...

    # Cards
    @abstractmethod
    def get_cards(self, user_id: int) -> list[Card]: ...

    @abstractmethod
    def get_card(self, card_id: int) -> Card | None: ...

    @abstractmethod
    def add_card(self, card: Card) -> Card: ...

    @abstractmethod
    def update_card(self, card_id: int, changes: dict[str, Any]) -> Card | None: ...

    @abstractmethod
    def delete_card(self, card_id: int) -> bool: ...

    @abstractmethod
    def adjust_points(self, card_id: int, delta: int) -> Card:
        """Add ``delta`` to a card balance.

        Raises
        ------
        EntityNotFoundError
            If the card does not exist.
        InsufficientPointsError
            If the balance would drop below zero; nothing is written.
        """

    # Transactions
    @abstractmethod
    def get_transactions(self, user_id: int, limit: int | None = None) -> list[Transaction]: ...

    @abstractmethod
    def get_card_transactions(self, card_id: int) -> list[Transaction]: ...

    @abstractmethod
    def add_transaction(self, transaction: Transaction) -> Transaction: ...

    # Redemptions
    @abstractmethod
    def get_redemptions(self, user_id: int) -> list[Redemption]: ...

    @abstractmethod
    def add_redemption(self, redemption: Redemption) -> Redemption: ...

    @abstractmethod
    def atomic(self) -> AbstractContextManager["LedgerRepository"]:
        """Group writes into one all-or-nothing unit."""

    @abstractmethod
    def summary(self) -> dict[str, int]:
        """Return summary counts of all entities."""

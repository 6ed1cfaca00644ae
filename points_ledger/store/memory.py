"""In-memory ledger store with referential integrity."""

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from typing import Any, Iterator

from points_ledger.exceptions import EntityNotFoundError, InsufficientPointsError, InvalidInputError
from points_ledger.models import Card, Redemption, Transaction, User
from points_ledger.store.base import UPDATABLE_CARD_FIELDS, LedgerRepository

logger = logging.getLogger(__name__)


@dataclass
class InMemoryLedgerStore(LedgerRepository):
    """Dict-backed store for ledger entities with relationship tracking.

    Every operation runs under one re-entrant lock, so balance changes are
    serialized and ``atomic`` blocks see no interleaved writers. Entities are
    replaced rather than mutated in place, which lets ``atomic`` roll back
    by restoring shallow copies of the tables.
    """

    # Primary entities
    users: dict[int, User] = field(default_factory=dict)
    cards: dict[int, Card] = field(default_factory=dict)
    transactions: dict[int, Transaction] = field(default_factory=dict)
    redemptions: dict[int, Redemption] = field(default_factory=dict)

    # Relationship indexes
    _user_cards: dict[int, list[int]] = field(default_factory=dict)
    _user_transactions: dict[int, list[int]] = field(default_factory=dict)
    _card_transactions: dict[int, list[int]] = field(default_factory=dict)
    _user_redemptions: dict[int, list[int]] = field(default_factory=dict)

    # Serial id counters
    _next_ids: dict[str, int] = field(
        default_factory=lambda: {"users": 1, "cards": 1, "transactions": 1, "redemptions": 1}
    )

    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    def _next_id(self, table: str) -> int:
        next_id = self._next_ids[table]
        self._next_ids[table] = next_id + 1
        return next_id

    # Users
    def add_user(self, user: User) -> User:
        """Add a user to the store."""
        with self._lock:
            if self.get_user_by_username(user.username) is not None:
                raise InvalidInputError(f"Username {user.username} already exists", field="username")
            stored = replace(user, user_id=self._next_id("users"))
            self.users[stored.user_id] = stored
            self._user_cards[stored.user_id] = []
            self._user_transactions[stored.user_id] = []
            self._user_redemptions[stored.user_id] = []
            return stored

    def get_user(self, user_id: int) -> User | None:
        return self.users.get(user_id)

    def get_user_by_username(self, username: str) -> User | None:
        with self._lock:
            return next((u for u in self.users.values() if u.username == username), None)

    # Cards
    def get_cards(self, user_id: int) -> list[Card]:
        """Get all cards for a user."""
        with self._lock:
            return [self.cards[cid] for cid in self._user_cards.get(user_id, [])]

    def get_card(self, card_id: int) -> Card | None:
        return self.cards.get(card_id)

    def add_card(self, card: Card) -> Card:
        """Add a card to the store."""
        with self._lock:
            if card.user_id not in self.users:
                raise EntityNotFoundError(f"User {card.user_id} not found")
            if card.points < 0:
                raise InvalidInputError("Points cannot be negative", field="points")

            stored = replace(card, card_id=self._next_id("cards"))
            self.cards[stored.card_id] = stored
            self._user_cards[stored.user_id].append(stored.card_id)
            self._card_transactions[stored.card_id] = []
            return stored

    def update_card(self, card_id: int, changes: dict[str, Any]) -> Card | None:
        unknown = set(changes) - UPDATABLE_CARD_FIELDS
        if unknown:
            raise InvalidInputError(f"Cannot update card fields: {', '.join(sorted(unknown))}")

        with self._lock:
            card = self.cards.get(card_id)
            if card is None:
                return None
            updated = replace(card, **changes)
            self.cards[card_id] = updated
            return updated

    def delete_card(self, card_id: int) -> bool:
        """Remove a card; its transactions and redemptions are kept."""
        with self._lock:
            card = self.cards.pop(card_id, None)
            if card is None:
                return False
            self._user_cards[card.user_id].remove(card_id)
            return True

    def adjust_points(self, card_id: int, delta: int) -> Card:
        with self._lock:
            card = self.cards.get(card_id)
            if card is None:
                raise EntityNotFoundError(f"Card {card_id} not found")

            new_balance = card.points + delta
            if new_balance < 0:
                raise InsufficientPointsError(card_id, -delta, card.points)

            updated = replace(card, points=new_balance)
            self.cards[card_id] = updated
            return updated

    # Transactions
    def get_transactions(self, user_id: int, limit: int | None = None) -> list[Transaction]:
        """Get a user's transactions, newest first."""
        with self._lock:
            items = [self.transactions[tid] for tid in self._user_transactions.get(user_id, [])]
        items.sort(key=lambda t: (t.date, t.transaction_id), reverse=True)
        return items[:limit] if limit else items

    def get_card_transactions(self, card_id: int) -> list[Transaction]:
        """Get a card's transactions, newest first."""
        with self._lock:
            items = [self.transactions[tid] for tid in self._card_transactions.get(card_id, [])]
        items.sort(key=lambda t: (t.date, t.transaction_id), reverse=True)
        return items

    def add_transaction(self, transaction: Transaction) -> Transaction:
        """Add a transaction to the store."""
        with self._lock:
            if transaction.card_id not in self.cards:
                raise EntityNotFoundError(f"Card {transaction.card_id} not found")

            stored = replace(transaction, transaction_id=self._next_id("transactions"))
            self.transactions[stored.transaction_id] = stored
            self._user_transactions.setdefault(stored.user_id, []).append(stored.transaction_id)
            self._card_transactions[stored.card_id].append(stored.transaction_id)
            return stored

    # Redemptions
    def get_redemptions(self, user_id: int) -> list[Redemption]:
        """Get a user's redemptions, newest first."""
        with self._lock:
            items = [self.redemptions[rid] for rid in self._user_redemptions.get(user_id, [])]
        items.sort(key=lambda r: (r.date, r.redemption_id), reverse=True)
        return items

    def add_redemption(self, redemption: Redemption) -> Redemption:
        """Add a redemption to the store."""
        with self._lock:
            if redemption.card_id not in self.cards:
                raise EntityNotFoundError(f"Card {redemption.card_id} not found")

            stored = replace(redemption, redemption_id=self._next_id("redemptions"))
            self.redemptions[stored.redemption_id] = stored
            self._user_redemptions.setdefault(stored.user_id, []).append(stored.redemption_id)
            return stored

    @contextmanager
    def atomic(self) -> Iterator["InMemoryLedgerStore"]:
        with self._lock:
            snapshot = self._snapshot()
            try:
                yield self
            except BaseException:
                self._restore(snapshot)
                logger.error("Rolled back in-memory ledger unit of work")
                raise

    def _snapshot(self) -> dict[str, Any]:
        indexes = ("_user_cards", "_user_transactions", "_card_transactions", "_user_redemptions")
        state: dict[str, Any] = {
            name: dict(getattr(self, name))
            for name in ("users", "cards", "transactions", "redemptions", "_next_ids")
        }
        for name in indexes:
            state[name] = {key: list(ids) for key, ids in getattr(self, name).items()}
        return state

    def _restore(self, snapshot: dict[str, Any]) -> None:
        for name, value in snapshot.items():
            setattr(self, name, value)

    def summary(self) -> dict[str, int]:
        """Return summary counts of all entities."""
        return {
            "users": len(self.users),
            "cards": len(self.cards),
            "transactions": len(self.transactions),
            "redemptions": len(self.redemptions),
        }

"""PostgreSQL ledger store backed by psycopg."""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from typing import Any, Iterator

import psycopg
from psycopg import errors as pg_errors
from psycopg import sql
from psycopg.rows import dict_row

from points_ledger.config import PostgresConfig
from points_ledger.exceptions import (
    EntityNotFoundError,
    InsufficientPointsError,
    InvalidInputError,
    RepositoryError,
)
from points_ledger.models import Card, Redemption, RedemptionStatus, Transaction, User
from points_ledger.store.base import UPDATABLE_CARD_FIELDS, LedgerRepository

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id SERIAL PRIMARY KEY,
    username TEXT NOT NULL UNIQUE,
    name TEXT NOT NULL,
    email TEXT NOT NULL,
    preferences JSONB NOT NULL DEFAULT '{"notifications": true, "theme": "light"}'
);
CREATE TABLE IF NOT EXISTS cards (
    id SERIAL PRIMARY KEY,
    user_id INTEGER NOT NULL,
    bank_id TEXT NOT NULL,
    card_type TEXT NOT NULL,
    last_four_digits TEXT NOT NULL,
    expiry_date TEXT NOT NULL,
    points INTEGER NOT NULL DEFAULT 0 CHECK (points >= 0),
    points_expiry_date DATE
);
CREATE TABLE IF NOT EXISTS transactions (
    id SERIAL PRIMARY KEY,
    card_id INTEGER NOT NULL,
    user_id INTEGER NOT NULL,
    date TIMESTAMP NOT NULL,
    description TEXT NOT NULL,
    amount INTEGER NOT NULL,
    points_earned INTEGER NOT NULL
);
CREATE TABLE IF NOT EXISTS redemptions (
    id SERIAL PRIMARY KEY,
    user_id INTEGER NOT NULL,
    card_id INTEGER NOT NULL,
    option_id TEXT NOT NULL,
    points_used INTEGER NOT NULL CHECK (points_used > 0),
    value_obtained INTEGER NOT NULL,
    status TEXT NOT NULL DEFAULT 'completed',
    date TIMESTAMP NOT NULL
);
"""


def _user_from_row(row: dict[str, Any]) -> User:
    preferences = row["preferences"]
    if isinstance(preferences, str):
        preferences = json.loads(preferences)
    return User(
        username=row["username"],
        name=row["name"],
        email=row["email"],
        preferences=preferences,
        user_id=row["id"],
    )


def _card_from_row(row: dict[str, Any]) -> Card:
    return Card(
        user_id=row["user_id"],
        bank_id=row["bank_id"],
        card_type=row["card_type"],
        last_four_digits=row["last_four_digits"],
        expiry_date=row["expiry_date"],
        points=row["points"],
        points_expiry_date=row["points_expiry_date"],
        card_id=row["id"],
    )


def _transaction_from_row(row: dict[str, Any]) -> Transaction:
    return Transaction(
        card_id=row["card_id"],
        user_id=row["user_id"],
        date=row["date"],
        description=row["description"],
        amount=row["amount"],
        points_earned=row["points_earned"],
        transaction_id=row["id"],
    )


def _redemption_from_row(row: dict[str, Any]) -> Redemption:
    return Redemption(
        user_id=row["user_id"],
        card_id=row["card_id"],
        option_id=row["option_id"],
        points_used=row["points_used"],
        value_obtained=row["value_obtained"],
        date=row["date"],
        status=RedemptionStatus(row["status"]),
        redemption_id=row["id"],
    )


class PostgresLedgerStore(LedgerRepository):
    """Ledger repository on PostgreSQL.

    The connection runs in autocommit mode; ``atomic`` opens an explicit
    transaction (a savepoint when nested). Balance changes are a single
    conditional ``UPDATE`` so concurrent writers cannot lose updates or push
    a card below zero.

    Parameters
    ----------
    conninfo : str | None
        libpq connection string, used when ``connection`` is not given.
    connection : psycopg.Connection | None
        Existing connection. Must use a ``dict_row`` row factory.
    """

    def __init__(self, conninfo: str | None = None, connection: Any = None) -> None:
        if connection is None:
            if conninfo is None:
                raise RepositoryError("Either conninfo or connection is required")
            try:
                connection = psycopg.connect(conninfo, autocommit=True, row_factory=dict_row)
            except psycopg.Error as e:
                raise RepositoryError(f"Could not connect to PostgreSQL: {e}") from e
        self._conn = connection

    @classmethod
    def from_config(cls, config: PostgresConfig) -> "PostgresLedgerStore":
        return cls(conninfo=config.connection_string)

    def create_schema(self) -> None:
        """Create the ledger tables if they do not exist."""
        self._execute(SCHEMA)
        logger.info("Ledger schema ready")

    def close(self) -> None:
        self._conn.close()

    # Query helpers
    def _execute(self, query: Any, params: Any = None) -> list[dict[str, Any]]:
        try:
            with self._conn.cursor() as cur:
                cur.execute(query, params)
                if cur.description is None:
                    return []
                return cur.fetchall()
        except pg_errors.UniqueViolation as e:
            raise InvalidInputError(f"Duplicate value: {e}") from e
        except psycopg.Error as e:
            raise RepositoryError(f"Query failed: {e}") from e

    def _fetch_one(self, query: Any, params: Any = None) -> dict[str, Any] | None:
        rows = self._execute(query, params)
        return rows[0] if rows else None

    # Users
    def add_user(self, user: User) -> User:
        row = self._fetch_one(
            "INSERT INTO users (username, name, email, preferences) "
            "VALUES (%s, %s, %s, %s) RETURNING *",
            (user.username, user.name, user.email, json.dumps(user.preferences)),
        )
        return _user_from_row(row)

    def get_user(self, user_id: int) -> User | None:
        row = self._fetch_one("SELECT * FROM users WHERE id = %s", (user_id,))
        return _user_from_row(row) if row else None

    def get_user_by_username(self, username: str) -> User | None:
        row = self._fetch_one("SELECT * FROM users WHERE username = %s", (username,))
        return _user_from_row(row) if row else None

    # Cards
    def get_cards(self, user_id: int) -> list[Card]:
        rows = self._execute("SELECT * FROM cards WHERE user_id = %s ORDER BY id", (user_id,))
        return [_card_from_row(row) for row in rows]

    def get_card(self, card_id: int) -> Card | None:
        row = self._fetch_one("SELECT * FROM cards WHERE id = %s", (card_id,))
        return _card_from_row(row) if row else None

    def add_card(self, card: Card) -> Card:
        if card.points < 0:
            raise InvalidInputError("Points cannot be negative", field="points")
        if self.get_user(card.user_id) is None:
            raise EntityNotFoundError(f"User {card.user_id} not found")
        row = self._fetch_one(
            "INSERT INTO cards (user_id, bank_id, card_type, last_four_digits, "
            "expiry_date, points, points_expiry_date) "
            "VALUES (%s, %s, %s, %s, %s, %s, %s) RETURNING *",
            (
                card.user_id,
                card.bank_id,
                card.card_type,
                card.last_four_digits,
                card.expiry_date,
                card.points,
                card.points_expiry_date,
            ),
        )
        return _card_from_row(row)

    def update_card(self, card_id: int, changes: dict[str, Any]) -> Card | None:
        unknown = set(changes) - UPDATABLE_CARD_FIELDS
        if unknown:
            raise InvalidInputError(f"Cannot update card fields: {', '.join(sorted(unknown))}")
        if not changes:
            return self.get_card(card_id)

        columns = list(changes)
        query = sql.SQL("UPDATE cards SET {} WHERE id = %s RETURNING *").format(
            sql.SQL(", ").join(
                sql.SQL("{} = %s").format(sql.Identifier(column)) for column in columns
            )
        )
        row = self._fetch_one(query, [changes[c] for c in columns] + [card_id])
        return _card_from_row(row) if row else None

    def delete_card(self, card_id: int) -> bool:
        row = self._fetch_one("DELETE FROM cards WHERE id = %s RETURNING id", (card_id,))
        return row is not None

    def adjust_points(self, card_id: int, delta: int) -> Card:
        row = self._fetch_one(
            "UPDATE cards SET points = points + %(delta)s "
            "WHERE id = %(id)s AND points + %(delta)s >= 0 RETURNING *",
            {"delta": delta, "id": card_id},
        )
        if row is not None:
            return _card_from_row(row)

        card = self.get_card(card_id)
        if card is None:
            raise EntityNotFoundError(f"Card {card_id} not found")
        raise InsufficientPointsError(card_id, -delta, card.points)

    # Transactions
    def get_transactions(self, user_id: int, limit: int | None = None) -> list[Transaction]:
        rows = self._execute(
            "SELECT * FROM transactions WHERE user_id = %s ORDER BY date DESC, id DESC LIMIT %s",
            (user_id, limit or None),
        )
        return [_transaction_from_row(row) for row in rows]

    def get_card_transactions(self, card_id: int) -> list[Transaction]:
        rows = self._execute(
            "SELECT * FROM transactions WHERE card_id = %s ORDER BY date DESC, id DESC",
            (card_id,),
        )
        return [_transaction_from_row(row) for row in rows]

    def add_transaction(self, transaction: Transaction) -> Transaction:
        if self.get_card(transaction.card_id) is None:
            raise EntityNotFoundError(f"Card {transaction.card_id} not found")
        row = self._fetch_one(
            "INSERT INTO transactions (card_id, user_id, date, description, amount, points_earned) "
            "VALUES (%s, %s, %s, %s, %s, %s) RETURNING *",
            (
                transaction.card_id,
                transaction.user_id,
                transaction.date,
                transaction.description,
                transaction.amount,
                transaction.points_earned,
            ),
        )
        return _transaction_from_row(row)

    # Redemptions
    def get_redemptions(self, user_id: int) -> list[Redemption]:
        rows = self._execute(
            "SELECT * FROM redemptions WHERE user_id = %s ORDER BY date DESC, id DESC",
            (user_id,),
        )
        return [_redemption_from_row(row) for row in rows]

    def add_redemption(self, redemption: Redemption) -> Redemption:
        if self.get_card(redemption.card_id) is None:
            raise EntityNotFoundError(f"Card {redemption.card_id} not found")
        row = self._fetch_one(
            "INSERT INTO redemptions (user_id, card_id, option_id, points_used, "
            "value_obtained, status, date) VALUES (%s, %s, %s, %s, %s, %s, %s) RETURNING *",
            (
                redemption.user_id,
                redemption.card_id,
                redemption.option_id,
                redemption.points_used,
                redemption.value_obtained,
                redemption.status.value,
                redemption.date,
            ),
        )
        return _redemption_from_row(row)

    @contextmanager
    def atomic(self) -> Iterator["PostgresLedgerStore"]:
        with self._conn.transaction():
            yield self

    def summary(self) -> dict[str, int]:
        counts = {}
        for table in ("users", "cards", "transactions", "redemptions"):
            row = self._fetch_one(
                sql.SQL("SELECT COUNT(*) AS n FROM {}").format(sql.Identifier(table))
            )
            counts[table] = row["n"] if row else 0
        return counts

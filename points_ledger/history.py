"""Filtering and totals over transaction history."""

from dataclasses import dataclass
from datetime import date
from typing import Iterable

from points_ledger.models import Transaction


@dataclass
class TransactionTotals:
    """Aggregates shown above a transaction list."""

    count: int = 0
    points_earned: int = 0
    amount_spent: int = 0


def filter_transactions(
    transactions: Iterable[Transaction],
    search: str | None = None,
    card_id: int | None = None,
    on_date: date | None = None,
) -> list[Transaction]:
    """Keep transactions matching every given criterion.

    Parameters
    ----------
    transactions : Iterable[Transaction]
        Transactions to filter; order is preserved.
    search : str | None
        Case-insensitive substring of the description.
    card_id : int | None
        Only this card's transactions.
    on_date : date | None
        Only transactions on this calendar day.

    Returns
    -------
    list[Transaction]
        Matching transactions.
    """
    needle = search.strip().lower() if search else ""
    result = []
    for transaction in transactions:
        if needle and needle not in transaction.description.lower():
            continue
        if card_id is not None and transaction.card_id != card_id:
            continue
        if on_date is not None and transaction.date.date() != on_date:
            continue
        result.append(transaction)
    return result


def summarize_transactions(transactions: Iterable[Transaction]) -> TransactionTotals:
    totals = TransactionTotals()
    for transaction in transactions:
        totals.count += 1
        totals.points_earned += transaction.points_earned
        totals.amount_spent += transaction.amount
    return totals

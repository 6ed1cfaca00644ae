"""Ledger storage backends."""

from points_ledger.store.base import LedgerRepository
from points_ledger.store.memory import InMemoryLedgerStore

__all__ = ["InMemoryLedgerStore", "LedgerRepository"]

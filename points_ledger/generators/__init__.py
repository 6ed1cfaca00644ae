"""Demo data generators."""

from points_ledger.generators.base import BaseGenerator
from points_ledger.generators.cards import CardGenerator, TransactionGenerator
from points_ledger.generators.users import UserGenerator

__all__ = ["BaseGenerator", "CardGenerator", "TransactionGenerator", "UserGenerator"]

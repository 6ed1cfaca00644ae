"""Credit-card rewards points ledger."""

from points_ledger.catalog import ConversionCatalog
from points_ledger.config import LedgerConfig
from points_ledger.exceptions import LedgerError
from points_ledger.ledger import PointsLedger
from points_ledger.redemption import RedemptionWorkflow
from points_ledger.service import LedgerService
from points_ledger.store import InMemoryLedgerStore, LedgerRepository

__version__ = "0.1.0"

__all__ = [
    "ConversionCatalog",
    "InMemoryLedgerStore",
    "LedgerConfig",
    "LedgerError",
    "LedgerRepository",
    "LedgerService",
    "PointsLedger",
    "RedemptionWorkflow",
]

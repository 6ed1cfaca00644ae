"""CSV export of transaction history."""

import csv
import logging
from pathlib import Path
from typing import Iterable

from points_ledger.catalog import ConversionCatalog
from points_ledger.models import Card, Transaction

logger = logging.getLogger(__name__)

HEADER = ("Date", "Description", "Amount", "Points", "Card")


class TransactionCsvSink:
    """Write transactions as ``Date,Description,Amount,Points,Card`` rows.

    Parameters
    ----------
    output_dir : str | Path
        Directory for the CSV files.
    catalog : ConversionCatalog | None
        Resolves card display names.
    """

    def __init__(self, output_dir: str | Path, catalog: ConversionCatalog | None = None) -> None:
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.catalog = catalog or ConversionCatalog()

    def rows(self, transactions: Iterable[Transaction], cards: Iterable[Card]) -> list[tuple]:
        cards_by_id = {card.card_id: card for card in cards}
        rows = []
        for transaction in transactions:
            card = cards_by_id.get(transaction.card_id)
            card_name = self.catalog.card_display_name(card) if card else "Unknown Card"
            rows.append(
                (
                    transaction.date.date().isoformat(),
                    transaction.description,
                    transaction.amount,
                    transaction.points_earned,
                    card_name,
                )
            )
        return rows

    def write(
        self,
        transactions: Iterable[Transaction],
        cards: Iterable[Card],
        filename: str = "transactions.csv",
    ) -> Path:
        """Write the CSV file and return its path."""
        file_path = self.output_dir / filename
        rows = self.rows(transactions, cards)

        with open(file_path, "w", encoding="utf-8", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(HEADER)
            writer.writerows(rows)

        logger.info("Wrote %d transactions to %s", len(rows), file_path)
        return file_path

"""Export one user's ledger to JSON and CSV files."""

from pathlib import Path

from points_ledger.service import LedgerService
from points_ledger.sinks.csv_file import TransactionCsvSink
from points_ledger.sinks.json_file import JsonFileSink


def export_user_ledger(
    service: LedgerService,
    user_id: int,
    output_dir: str | Path,
    pretty: bool = False,
) -> dict[str, int]:
    """Write cards, transactions, redemptions and the dashboard for ``user_id``.

    Returns
    -------
    dict[str, int]
        Records written per entity type.
    """
    cards = service.get_cards(user_id)
    transactions = service.get_transactions(user_id)

    json_sink = JsonFileSink(output_dir, pretty=pretty)
    json_sink.write_batch("cards", cards)
    json_sink.write_batch("transactions", transactions)
    json_sink.write_batch("redemptions", service.get_redemptions(user_id))

    summary = service.dashboard_summary(user_id)
    json_sink.write_batch(
        "dashboard",
        [
            {
                "total_points": summary.total_points,
                "points_value": summary.points_value,
                "expiring_points": summary.expiring_points,
            }
        ],
    )

    TransactionCsvSink(output_dir, service.catalog).write(transactions, cards)
    return json_sink.close()

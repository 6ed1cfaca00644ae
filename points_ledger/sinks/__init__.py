"""Output sinks for exporting ledger data."""

from points_ledger.sinks.csv_file import TransactionCsvSink
from points_ledger.sinks.json_file import JsonFileSink

__all__ = ["JsonFileSink", "TransactionCsvSink"]

"""Logging setup for points-ledger.

Balance changes and redemptions log their identifiers through ``extra``
(``logger.info(..., extra={"card_id": 3, "delta": -200})``). Both formatters
render those fields, so a card's history can be grepped from plain logs
and filtered from JSON logs.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Iterable, TextIO

from points_ledger.config import LedgerConfig

CONTEXT_FIELDS = ("user_id", "card_id", "option_id", "delta", "balance")
QUIET_LOGGERS = ("psycopg", "faker")

STANDARD_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def ledger_context(record: logging.LogRecord) -> dict[str, Any]:
    """Context fields attached to ``record``, in ``CONTEXT_FIELDS`` order."""
    return {name: getattr(record, name) for name in CONTEXT_FIELDS if hasattr(record, name)}


class ContextFormatter(logging.Formatter):
    """Standard line format with ledger context appended as ``key=value``."""

    def __init__(self) -> None:
        super().__init__(fmt=STANDARD_FORMAT, datefmt=DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = ledger_context(record)
        if not context:
            return line
        return line + " | " + " ".join(f"{key}={value}" for key, value in context.items())


class JsonFormatter(logging.Formatter):
    """One JSON object per record, with ledger context as top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **ledger_context(record),
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data, default=str)


def setup_logging(
    level: str = "INFO",
    format_type: str = "standard",
    stream: TextIO | None = None,
    quiet: Iterable[str] = QUIET_LOGGERS,
) -> logging.Handler:
    """Install a single root handler and return it.

    Parameters
    ----------
    level : str
        Log level name; unknown names fall back to INFO.
    format_type : str
        ``"standard"`` or ``"json"``.
    stream : TextIO | None
        Output stream (default stdout).
    quiet : Iterable[str]
        Loggers capped at WARNING.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(JsonFormatter() if format_type == "json" else ContextFormatter())

    root_logger = logging.getLogger()
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    logging.getLogger("points_ledger").setLevel(log_level)
    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)
    return handler


def configure_logging(config: LedgerConfig) -> logging.Handler:
    """Apply ``config.log_level`` and ``config.log_format``."""
    return setup_logging(config.log_level, config.log_format)

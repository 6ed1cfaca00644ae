#!/usr/bin/env python3
"""Seed a ledger with demo wallets and export one user's data.

Usage:
    python scripts/seed_demo.py --users 5 --seed 42
    LEDGER_BACKEND=postgres python scripts/seed_demo.py --output-dir local/
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from points_ledger.config import LedgerConfig
from points_ledger.exceptions import LedgerError
from points_ledger.logging import configure_logging
from points_ledger.scenarios import DemoWalletScenario
from points_ledger.service import LedgerService
from points_ledger.sinks.export import export_user_ledger

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed demo rewards wallets")
    parser.add_argument("--users", type=int, default=3, help="Number of users to create")
    parser.add_argument("--days", type=int, default=60, help="Days of purchase history")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--output-dir", type=Path, default=None, help="Export directory")
    parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON output")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    config = LedgerConfig.from_env()
    configure_logging(config)

    service = LedgerService.from_config(config)
    scenario = DemoWalletScenario(
        num_users=args.users,
        history_days=args.days,
        seed=args.seed if args.seed is not None else config.seed,
        service=service,
    )

    try:
        scenario.generate()
    except LedgerError as e:
        logger.error("Seeding failed: %s", e)
        return 1

    output_dir = args.output_dir or config.output.export_dir
    for user in scenario.users:
        counts = export_user_ledger(
            service,
            user.user_id,
            output_dir / user.username,
            pretty=args.pretty or config.output.pretty_json,
        )
        summary = service.dashboard_summary(user.user_id)
        print(
            f"{user.username}: {summary.total_points:,} points worth {summary.points_value}, "
            f"{summary.expiring_points:,} expiring ({counts['transactions']} transactions)"
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())

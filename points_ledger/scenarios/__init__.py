"""Scenarios for populating a ledger with demo data."""

from points_ledger.scenarios.demo_wallet import DemoWalletScenario

__all__ = ["DemoWalletScenario"]

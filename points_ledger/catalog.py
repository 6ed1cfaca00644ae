"""Conversion-rate catalog: bank/card-type rates and redemption options."""

from decimal import Decimal
from typing import Iterable

from points_ledger.catalog_data import BANKS, REDEMPTION_OPTIONS
from points_ledger.models import Bank, Card, RedemptionOption

DEFAULT_CONVERSION_RATE = Decimal("0.25")


class ConversionCatalog:
    """Static lookup of conversion rates and redemption options.

    Unknown (bank, card type) pairs are valued at ``default_rate`` so that
    valuation never fails for a card the catalog does not know about.

    Parameters
    ----------
    banks : Iterable[Bank] | None
        Issuers to index (defaults to the bundled catalog).
    options : Iterable[RedemptionOption] | None
        Redemption options (defaults to the bundled catalog).
    default_rate : Decimal
        Currency units per point for unknown cards.
    """

    def __init__(
        self,
        banks: Iterable[Bank] | None = None,
        options: Iterable[RedemptionOption] | None = None,
        default_rate: Decimal = DEFAULT_CONVERSION_RATE,
    ) -> None:
        self._banks = {bank.bank_id: bank for bank in (BANKS if banks is None else banks)}
        self._options = list(REDEMPTION_OPTIONS if options is None else options)
        self._options_by_id = {option.option_id: option for option in self._options}
        self.default_rate = default_rate

    def banks(self) -> list[Bank]:
        """All issuers in catalog order."""
        return list(self._banks.values())

    def bank(self, bank_id: str) -> Bank | None:
        return self._banks.get(bank_id)

    def rate_for(self, bank_id: str, card_type: str) -> Decimal:
        """Currency units per point for a card, falling back to the default rate."""
        bank = self._banks.get(bank_id)
        rate = bank.rate(card_type) if bank is not None else None
        return self.default_rate if rate is None else rate

    def options_by_category(self, category: str | None = None) -> list[RedemptionOption]:
        """Redemption options in ``category``, or every option when ``None``."""
        if category is None:
            return list(self._options)
        return [option for option in self._options if option.category == category]

    def option(self, option_id: str) -> RedemptionOption | None:
        return self._options_by_id.get(option_id)

    def categories(self) -> list[str]:
        """Unique option categories in first-seen order."""
        return list(dict.fromkeys(option.category for option in self._options))

    def affordable_options(self, points: int) -> list[RedemptionOption]:
        """Options whose minimum a balance of ``points`` already meets."""
        return [option for option in self._options if option.min_points <= points]

    def card_display_name(self, card: Card) -> str:
        bank = self._banks.get(card.bank_id)
        if bank is None:
            return "Unknown Card"
        return f"{bank.name} {card.card_type}"

"""Read-only catalog models: banks and redemption options."""

from dataclasses import dataclass
from decimal import Decimal

from points_ledger.models.enums import TagType


@dataclass(frozen=True)
class Bank:
    """Card issuer with per-card-type conversion rates (currency per point).

    ``conversion_rates`` is a tuple of ``(card_type, rate)`` pairs in
    display order, which keeps the model hashable.
    """

    bank_id: str
    name: str
    logo: str
    conversion_rates: tuple[tuple[str, Decimal], ...] = ()

    @property
    def card_types(self) -> tuple[str, ...]:
        return tuple(card_type for card_type, _ in self.conversion_rates)

    def rate(self, card_type: str) -> Decimal | None:
        """Rate for ``card_type``, or ``None`` when the bank does not issue it."""
        return next((rate for name, rate in self.conversion_rates if name == card_type), None)


@dataclass(frozen=True)
class OptionTag:
    """Highlight badge shown next to a redemption option."""

    text: str
    type: TagType


@dataclass(frozen=True)
class RedemptionOption:
    """Something points can be exchanged for."""

    option_id: str
    name: str
    description: str
    conversion_rate: Decimal
    min_points: int
    category: str
    icon: str
    tag: OptionTag | None = None

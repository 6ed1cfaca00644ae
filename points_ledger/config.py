"""Configuration management for points-ledger."""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path

from points_ledger.exceptions import ConfigurationError

BACKENDS = ("memory", "postgres")
VALUATION_MODES = ("flat", "per_card")
LOG_FORMATS = ("standard", "json")


@dataclass
class PostgresConfig:
    """PostgreSQL connection configuration."""

    host: str = "localhost"
    port: int = 5432
    database: str = "rewards"
    user: str = "postgres"
    password: str = "postgres"

    @property
    def connection_string(self) -> str:
        """Get connection string."""
        return f"postgresql://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"


@dataclass
class ValuationConfig:
    """Point valuation and dashboard settings."""

    default_rate: Decimal = Decimal("0.25")
    dashboard_valuation: str = "flat"
    expiry_horizon_days: int = 30
    recent_transactions_limit: int = 5


@dataclass
class PaymentConfig:
    """Mock payment settings."""

    points_rate: Decimal = Decimal("0.25")  # currency units per point spent
    cashback_rate: Decimal = Decimal("0.01")
    max_amount: int = 100_000


@dataclass
class OutputConfig:
    """Export configuration."""

    export_dir: Path = field(default_factory=lambda: Path("output"))
    pretty_json: bool = False


@dataclass
class LedgerConfig:
    """Main configuration for points-ledger."""

    backend: str = "memory"
    postgres: PostgresConfig = field(default_factory=PostgresConfig)
    valuation: ValuationConfig = field(default_factory=ValuationConfig)
    payments: PaymentConfig = field(default_factory=PaymentConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    record_redemption_transactions: bool = True
    seed: int | None = None
    log_level: str = "INFO"
    log_format: str = "standard"

    def validate(self) -> "LedgerConfig":
        """Check option values, raising ``ConfigurationError`` on the first bad one."""
        if self.backend not in BACKENDS:
            raise ConfigurationError(f"Unknown backend {self.backend!r}, expected one of {BACKENDS}")
        if self.valuation.dashboard_valuation not in VALUATION_MODES:
            raise ConfigurationError(
                f"Unknown dashboard valuation {self.valuation.dashboard_valuation!r}, "
                f"expected one of {VALUATION_MODES}"
            )
        if self.log_format not in LOG_FORMATS:
            raise ConfigurationError(f"Unknown log format {self.log_format!r}")
        if self.valuation.default_rate <= 0:
            raise ConfigurationError("Default conversion rate must be positive")
        if self.valuation.expiry_horizon_days < 0:
            raise ConfigurationError("Expiry horizon cannot be negative")
        if self.valuation.recent_transactions_limit < 0:
            raise ConfigurationError("Recent transactions limit cannot be negative")
        if self.payments.points_rate <= 0:
            raise ConfigurationError("Points payment rate must be positive")
        if self.payments.cashback_rate < 0:
            raise ConfigurationError("Cashback rate cannot be negative")
        return self

    @classmethod
    def from_env(cls) -> "LedgerConfig":
        """Create config from environment variables."""
        import os

        postgres = PostgresConfig(
            host=os.getenv("POSTGRES_HOST", "localhost"),
            port=_int_env("POSTGRES_PORT", "5432"),
            database=os.getenv("POSTGRES_DB", "rewards"),
            user=os.getenv("POSTGRES_USER", "postgres"),
            password=os.getenv("POSTGRES_PASSWORD", "postgres"),
        )

        valuation = ValuationConfig(
            default_rate=_decimal_env("DEFAULT_CONVERSION_RATE", "0.25"),
            dashboard_valuation=os.getenv("DASHBOARD_VALUATION", "flat").lower(),
            expiry_horizon_days=_int_env("EXPIRY_HORIZON_DAYS", "30"),
            recent_transactions_limit=_int_env("RECENT_TRANSACTIONS_LIMIT", "5"),
        )

        payments = PaymentConfig(
            points_rate=_decimal_env("POINTS_PAYMENT_RATE", "0.25"),
            cashback_rate=_decimal_env("CASHBACK_RATE", "0.01"),
        )

        output = OutputConfig(
            export_dir=Path(os.getenv("OUTPUT_DIR", "output")),
            pretty_json=os.getenv("PRETTY_JSON", "false").lower() == "true",
        )

        config = cls(
            backend=os.getenv("LEDGER_BACKEND", "memory").lower(),
            postgres=postgres,
            valuation=valuation,
            payments=payments,
            output=output,
            record_redemption_transactions=(
                os.getenv("RECORD_REDEMPTION_TRANSACTIONS", "true").lower() == "true"
            ),
            seed=_int_env("SEED", None),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "standard").lower(),
        )
        return config.validate()


def _int_env(name: str, default: str | None) -> int | None:
    import os

    raw = os.getenv(name) or default
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e


def _decimal_env(name: str, default: str) -> Decimal:
    import os

    raw = os.getenv(name) or default
    try:
        return Decimal(raw)
    except InvalidOperation as e:
        raise ConfigurationError(f"{name} must be a decimal number, got {raw!r}") from e

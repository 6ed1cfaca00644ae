"""Custom exception hierarchy for points-ledger."""


class LedgerError(Exception):
    """Base exception for all points-ledger errors."""


class EntityNotFoundError(LedgerError):
    """Raised when a referenced card, user or redemption option does not exist."""


class ForbiddenError(LedgerError):
    """Raised when an entity exists but belongs to another user."""


class InvalidInputError(LedgerError):
    """Raised when a request payload is malformed.

    Parameters
    ----------
    message : str
        Human readable description of the problem.
    field : str | None
        Name of the offending field, when the problem is field-specific.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class InvalidAmountError(InvalidInputError):
    """Raised when a points amount is zero or negative."""

    def __init__(self, message: str = "Please enter points to redeem", field: str | None = "points_used") -> None:
        super().__init__(message, field)


class NoOptionSelectedError(InvalidInputError):
    """Raised when a redemption is attempted without choosing an option."""

    def __init__(self, message: str = "No redemption option selected", field: str | None = "option_id") -> None:
        super().__init__(message, field)


class InsufficientPointsError(LedgerError):
    """Raised when a spend would drive a card balance below zero."""

    def __init__(self, card_id: int, requested: int, available: int) -> None:
        super().__init__(
            f"Insufficient points: card {card_id} has {available} points, {requested} requested"
        )
        self.card_id = card_id
        self.requested = requested
        self.available = available


class BelowMinimumError(LedgerError):
    """Raised when a redemption is below the option's minimum points."""

    def __init__(self, option_id: str, requested: int, minimum: int) -> None:
        super().__init__(
            f"Minimum points requirement not met: option {option_id} requires "
            f"at least {minimum} points, {requested} requested"
        )
        self.option_id = option_id
        self.requested = requested
        self.minimum = minimum


class PartialFailureError(LedgerError):
    """Raised when a multi-write ledger operation fails part way.

    Every write of the failed unit has already been rolled back when this
    is raised.
    """


class ConfigurationError(LedgerError):
    """Raised when configuration is invalid or missing."""


class RepositoryError(LedgerError):
    """Raised when the storage backend fails."""

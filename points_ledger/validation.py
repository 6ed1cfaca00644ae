"""Field-level parsing of request payloads."""

import re
from datetime import date, datetime
from typing import Any, Mapping

from points_ledger.exceptions import InvalidInputError

_MISSING = object()

LAST_FOUR_PATTERN = re.compile(r"^\d{4}$")
CARD_EXPIRY_PATTERN = re.compile(r"^(0[1-9]|1[0-2])/([0-9]{2})$")
UPI_ID_PATTERN = re.compile(r"^[a-zA-Z0-9._-]+@[a-zA-Z0-9]+$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def require_int(
    data: Mapping[str, Any],
    name: str,
    default: Any = _MISSING,
    minimum: int | None = None,
    maximum: int | None = None,
) -> int:
    """Read an integer field, accepting digit strings.

    Raises
    ------
    InvalidInputError
        If the field is missing (and has no default), not an integer, or out
        of range.
    """
    value = data.get(name, _MISSING)
    if value is _MISSING or value is None:
        if default is _MISSING:
            raise InvalidInputError(f"{name} is required", field=name)
        return default

    if isinstance(value, bool):
        raise InvalidInputError(f"{name} must be an integer", field=name)
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError as e:
            raise InvalidInputError(f"{name} must be an integer", field=name) from e
    elif isinstance(value, float):
        if not value.is_integer():
            raise InvalidInputError(f"{name} must be a whole number", field=name)
        value = int(value)
    elif not isinstance(value, int):
        raise InvalidInputError(f"{name} must be an integer", field=name)

    if minimum is not None and value < minimum:
        raise InvalidInputError(f"{name} must be at least {minimum}", field=name)
    if maximum is not None and value > maximum:
        raise InvalidInputError(f"{name} cannot exceed {maximum}", field=name)
    return value


def require_bool(data: Mapping[str, Any], name: str, default: Any = _MISSING) -> bool:
    """Read a boolean field; ``"true"``/``"false"`` strings are accepted in any case."""
    value = data.get(name, _MISSING)
    if value is _MISSING or value is None:
        if default is _MISSING:
            raise InvalidInputError(f"{name} is required", field=name)
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise InvalidInputError(f"{name} must be true or false", field=name)


def require_str(
    data: Mapping[str, Any],
    name: str,
    pattern: re.Pattern[str] | None = None,
    message: str | None = None,
    default: Any = _MISSING,
) -> str:
    value = data.get(name, _MISSING)
    if value is _MISSING or value is None:
        if default is _MISSING:
            raise InvalidInputError(f"{name} is required", field=name)
        return default
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError(f"{name} must be a non-empty string", field=name)
    value = value.strip()
    if pattern is not None and not pattern.match(value):
        raise InvalidInputError(message or f"{name} has an invalid format", field=name)
    return value


def parse_date(value: Any, name: str) -> date | None:
    """Parse ``YYYY-MM-DD``; ``None`` and ``""`` mean no date."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError as e:
            raise InvalidInputError(
                f"{name} has an invalid date format (YYYY-MM-DD)", field=name
            ) from e
    raise InvalidInputError(f"{name} must be a date", field=name)


def parse_datetime(value: Any, name: str) -> datetime:
    """Parse a datetime or ISO-8601 string into a naive local datetime."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as e:
            raise InvalidInputError(f"{name} has an invalid datetime format", field=name) from e
    else:
        raise InvalidInputError(f"{name} must be a datetime", field=name)

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed

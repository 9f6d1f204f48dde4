"""
Validation utilities
"""
import math
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")
# Plain decimal notation only: no grouping separators or decimal comma
_AMOUNT_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


def parse_amount(value) -> Decimal | None:
    """
    Parse a monetary amount from JSON input.

    Accepts int, float, Decimal and plain numeric strings. Returns None for
    anything that is not a finite number (booleans, NaN, Infinity, garbage
    strings, "1,000").

    Example:
        >>> parse_amount("15.99")
        Decimal("15.99")
        >>> parse_amount("abc") is None
        True
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    elif isinstance(value, str):
        raw = value.strip()
        if not _AMOUNT_RE.match(raw):
            return None
        try:
            amount = Decimal(raw)
        except InvalidOperation:
            return None
    else:
        return None

    if not amount.is_finite():
        return None
    return amount


def parse_leading_int(value) -> int | None:
    """
    Read the leading integer of a query-string value.

    "12" -> 12, "2.7" -> 2, "12abc" -> 12, "-5" -> -5, "abc" -> None.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if not isinstance(value, str):
        return None
    match = _LEADING_INT_RE.match(value)
    if not match:
        return None
    return int(match.group(1))


def parse_calendar_date(value) -> date | None:
    """
    Parse a billing date.

    Accepts date/datetime objects and ISO-8601 strings ("2025-06-15",
    "2025-06-15T10:00:00Z"). Returns None for anything that is not a real
    calendar date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    raw = value.strip()
    if not raw:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def is_valid_email(email: str) -> bool:
    return bool(_EMAIL_RE.match(email))

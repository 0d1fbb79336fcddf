"""
Field Parsing

Typed parsers for the loosely-typed fields found in order, user and product
documents. Every parser returns a usable default instead of raising, so a
single malformed document cannot abort a report.
"""

import math
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from src.database.models import LEGACY_STATUS_ALIASES, OrderStatus

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_CANONICAL_STATUSES = {status.value: status for status in OrderStatus}


def _to_float(value: Any) -> Optional[float]:
    """Best-effort float conversion; None when the value is not numeric"""
    if value is None or isinstance(value, bool):
        return None

    # bson.Decimal128
    if hasattr(value, "to_decimal"):
        value = value.to_decimal()

    if isinstance(value, (int, float, Decimal)):
        try:
            number = float(value)
        except (InvalidOperation, OverflowError, ValueError):
            return None
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None

    if not math.isfinite(number):
        return None
    return number


def parse_money(value: Any) -> float:
    """Parse a monetary amount; missing, malformed or negative amounts are 0.0"""
    number = _to_float(value)
    if number is None or number < 0:
        return 0.0
    return number


def parse_quantity(value: Any) -> int:
    """Parse a line-item quantity; anything below one counts as a single unit"""
    number = _to_float(value)
    if number is None or number < 1:
        return 1
    return int(number)


def parse_count(value: Any) -> int:
    """Parse a non-negative integer count, defaulting to 0"""
    number = _to_float(value)
    if number is None or number < 0:
        return 0
    return int(number)


def total_stock(stock: Any) -> int:
    """
    Total units held for a product.

    Stock is either a single count or one count per size.
    """
    if isinstance(stock, (list, tuple)):
        return sum(parse_count(level) for level in stock)
    return parse_count(stock)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a document timestamp into an aware UTC datetime"""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    # BSON dates come back naive and are always UTC
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_status(
    value: Any,
    case_sensitive: bool = True,
    resolve_aliases: bool = True,
) -> Optional[OrderStatus]:
    """
    Map a stored status string onto its canonical status.

    With resolve_aliases, legacy aliases resolve to the status they
    replaced. Unrecognized values return None.
    """
    if not isinstance(value, str):
        return None
    key = value if case_sensitive else value.lower()
    if key in _CANONICAL_STATUSES:
        return _CANONICAL_STATUSES[key]
    if resolve_aliases:
        return LEGACY_STATUS_ALIASES.get(key)
    return None


def parse_identifier(value: Any) -> Optional[str]:
    """Stringify an ObjectId, an embedded document's _id or a plain identifier"""
    if value is None:
        return None
    if isinstance(value, dict):
        return parse_identifier(value.get("_id"))
    text = str(value).strip()
    return text or None


def parse_text(value: Any) -> Optional[str]:
    """Non-empty string or None"""
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def growth_percentage(current: float, previous: float) -> float:
    """
    Percentage change of a window against the window before it.

    A previous value of zero yields 100 when anything happened in the
    current window and 0 otherwise.
    """
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return (current - previous) / previous * 100


def to_iso8601(value: datetime) -> str:
    """Format a datetime as a UTC ISO-8601 string with millisecond precision"""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"

"""Utility functions shared across the reporting service."""
from __future__ import annotations

import calendar
from datetime import datetime, timezone
from typing import Any, Optional

from dateutil import parser
from dateutil.relativedelta import relativedelta

ALL_SENTINEL = "all"

_MONTH_NAMES = {name.lower(): index for index, name in enumerate(calendar.month_name) if name}
_MONTH_NAMES.update({abbr.lower(): index for index, abbr in enumerate(calendar.month_abbr) if abbr})


def parse_datetime(value: str, default: Optional[datetime] = None) -> Optional[datetime]:
    """Parse a date or timestamp string; returns None on failure."""
    if not value:
        return None
    try:
        parsed = parser.parse(value, default=default, yearfirst=True)
    except (ValueError, TypeError, OverflowError):
        return None
    # The store holds naive UTC timestamps.
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_year(value: Optional[str]) -> Optional[int]:
    if not value:
        return None
    try:
        year = int(value)
    except (TypeError, ValueError):
        return None
    return year if 1 <= year <= 9999 else None


def parse_month(value: Optional[str]) -> Optional[int]:
    """Month number from ``3``, ``"03"``, ``"march"`` or ``"Mar"``; None if unknown."""
    if not value:
        return None
    token = value.strip().lower()
    if token.isdigit():
        month = int(token)
        return month if 1 <= month <= 12 else None
    return _MONTH_NAMES.get(token)


def first_of_month(year: int, month: int) -> datetime:
    return datetime(year, month, 1)


def last_day_of_month(year: int, month: int) -> datetime:
    """Midnight of the last calendar day: first of the next month, minus one day."""
    return first_of_month(year, month) + relativedelta(months=1, days=-1)


def is_all(value: Any) -> bool:
    return isinstance(value, str) and value.strip().lower() == ALL_SENTINEL


def normalize_filter(value: Optional[str]) -> Optional[str]:
    """Return None for an unconstrained filter (missing, blank or ``"all"``)."""
    if value is None or not str(value).strip() or is_all(value):
        return None
    return value


def safe_amount(value: object) -> float:
    """Convert a stored money value to float; non-numeric values count as 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0

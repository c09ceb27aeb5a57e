"""
Cell coercion helpers.

Convert raw spreadsheet cell values (as returned by openpyxl) into typed,
nullable values. None of these functions raise: anything that cannot be
converted becomes None.
"""

import math
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional

# Spreadsheet serial day 0. Starting from 1899-12-30 absorbs the 1900 leap-year bug.
EXCEL_EPOCH = datetime(1899, 12, 30)
MS_PER_DAY = 86_400_000


def coerce_number(value: Any) -> Optional[float]:
    """
    Convert a cell value to a float.

    Returns None for missing or blank input, unparseable text, date values,
    and results that are NaN or infinite.
    """
    if value is None:
        return None
    if isinstance(value, (datetime, date, timedelta)):
        return None

    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None

    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None

    if not math.isfinite(number):
        return None
    return number


def coerce_string(value: Any) -> Optional[str]:
    """Convert a cell value to a trimmed string, or None when empty."""
    if value is None:
        return None

    if isinstance(value, float) and value.is_integer():
        text = str(int(value))
    else:
        text = str(value)

    return text.strip() or None


def coerce_date(value: Any) -> Optional[str]:
    """
    Convert a cell value to a ``YYYY-MM-DD`` string.

    Accepts native date/datetime values (their UTC calendar date; naive
    datetimes are taken as UTC) and spreadsheet serial numbers. Serials <= 0,
    NaN, out-of-range serials and any other type give None.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date().isoformat()

    if isinstance(value, date):
        return value.isoformat()

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None

    if not value > 0:
        return None

    try:
        converted = EXCEL_EPOCH + timedelta(milliseconds=value * MS_PER_DAY)
    except (OverflowError, ValueError):
        return None

    return converted.date().isoformat()

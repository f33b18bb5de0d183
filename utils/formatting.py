"""
Display formatting for listing values (price, counts, area, open house times).
"""
import re
from datetime import datetime
from typing import Optional

from constants import AREA_UNITS, CURRENCY_SYMBOLS, DEFAULT_CURRENCY, NOT_AVAILABLE


def format_count(value) -> Optional[str]:
    """3 -> '3', 2.5 -> '2.5', None -> None."""
    if value is None:
        return None
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return f"{number:g}"


def format_area(value, unit: str = "sqft", upper: bool = False) -> str:
    """
    Area as a plain integer plus unit, e.g. '1980 sqft' or '1980 SQFT'.
    Missing values render as 'N/A'.
    """
    if value is None:
        return NOT_AVAILABLE
    labels = AREA_UNITS.get(unit, AREA_UNITS["sqft"])
    return f"{int(round(float(value)))} {labels['upper' if upper else 'lower']}"


_NUMBER_RE = re.compile(r'[^0-9.]')


def format_price(raw, currency: str = DEFAULT_CURRENCY) -> str:
    """
    '525000' / 525000 / '$525,000' -> '$525,000'.
    Text that carries no number (e.g. 'Call for price') is returned as-is.
    """
    if raw is None:
        return ""
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        amount = float(raw)
    else:
        text = str(raw).strip()
        digits = _NUMBER_RE.sub("", text)
        if not digits or digits.count(".") > 1:
            return text
        amount = float(digits)

    symbol = CURRENCY_SYMBOLS.get((currency or DEFAULT_CURRENCY).upper(), "$")
    if amount.is_integer():
        return f"{symbol}{int(amount):,}"
    return f"{symbol}{amount:,.2f}"


def _format_date(dt: datetime) -> str:
    return f"{dt:%B} {dt.day}, {dt.year}"


def _format_hour(dt: datetime) -> str:
    hour = dt.hour % 12 or 12
    suffix = "AM" if dt.hour < 12 else "PM"
    return f"{hour}:00 {suffix}"


def format_open_house(start: datetime, end: datetime) -> str:
    """
    Same day:  'October 19, 2026\\n2:00 PM - 4:00 PM'
    Otherwise: 'October 19, 2026 at 2:00 PM\\nOctober 20, 2026 at 11:00 AM'

    Minutes are dropped; times show the hour they fall in.
    """
    if start.date() == end.date():
        return f"{_format_date(start)}\n{_format_hour(start)} - {_format_hour(end)}"
    return (
        f"{_format_date(start)} at {_format_hour(start)}\n"
        f"{_format_date(end)} at {_format_hour(end)}"
    )


def parse_datetime(raw) -> datetime:
    """Accept datetime or ISO-8601 text (trailing 'Z' allowed)."""
    if isinstance(raw, datetime):
        return raw
    text = str(raw or "").strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        raise ValueError(f"Invalid datetime: '{raw}'")

"""Formatting helpers for spoken responses."""

from datetime import date
from typing import Optional


_PERIOD_NAMES = {
    "today": "today",
    "yesterday": "yesterday",
    "this_week": "this week",
    "last_week": "last week",
    "this_month": "this month",
    "last_month": "last month",
    "this_quarter": "this quarter",
    "last_quarter": "last quarter",
    "this_year": "this year",
    "last_year": "last year",
}


def format_period(period: Optional[str]) -> str:
    """Period key to human readable ("this_week" -> "this week")."""
    period = period or "today"
    return _PERIOD_NAMES.get(period, period.replace("_", " "))


def format_number(num: float) -> str:
    if num >= 1_000_000:
        return f"{num / 1_000_000:.1f} million"
    if num >= 1000:
        return f"{num / 1000:.0f}k"
    return f"{num:g}"


def format_currency(amount: float) -> str:
    if amount >= 1_000_000:
        return f"${amount / 1_000_000:.1f} million"
    if amount >= 1000:
        return f"${amount / 1000:.0f}k"
    return f"${amount:.0f}"


def format_when(value) -> Optional[str]:
    """Resolved dates read as "Tuesday, October 20"; raw phrases pass through."""
    if value is None:
        return None
    if isinstance(value, date):
        return f"{value:%A}, {value:%B} {value.day}"
    return str(value)


def capitalize(text: str) -> str:
    return text[:1].upper() + text[1:]


def singular(entity_type: str) -> str:
    """"leads" -> "lead". Only the plural forms the parser produces."""
    return entity_type[:-1] if entity_type.endswith("s") else entity_type

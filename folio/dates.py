"""Date helpers shared by listings and exports."""

from __future__ import annotations

from datetime import date, datetime

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


def format_date(value: date | datetime | str) -> str:
    """Format a date the long US way, e.g. ``January 5, 2024``.

    The output does not depend on the process locale.
    """
    if isinstance(value, str):
        value = date.fromisoformat(value.strip()[:10])
    if isinstance(value, datetime):
        value = value.date()
    return f"{MONTH_NAMES[value.month - 1]} {value.day}, {value.year}"

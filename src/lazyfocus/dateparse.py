# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Natural-language date parsing for CLI arguments.

Dates without an explicit time resolve to 5:00 PM local time.
"""

import re
from datetime import date, datetime, timedelta
from typing import Callable, List, Optional

DUE_HOUR = 17

WEEKDAYS = {
    "monday": 0,
    "tuesday": 1,
    "wednesday": 2,
    "thursday": 3,
    "friday": 4,
    "saturday": 5,
    "sunday": 6,
}

MONTHS = {
    "january": 1, "jan": 1,
    "february": 2, "feb": 2,
    "march": 3, "mar": 3,
    "april": 4, "apr": 4,
    "may": 5,
    "june": 6, "jun": 6,
    "july": 7, "jul": 7,
    "august": 8, "aug": 8,
    "september": 9, "sep": 9, "sept": 9,
    "october": 10, "oct": 10,
    "november": 11, "nov": 11,
    "december": 12, "dec": 12,
}

RELATIVE_DAYS = {"today": 0, "tomorrow": 1, "yesterday": -1}

IN_PATTERN = re.compile(r"^in\s+(\d+)\s+(day|days|week|weeks)$")
ISO_PATTERN = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")


class DateParseError(ValueError):
    """Raised when a date string is not recognized."""

    pass


def _at_due_hour(day: date) -> datetime:
    return datetime(day.year, day.month, day.day, DUE_HOUR).astimezone()


def _relative_day(text: str, today: date) -> Optional[date]:
    if text in RELATIVE_DAYS:
        return today + timedelta(days=RELATIVE_DAYS[text])
    if text == "next week":
        return today + timedelta(days=7)
    return None


def _next_weekday(text: str, today: date) -> Optional[date]:
    if not text.startswith("next "):
        return None
    target = WEEKDAYS.get(text[len("next "):].strip())
    if target is None:
        return None
    # Always strictly after today
    days = (target - today.weekday()) % 7 or 7
    return today + timedelta(days=days)


def _in_days_weeks(text: str, today: date) -> Optional[date]:
    match = IN_PATTERN.match(text)
    if not match:
        return None
    n = int(match.group(1))
    if match.group(2).startswith("week"):
        n *= 7
    return today + timedelta(days=n)


def _iso(text: str, today: date) -> Optional[date]:
    match = ISO_PATTERN.match(text)
    if not match:
        return None
    try:
        return date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    except ValueError:
        return None


def _month_day(text: str, today: date) -> Optional[date]:
    """'jan 15', 'january 15' or 'jan 15 2027'."""
    parts = text.split()
    if len(parts) not in (2, 3) or parts[0] not in MONTHS:
        return None
    if not all(p.isdigit() for p in parts[1:]):
        return None

    month = MONTHS[parts[0]]
    day = int(parts[1])
    try:
        if len(parts) == 3:
            return date(int(parts[2]), month, day)
        result = date(today.year, month, day)
        if result < today:
            result = date(today.year + 1, month, day)
        return result
    except ValueError:
        return None


PARSERS: List[Callable[[str, date], Optional[date]]] = [
    _relative_day,
    _next_weekday,
    _in_days_weeks,
    _iso,
    _month_day,
]


def parse_date(text: str, now: Optional[datetime] = None) -> datetime:
    """
    Parse a natural-language date.

    Args:
        text: Date text, case-insensitive (e.g. "tomorrow", "next friday",
            "in 3 days", "2027-01-15", "jan 15")
        now: Reference time, defaults to the current local time

    Returns:
        Timezone-aware local datetime at 17:00 on the resolved day

    Raises:
        DateParseError: If the text is empty or not a recognized form
    """
    normalized = " ".join((text or "").lower().split())
    if not normalized:
        raise DateParseError("empty date string")

    today = (now or datetime.now()).date()
    for parser in PARSERS:
        result = parser(normalized, today)
        if result is not None:
            return _at_due_hour(result)

    raise DateParseError(f"unrecognized date format: {text}")

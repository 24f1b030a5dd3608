"""Natural-language date and time coercion.

Both parsers take ``now`` explicitly. Input they cannot understand is
returned unchanged so validation rejects it instead of guessing.
"""

import re
from datetime import date, datetime, timedelta
from typing import Any

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_DMY_DATE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_IN_N = re.compile(r"^in\s+(\d+)\s+(day|days|week|weeks)$")
_NEXT_WEEKDAY = re.compile(r"^(?:next\s+)?(" + "|".join(WEEKDAYS) + r")$")
_AMPM = re.compile(r"^(\d{1,2})(?:[:.](\d{2}))?\s*(am|pm)$")
_H24 = re.compile(r"^(\d{1,2})[:.](\d{2})$")


def _iso(value: date) -> str:
    return value.strftime("%Y-%m-%d")


def parse_natural_date(value: str, now: datetime) -> str:
    lower = value.strip().lower()
    today = now.date()
    if lower == "today":
        return _iso(today)
    if lower == "tomorrow":
        return _iso(today + timedelta(days=1))
    if lower == "yesterday":
        return _iso(today - timedelta(days=1))

    match = _NEXT_WEEKDAY.match(lower)
    if match:
        days_until = WEEKDAYS.index(match.group(1)) - today.weekday()
        if days_until <= 0:
            days_until += 7
        return _iso(today + timedelta(days=days_until))

    match = _IN_N.match(lower)
    if match:
        count = int(match.group(1))
        if match.group(2).startswith("week"):
            count *= 7
        return _iso(today + timedelta(days=count))

    if _ISO_DATE.match(lower):
        return lower

    match = _DMY_DATE.match(lower)
    if match:
        day, month, year = (int(g) for g in match.groups())
        try:
            return _iso(date(year, month, day))
        except ValueError:
            return value
    return value


def parse_natural_time(value: str) -> str:
    lower = value.strip().lower()
    if lower in ("noon", "midday"):
        return "12:00"
    if lower == "midnight":
        return "00:00"

    match = _AMPM.match(lower)
    if match:
        hours = int(match.group(1))
        minutes = match.group(2) or "00"
        period = match.group(3)
        if not 1 <= hours <= 12:
            return value
        if period == "pm" and hours != 12:
            hours += 12
        if period == "am" and hours == 12:
            hours = 0
        return f"{hours:02d}:{minutes}"

    match = _H24.match(lower)
    if match:
        return f"{int(match.group(1)):02d}:{match.group(2)}"
    return value


def datetime_context(now: datetime) -> dict[str, Any]:
    return {
        "today": _iso(now.date()),
        "tomorrow": _iso(now.date() + timedelta(days=1)),
        "current_time": now.strftime("%H:%M"),
        "day_of_week": now.strftime("%A"),
        "timestamp": now.isoformat(),
    }

"""Domain validation for tool-call parameters.

Each validator collects every problem and raises one ValidationError.
"""

import re
from datetime import date
from typing import Any

from lifepa.errors import FieldError, ValidationError
from lifepa.tools.definitions import EVENT_CATEGORIES, HABIT_FREQUENCIES

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
_SCRIPT_RE = re.compile(r"<script[^>]*>.*?</script>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]+>")

MAX_TITLE = 200
MAX_TEXT = 1000
MAX_HABIT_NAME = 100


def is_valid_date(value: object) -> bool:
    if not isinstance(value, str) or not _DATE_RE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def is_valid_time(value: object) -> bool:
    return isinstance(value, str) and bool(_TIME_RE.match(value))


def sanitize_string(value: object) -> str:
    if not isinstance(value, str):
        return ""
    return _TAG_RE.sub("", _SCRIPT_RE.sub("", value)).strip()


def _raise_if(errors: list[FieldError]) -> None:
    if errors:
        raise ValidationError("; ".join(e.message for e in errors), errors=errors)


def _check_title(params: dict[str, Any], errors: list[FieldError]) -> None:
    title = params.get("title")
    if not isinstance(title, str) or not title:
        errors.append(FieldError("title", "Title is required"))
    elif not title.strip():
        errors.append(FieldError("title", "Title cannot be empty"))
    elif len(title) > MAX_TITLE:
        errors.append(FieldError("title", f"Title must be less than {MAX_TITLE} characters"))


def _check_schedule(params: dict[str, Any], errors: list[FieldError]) -> None:
    if not params.get("date"):
        errors.append(FieldError("date", "Date is required"))
    elif not is_valid_date(params["date"]):
        errors.append(FieldError("date", "Date must be in YYYY-MM-DD format"))
    if not params.get("time"):
        errors.append(FieldError("time", "Time is required"))
    elif not is_valid_time(params["time"]):
        errors.append(FieldError("time", "Time must be in HH:MM format (24-hour)"))


def _check_text(params: dict[str, Any], key: str, label: str, errors: list[FieldError]) -> None:
    value = params.get(key)
    if value in (None, ""):
        return
    if not isinstance(value, str):
        errors.append(FieldError(key, f"{label} must be a string"))
    elif len(value) > MAX_TEXT:
        errors.append(FieldError(key, f"{label} must be less than {MAX_TEXT} characters"))


def validate_event_params(params: dict[str, Any]) -> None:
    errors: list[FieldError] = []
    _check_title(params, errors)
    _check_schedule(params, errors)
    _check_text(params, "description", "Description", errors)
    category = params.get("category")
    if category:
        if not isinstance(category, str) or category.lower() not in EVENT_CATEGORIES:
            errors.append(
                FieldError("category", f"Category must be one of: {', '.join(EVENT_CATEGORIES)}")
            )
    _raise_if(errors)


def validate_reminder_params(params: dict[str, Any]) -> None:
    errors: list[FieldError] = []
    _check_title(params, errors)
    _check_schedule(params, errors)
    _check_text(params, "notes", "Notes", errors)
    _raise_if(errors)


def validate_habit_params(params: dict[str, Any]) -> None:
    errors: list[FieldError] = []
    name = params.get("name")
    if not isinstance(name, str) or not name.strip():
        errors.append(FieldError("name", "Habit name is required"))
    elif len(name) > MAX_HABIT_NAME:
        errors.append(
            FieldError("name", f"Habit name must be less than {MAX_HABIT_NAME} characters")
        )
    for key in ("description", "cue", "routine", "reward"):
        _check_text(params, key, key.capitalize(), errors)
    frequency = params.get("frequency")
    if frequency:
        if not isinstance(frequency, str) or frequency.lower() not in HABIT_FREQUENCIES:
            errors.append(
                FieldError(
                    "frequency", f"Frequency must be one of: {', '.join(HABIT_FREQUENCIES)}"
                )
            )
    _raise_if(errors)


def coerce_days(value: object, default: int = 7) -> int:
    """Return a day window in 1..365, raising ValidationError otherwise."""
    if value in (None, ""):
        return default
    if isinstance(value, bool):
        raise ValidationError(errors=[FieldError("days", "Days must be a whole number")])
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ValidationError(
            errors=[FieldError("days", "Days must be a whole number")]
        ) from exc
    if not number.is_integer() or not 1 <= number <= 365:
        raise ValidationError(errors=[FieldError("days", "Days must be between 1 and 365")])
    return int(number)

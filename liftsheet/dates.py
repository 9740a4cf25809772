"""Canonical "<month>/<day>" keys for matching sheet rows to calendar dates.

The key carries no year: "12/12/2023" and "12/12/2024" map to
the same key and therefore to the same rows.
"""

from datetime import date, datetime


def _strip_zeros(part: str) -> str:
    part = part.strip()
    if part.isdigit():
        return str(int(part))
    return part.lstrip("0") or part


def normalize(raw: str | None) -> str:
    """Normalize free-form sheet date text to a canonical key.

    Examples:
        "Thu 12/12/2024" -> "12/12"
        "03/07" -> "3/7"
        "" -> ""
    """
    if not raw:
        return ""

    tokens = raw.strip().split()
    if not tokens:
        return ""

    # Keep the last token so a weekday prefix ("Thu ") is dropped
    token = tokens[-1]
    if "/" not in token:
        return token

    parts = token.split("/")
    return f"{_strip_zeros(parts[0])}/{_strip_zeros(parts[1])}"


def key_of(calendar_date: date | str) -> str:
    """Build the canonical key for a calendar date.

    Args:
        calendar_date: A date/datetime, or an ISO "YYYY-MM-DD" string as
            produced by a date picker.

    Returns:
        Key in "<month>/<day>" form.
    """
    if isinstance(calendar_date, str):
        calendar_date = date.fromisoformat(calendar_date.strip()[:10])
    elif isinstance(calendar_date, datetime):
        calendar_date = calendar_date.date()
    return f"{calendar_date.month}/{calendar_date.day}"


def matches(row_date_text: str | None, date_key: str) -> bool:
    """Whether a stored row's date text refers to the given key."""
    return bool(date_key) and normalize(row_date_text) == date_key

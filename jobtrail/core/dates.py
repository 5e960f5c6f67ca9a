"""Calendar-date handling for stage dates.

Stage dates travel as plain ``YYYY-MM-DD`` strings. They are stored as the
instant 12:00 UTC on that day so that a reader in any timezone between
UTC-12 and UTC+11 still lands on the same calendar day. Reading back always
uses UTC components, never local-time conversion.
"""

from datetime import UTC, date, datetime, time

_NOON_UTC = time(12, 0, tzinfo=UTC)

_MONTH_ABBREVIATIONS = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes, convert aware ones to UTC.

    Some drivers (SQLite) hand back naive datetimes even for
    ``DateTime(timezone=True)`` columns; those values were written as UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def to_noon_utc(value: date) -> datetime:
    """Return the instant representing noon UTC on ``value``'s calendar day."""
    if isinstance(value, datetime):
        value = ensure_utc(value).date()
    return datetime.combine(value, _NOON_UTC)


def parse_date_only(value: str | date | None) -> datetime | None:
    """Normalize a wire date to noon UTC.

    Accepts ``YYYY-MM-DD`` strings (a trailing time component such as
    ``2024-03-15T00:00:00.000Z`` is ignored), ``date`` and ``datetime``
    objects. Empty or malformed strings yield None, which callers treat as
    "unset".

    Args:
        value: Incoming date value.

    Returns:
        Timezone-aware datetime at 12:00 UTC, or None.
    """
    if value is None:
        return None
    if isinstance(value, date):
        return to_noon_utc(value)

    text = value.strip()
    if not text:
        return None
    try:
        parsed = date.fromisoformat(text[:10])
    except ValueError:
        return None
    return to_noon_utc(parsed)


def to_date_string(value: datetime | None) -> str | None:
    """Render a stored stage date as ``YYYY-MM-DD`` using UTC components."""
    if value is None:
        return None
    return ensure_utc(value).date().isoformat()


def format_display_date(value: datetime | str | None) -> str:
    """Format a stage date for display, e.g. ``"Mar 15, 2024"`` or ``"Mar 5, 2024"``.

    Strings are parsed with ``parse_date_only`` first. Returns an empty
    string for missing or unparseable values.
    """
    if isinstance(value, str):
        value = parse_date_only(value)
    if value is None:
        return ""
    day = ensure_utc(value)
    return f"{_MONTH_ABBREVIATIONS[day.month - 1]} {day.day}, {day.year}"


def utc_today() -> date:
    """Current calendar day in UTC."""
    return datetime.now(UTC).date()

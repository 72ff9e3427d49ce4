"""Shared date/time parsing utilities for upstream clients.

ESPN, Ticketmaster and Google Calendar each report times a little
differently; everything is normalised to UTC-aware datetimes here.
"""

from datetime import date, datetime, timezone


def parse_iso_datetime(value) -> datetime | None:
    """Parse an ISO 8601 string (or date/datetime object) to a UTC-aware datetime.

    Handles the formats produced by each upstream:
    - Z suffix with minutes only (ESPN: "2024-06-28T23:10Z")
    - Z suffix with seconds (Ticketmaster: "2024-06-29T02:00:00Z")
    - Standard ISO with colon offset (Google: "2024-06-28T18:00:00-07:00")
    - Date-only strings (Ticketmaster localDate, Google all-day events)
    - datetime/date objects passed through with UTC normalisation

    Args:
        value: A string, date, datetime, or None.

    Returns:
        A timezone-aware UTC datetime, or None if the value cannot be parsed.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)

    value_str = str(value).strip()

    if value_str.endswith("Z"):
        value_str = value_str[:-1] + "+00:00"

    # "+0000" no-colon offset
    if (
        len(value_str) >= 5
        and value_str[-5] in ("+", "-")
        and value_str[-4:].isdigit()
        and "T" in value_str
    ):
        value_str = value_str[:-2] + ":" + value_str[-2:]

    try:
        dt = datetime.fromisoformat(value_str)
        return ensure_utc(dt).astimezone(timezone.utc)
    except (ValueError, TypeError):
        pass

    try:
        d = date.fromisoformat(str(value).strip())
        return datetime(d.year, d.month, d.day, tzinfo=timezone.utc)
    except (ValueError, TypeError):
        return None


def ensure_utc(dt: datetime) -> datetime:
    """Ensure a datetime is timezone-aware (UTC).

    If the datetime is naive, attach UTC; otherwise return as-is.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def to_epoch_millis(dt: datetime) -> int:
    return int(ensure_utc(dt).timestamp() * 1000)


def from_epoch_millis(value) -> datetime | None:
    """Parse an epoch-millisecond timestamp to a UTC-aware datetime."""
    if value is None:
        return None
    try:
        return datetime.fromtimestamp(int(value) / 1000, tz=timezone.utc)
    except (ValueError, TypeError, OSError, OverflowError):
        return None


def format_espn_date(d: date) -> str:
    """Format a date the way ESPN's ``dates`` parameter expects (YYYYMMDD)."""
    return d.strftime("%Y%m%d")

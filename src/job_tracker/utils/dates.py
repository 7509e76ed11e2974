"""Locale-independent date rendering shared by exports and analytics."""

from datetime import UTC, date, datetime

_MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def format_date(value: date | datetime | None) -> str:
    """Human-readable date, e.g. ``Jan 5, 2024``. Empty string for ``None``."""
    if value is None:
        return ""
    return f"{_MONTH_ABBR[value.month - 1]} {value.day}, {value.year}"


def month_bucket(value: date) -> str:
    """Month label used as analytics key, e.g. ``Jan 2024``."""
    return f"{_MONTH_ABBR[value.month - 1]} {value.year:04d}"


def to_utc(value: datetime) -> datetime:
    # naive timestamps come from the store and are always UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)

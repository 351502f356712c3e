"""
Time utility functions.

Datetimes are timezone-aware UTC in Python. ``UTCDateTime`` keeps them that
way through the database: SQLite stores the UTC wall time and drops the
offset, so it is restored on load.
"""

from datetime import datetime, date, timezone

from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """Normalize a datetime to aware UTC; naive input is assumed UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def month_key(d: date) -> str:
    """Calendar month bucket, e.g. '2024-06'."""
    return f"{d.year:04d}-{d.month:02d}"


class UTCDateTime(TypeDecorator):
    """Timestamp column that always binds and loads aware UTC datetimes."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return to_utc(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return to_utc(value)

"""
Time helpers.

All timestamps are stored as naive UTC so comparisons behave the same on
PostgreSQL and SQLite.
"""

from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def isoformat(value: datetime) -> str:
    """Render a stored naive-UTC timestamp as ISO 8601 with a Z suffix."""
    return value.isoformat(timespec="milliseconds") + "Z"

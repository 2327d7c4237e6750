"""
Datetime helpers.

All timestamps are stored as naive UTC (TIMESTAMP WITHOUT TIME ZONE).
"""

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Current UTC time as naive datetime."""
    return datetime.now(UTC).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """
    Normalize datetime to naive UTC.

    Aware datetimes are converted to UTC, naive ones are assumed UTC.
    """
    if value.tzinfo is not None:
        return value.astimezone(UTC).replace(tzinfo=None)
    return value

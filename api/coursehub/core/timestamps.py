"""UTC timestamps.

Cassandra hands back naive datetimes for TIMESTAMP columns; everything in
the application is timezone-aware UTC.
"""

from datetime import UTC, datetime


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to a naive datetime; aware values and None pass through."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value

"""UTC datetime helpers. All persisted datetimes are timezone-aware UTC."""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return the current UTC datetime with timezone info."""
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Normalize a datetime to aware UTC; naive values are assumed to be UTC.

    SQLite returns naive datetimes even for timezone-aware columns, so
    repository code calls this before comparing stored timestamps.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)

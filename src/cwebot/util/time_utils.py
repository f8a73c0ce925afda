from datetime import datetime, timezone


def utcnow() -> datetime:
    """Timezone-aware current time in UTC; the default clock everywhere."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Return ``value`` in UTC, treating naive datetimes as already UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_db_time(value: datetime) -> str:
    """Serialise a datetime for storage.

    Always UTC with a fixed microsecond field so stored strings sort in
    chronological order.
    """
    return ensure_utc(value).isoformat(timespec="microseconds")


def from_db_time(value: str) -> datetime:
    """Inverse of :func:`to_db_time`."""
    return ensure_utc(datetime.fromisoformat(value))


def humanize_timestamp(value: datetime) -> str:
    """Return a human-readable timestamp (YYYY-MM-DD HH:MM:SS) in UTC.

    Args:
        value: datetime object to format.

    Returns:
        Human-readable UTC timestamp string.
    """
    return ensure_utc(value).strftime("%Y-%m-%d %H:%M:%S UTC")

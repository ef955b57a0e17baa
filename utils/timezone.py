"""UTC-everywhere time handling. Token claims carry epoch seconds."""

from datetime import datetime, timezone


def now_utc() -> datetime:
    """
    Current time in UTC.

    Use this instead of datetime.now() everywhere.
    """
    return datetime.now(timezone.utc)


def to_epoch(dt: datetime) -> int:
    """
    Convert an aware datetime to whole epoch seconds (JWT NumericDate).

    Raises ValueError if datetime is naive (no timezone).
    """
    if dt.tzinfo is None:
        raise ValueError(
            "Cannot convert naive datetime to epoch. Datetime must be timezone-aware."
        )
    return int(dt.timestamp())

from datetime import datetime, timezone
from typing import Optional, Union


def parse_iso_date(date_str: str) -> Optional[datetime]:
    """
    Parses an ISO 8601 timestamp as written by the counter collector
    (e.g. '2024-05-01T10:00:00Z'). Returns None if parsing fails.
    """
    if not date_str:
        return None

    try:
        # Handle Z suffix for UTC
        if date_str.endswith("Z"):
            date_str = date_str[:-1] + "+00:00"
        return datetime.fromisoformat(date_str)
    except ValueError:
        return None


def ensure_utc(dt: Union[datetime, str, int, float]) -> datetime:
    """
    Ensures a sample timestamp is a timezone-aware datetime in UTC.
    Strings are parsed as ISO 8601, numbers as epoch seconds, and naive
    datetimes are assumed to be UTC.
    """
    if isinstance(dt, str):
        parsed = parse_iso_date(dt)
        if not parsed:
            raise ValueError(f"Invalid date string: {dt}")
        dt = parsed
    elif isinstance(dt, (int, float)) and not isinstance(dt, bool):
        return datetime.fromtimestamp(dt, tz=timezone.utc)
    elif not isinstance(dt, datetime):
        raise ValueError(f"Unsupported timestamp value: {dt!r}")

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_iso_z(dt: datetime) -> str:
    """
    Converts a datetime to the ISO 8601 form used in health records, with a 'Z' suffix.
    """
    return ensure_utc(dt).isoformat().replace("+00:00", "Z")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)

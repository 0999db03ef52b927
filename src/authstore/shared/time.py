"""Time utilities."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(tz=timezone.utc)


def ensure_tz_aware(dt: datetime) -> datetime:
    """Ensure datetime is timezone-aware (UTC if naive)."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def ensure_tz_aware_or_none(dt: datetime | None) -> datetime | None:
    return ensure_tz_aware(dt) if dt is not None else None


def to_utc(dt: datetime) -> datetime:
    """Convert to UTC, treating naive datetimes as UTC already."""
    return ensure_tz_aware(dt).astimezone(timezone.utc)

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value):
    """Treat naive datetimes (SQLite hands these back) as UTC."""
    if value is None:
        return None
    if not isinstance(value, datetime):
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def days_between(earlier, later) -> float:
    earlier = ensure_utc(earlier)
    later = ensure_utc(later)
    if earlier is None or later is None:
        return 0.0
    return (later - earlier).total_seconds() / 86400


def ensure_aware(value):
    """Keep an aware datetime's own zone; naive values are taken as UTC."""
    if not isinstance(value, datetime):
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def zoned_now(timezone_mode: str = "local") -> datetime:
    if timezone_mode.lower() == "utc":
        return utc_now()
    return datetime.now().astimezone()

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Timezone-aware UTC timestamp used for every stored time."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    # SQLite hands stored times back without an offset; they were written as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value

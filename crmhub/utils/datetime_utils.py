from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (as SQLite returns them) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def reference_date(tz_name: str, now: Optional[datetime] = None) -> date:
    """Calendar date of ``now`` in the reference timezone."""
    now = as_utc(now or utcnow())
    return now.astimezone(ZoneInfo(tz_name)).date()

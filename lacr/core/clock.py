"""
UTC helpers.

SQLite hands DateTime(timezone=True) columns back as naive datetimes, so
anything read from the database goes through as_utc before it is compared
with an aware "now".
"""

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def epoch_ms(value: Optional[datetime] = None) -> int:
    return int((value or utcnow()).timestamp() * 1000)

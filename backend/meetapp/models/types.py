"""
Meetapp Backend: Timestamp Column Type and Helpers
===================================================

What:  A DateTime column type that always hands back timezone-aware UTC values.
How:   Values are converted to UTC and stored naive; on load the UTC tzinfo is
       re-attached. Naive input is taken to already be UTC.
Why:   PostgreSQL `timestamptz` returns aware values while SQLite returns
       naive ones; meetup comparisons against `utc_now()` must behave the
       same on both.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Normalize a datetime to aware UTC (naive values are assumed UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class UTCDateTime(TypeDecorator):
    """DateTime stored as naive UTC, loaded as aware UTC."""

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        return as_utc(value).replace(tzinfo=None)

    def process_result_value(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        return as_utc(value)

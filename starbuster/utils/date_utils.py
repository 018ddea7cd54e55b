"""Date and time utilities for StarBuster."""

import datetime
import math
from typing import Optional, Union

from dateutil.parser import parse as parse_date

SECONDS_PER_DAY = 24 * 60 * 60

DateLike = Union[str, datetime.datetime, datetime.date]


def make_naive_datetime(dt: Optional[datetime.datetime]) -> Optional[datetime.datetime]:
    """Convert a datetime to naive UTC (aware values are shifted to UTC first)."""
    if dt is None:
        return None
    if dt.tzinfo is not None:
        return dt.astimezone(datetime.timezone.utc).replace(tzinfo=None)
    return dt


def to_naive_datetime(value: DateLike) -> datetime.datetime:
    """Parse an ISO string, date or datetime into a naive UTC datetime."""
    if isinstance(value, datetime.datetime):
        return make_naive_datetime(value)
    if isinstance(value, datetime.date):
        return datetime.datetime.combine(value, datetime.time.min)
    return make_naive_datetime(parse_date(value))


def utc_now() -> datetime.datetime:
    return make_naive_datetime(datetime.datetime.now(datetime.timezone.utc))


def days_old(created_at: DateLike, now: DateLike) -> int:
    """Whole days elapsed between ``created_at`` and ``now`` (floored)."""
    elapsed = to_naive_datetime(now) - to_naive_datetime(created_at)
    return math.floor(elapsed.total_seconds() / SECONDS_PER_DAY)

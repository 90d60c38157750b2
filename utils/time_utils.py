"""
UTC time helpers. All timestamps are stored and compared as naive UTC.
"""
from datetime import datetime, timedelta, timezone

ONE_DAY = timedelta(days=1)


def utc_now() -> datetime:
    """Current time as a naive UTC datetime"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(value: datetime) -> datetime:
    """Normalize an aware datetime to naive UTC; naive values are assumed UTC already"""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def start_of_utc_day(value: datetime) -> datetime:
    return as_naive_utc(value).replace(hour=0, minute=0, second=0, microsecond=0)


def whole_days(delta: timedelta) -> int:
    """Floor of a timedelta in days (negative deltas round down)"""
    return delta // ONE_DAY

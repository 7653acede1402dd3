"""UTC calendar helpers

Every calendar date in the system is a UTC date, so the weekday of a date never
depends on the server's local timezone.
"""

from datetime import date, datetime, timedelta, timezone


def today_utc() -> date:
    return datetime.now(timezone.utc).date()


def add_days(day: date, days: int) -> date:
    return day + timedelta(days=days)


def add_days_clamped(day: date, days: int) -> date:
    """add_days, but stops at date.min/date.max instead of overflowing"""
    try:
        return add_days(day, days)
    except OverflowError:
        return date.max if days > 0 else date.min


def date_range(start: date, end: date) -> list[date]:
    """Every date from start to end, both inclusive"""
    return [start + timedelta(days=offset) for offset in range((end - start).days + 1)]


def default_is_open(day: date) -> bool:
    """Default weekly rule: Monday-Friday open, Saturday-Sunday closed"""
    return day.weekday() < 5


def is_in_past(day: date, today: date) -> bool:
    return day < today


def to_utc_naive(value: datetime) -> datetime:
    """Normalize an aware or naive (assumed UTC) datetime for storage"""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def utcnow_naive() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)

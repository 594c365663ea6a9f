from datetime import date, datetime, time, timezone, timedelta
from zoneinfo import ZoneInfo
from typing import Optional, Union


def get_zone(name: Optional[str]) -> ZoneInfo:
    """Resolve an IANA timezone name, UTC when none is given."""
    return ZoneInfo(name or "UTC")


def get_local_now(tz: ZoneInfo) -> datetime:
    """Get current datetime in the given local timezone."""
    return datetime.now(tz)


def as_utc_instant(value: Union[str, date, datetime]) -> datetime:
    """Normalise a stored or submitted date into an aware UTC datetime.

    A calendar date (or ``YYYY-MM-DD`` string) becomes UTC midnight of that
    day. Naive datetimes are assumed to be UTC.
    """
    if isinstance(value, str):
        value = date.fromisoformat(value) if len(value) == 10 else datetime.fromisoformat(value)
    if not isinstance(value, datetime):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if value.tzinfo is None:  # if it's naive, assume it's UTC
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_local(dt: datetime, tz: ZoneInfo) -> datetime:
    """Convert an instant to local time."""
    return as_utc_instant(dt).astimezone(tz)


def start_of_day(dt: datetime, tz: ZoneInfo) -> datetime:
    """Local midnight of the day containing dt."""
    local = to_local(dt, tz)
    return datetime.combine(local.date(), time.min, tzinfo=tz)


def local_today(now: datetime, tz: ZoneInfo) -> date:
    return to_local(now, tz).date()


def entry_day(value: Union[str, date, datetime]) -> date:
    """Calendar day an entry applies to.

    Entry dates are stored as UTC midnight of the chosen day, so the day is
    read back in UTC and never shifted into the local zone.
    """
    return as_utc_instant(value).date()


def monday_of(day: date) -> date:
    return day - timedelta(days=day.weekday())


def is_same_day(entry_date: datetime, now: datetime, tz: ZoneInfo) -> bool:
    """Entry falls on the local calendar day of now."""
    return entry_day(entry_date) == local_today(now, tz)


def is_same_week(entry_date: datetime, now: datetime, tz: ZoneInfo) -> bool:
    """Entry falls in the Monday-start local week of now."""
    return monday_of(entry_day(entry_date)) == monday_of(local_today(now, tz))


def utc_date_iso(dt: datetime) -> str:
    """ISO calendar date of the UTC-normalised instant."""
    return entry_day(dt).isoformat()

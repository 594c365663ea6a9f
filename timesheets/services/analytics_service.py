from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional, Tuple, Dict
from zoneinfo import ZoneInfo
from dataclasses import dataclass
from timesheets.exceptions import InvalidInputError
from timesheets.models.schemas import TimeEntry, MANUAL_PROJECT
from timesheets.utils.rounding import round_hours
from timesheets.utils.timezone import (
    as_utc_instant, entry_day, start_of_day, is_same_day, is_same_week, utc_date_iso
)
import math

CSV_HEADER = "userName,projectName,task,hours,date"
CSV_MEDIA_TYPE = "text/csv"

UTC = ZoneInfo("UTC")


@dataclass(frozen=True)
class Summary:
    today_total: float
    week_total: float


@dataclass(frozen=True)
class CsvExport:
    filename: str
    content: str
    media_type: str = CSV_MEDIA_TYPE


def coerce_hours(value) -> float:
    """Hours as a number; absent or non-numeric counts as 0."""
    if value is None:
        return 0.0
    try:
        hours = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(hours):
        return 0.0
    return hours


def _now(now: Optional[datetime]) -> datetime:
    return datetime.now(timezone.utc) if now is None else as_utc_instant(now)


def window_cutoff(days: int, now: Optional[datetime] = None, tz: ZoneInfo = UTC) -> datetime:
    """Local start of today minus (days - 1) days."""
    if not isinstance(days, int) or isinstance(days, bool) or days < 1:
        raise InvalidInputError("days", "window length must be a positive whole number of days")
    return start_of_day(_now(now), tz) - timedelta(days=days - 1)


def filter_window(
    entries: Iterable[TimeEntry],
    days: int,
    now: Optional[datetime] = None,
    tz: ZoneInfo = UTC
) -> List[TimeEntry]:
    """Entries dated on or after the cutoff day. Future dates are kept."""
    first_day = window_cutoff(days, now, tz).date()
    return [e for e in entries if entry_day(e.date) >= first_day]


def grouping_key(entry: TimeEntry) -> str:
    return entry.project_name or entry.project_id or MANUAL_PROJECT


def aggregate_by_project(
    entries: Iterable[TimeEntry],
    days: int,
    now: Optional[datetime] = None,
    tz: ZoneInfo = UTC
) -> List[Tuple[str, float]]:
    """
    Sum hours per grouping key over the trailing window of ``days`` days.

    One pair per key present in the window; keys with no entries in range
    do not appear.
    """
    totals: Dict[str, float] = {}
    for entry in filter_window(entries, days, now, tz):
        key = grouping_key(entry)
        totals[key] = totals.get(key, 0.0) + coerce_hours(entry.hours)
    return list(totals.items())


def compute_summary(
    entries: Iterable[TimeEntry],
    user_id: str,
    now: Optional[datetime] = None,
    tz: ZoneInfo = UTC
) -> Summary:
    """Today's and this week's (Monday start) totals for one user."""
    now = _now(now)
    today = week = 0.0
    for entry in entries:
        if entry.user_id != user_id:
            continue
        hours = coerce_hours(entry.hours)
        if is_same_day(entry.date, now, tz):
            today += hours
        if is_same_week(entry.date, now, tz):
            week += hours
    return Summary(today_total=round_hours(today), week_total=round_hours(week))


def _quote(value) -> str:
    if value is None:
        value = ""
    return '"' + str(value).replace('"', '""') + '"'


def _format_number(value) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return repr(value) if isinstance(value, float) else str(value)


def csv_row(entry: TimeEntry) -> str:
    return ",".join([
        _quote(entry.user_name),
        _quote(entry.project_name),
        _quote(entry.task),
        _format_number(entry.hours),
        utc_date_iso(entry.date),
    ])


def export_csv(entries: Iterable[TimeEntry]) -> str:
    """Header plus one row per entry, joined by newlines (no trailing newline)."""
    return "\n".join([CSV_HEADER] + [csv_row(e) for e in entries])


def export_filename(days: int) -> str:
    return f"timesheet_export_{days}d.csv"


def build_export(
    entries: Iterable[TimeEntry],
    days: int,
    now: Optional[datetime] = None,
    tz: ZoneInfo = UTC
) -> CsvExport:
    """Window the entries with the aggregator's cutoff and serialise them."""
    filtered = filter_window(entries, days, now, tz)
    return CsvExport(filename=export_filename(days), content=export_csv(filtered))

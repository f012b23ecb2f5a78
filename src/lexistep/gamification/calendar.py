"""Calendar-day and week boundary utilities.

All "day" notions are wall-clock days in the configured calendar time zone.
Boundaries are returned as timezone-aware UTC datetimes so they compare
consistently against stored entry timestamps.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from lexistep.config import get_settings


def calendar_zone() -> ZoneInfo:
    """Time zone used for day/week/month boundaries."""
    return ZoneInfo(get_settings().calendar_timezone)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def local_date(dt: datetime, tz: ZoneInfo | None = None) -> date:
    """Calendar date of ``dt`` in the calendar zone. Naive datetimes are taken as UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(tz or calendar_zone()).date()


def start_of_day(d: date, tz: ZoneInfo | None = None) -> datetime:
    """Local midnight opening ``d``, expressed in UTC."""
    return datetime.combine(d, time.min, tzinfo=tz or calendar_zone()).astimezone(timezone.utc)


def end_of_day(d: date, tz: ZoneInfo | None = None) -> datetime:
    """Last representable instant of ``d``, expressed in UTC."""
    return datetime.combine(d, time.max, tzinfo=tz or calendar_zone()).astimezone(timezone.utc)


def get_monday(d: date) -> date:
    """Monday of the ISO week containing d."""
    return d - timedelta(days=d.weekday())


@dataclass(frozen=True)
class StatsWindows:
    """UTC boundaries for the today/week/month aggregation windows."""

    today_start: datetime
    today_end: datetime
    week_start: datetime
    month_start: datetime


def stats_windows(now: datetime | None = None, tz: ZoneInfo | None = None) -> StatsWindows:
    """Compute the aggregation windows containing ``now``.

    Weeks start on Monday 00:00; months on day 1 00:00.
    """
    tz = tz or calendar_zone()
    if now is None:
        now = utc_now()
    today = local_date(now, tz)
    return StatsWindows(
        today_start=start_of_day(today, tz),
        today_end=end_of_day(today, tz),
        week_start=start_of_day(get_monday(today), tz),
        month_start=start_of_day(today.replace(day=1), tz),
    )

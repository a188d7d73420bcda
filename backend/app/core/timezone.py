"""Local calendar helpers.

The business runs on a single local calendar (``settings.TIMEZONE``); a
"day" in the daybook is a local calendar day, not a UTC one.
"""
from __future__ import annotations

from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from backend.app.core.config import settings


def local_tz() -> ZoneInfo:
    return ZoneInfo(settings.TIMEZONE)


def local_now() -> datetime:
    return datetime.now(local_tz())


def local_today() -> date:
    return local_now().date()


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Half-open ``[start, end)`` datetimes covering *day* in local time."""
    tz = local_tz()
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return start, end


def local_date(moment: datetime) -> date:
    """Calendar date of *moment* in local time (naive values are taken as local)."""
    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone(local_tz()).date()

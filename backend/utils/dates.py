"""Calendar helpers shared by the schedule generators.

All month arithmetic works on ``date`` objects. Aware datetimes are first
converted to UTC so a caller's local timezone can never shift a date into
the previous or next month.
"""

import calendar
from datetime import date, datetime, timedelta, timezone


def to_utc_date(value: date | datetime) -> date:
    """Return the calendar date of ``value`` in UTC.

    Naive datetimes are taken as already being UTC.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    return value


def month_start(value: date | datetime) -> date:
    """First day of the (UTC) month containing ``value``."""
    d = to_utc_date(value)
    return date(d.year, d.month, 1)


def month_end(value: date | datetime) -> date:
    """Last day of the (UTC) month containing ``value``."""
    d = to_utc_date(value)
    return date(d.year, d.month, calendar.monthrange(d.year, d.month)[1])


def add_months(value: date, months: int) -> date:
    """Shift ``value`` by a number of months, clamping to the month's last day.

    Jan 31 + 1 month is Feb 28 (or 29), never Mar 3.
    """
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def iter_days_back(value: date, days: int):
    """Yield ``value`` and then each of the ``days`` preceding days."""
    for offset in range(days + 1):
        yield value - timedelta(days=offset)

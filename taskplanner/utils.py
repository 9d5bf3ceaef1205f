import calendar
from datetime import date, datetime, timedelta, timezone

from dateutil.relativedelta import relativedelta

# Weekday names indexed Sunday=0 .. Saturday=6, the numbering used by stored
# recurrence patterns.
WEEKDAY_NAMES = ['Sunday', 'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday']
WEEKDAY_SHORT_NAMES = ['Sun', 'Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat']

_ORDINAL_SUFFIXES = ['th', 'st', 'nd', 'rd']


def now_utc() -> datetime:
    """Return timezone-aware current UTC datetime."""
    return datetime.now(timezone.utc)


def is_leap_year(year: int) -> bool:
    return calendar.isleap(year)


def days_in_month(year: int, month: int) -> int:
    """Return the number of days in `month` (1-12) of `year`."""
    return calendar.monthrange(year, month)[1]


def js_weekday(d: date) -> int:
    """Return the weekday of `d` numbered Sunday=0 .. Saturday=6."""
    return d.isoweekday() % 7


def add_days(d: date, days: int) -> date:
    # timedelta arithmetic on aware datetimes keeps the wall-clock time
    return d + timedelta(days=days)


def add_months(d: date, months: int) -> date:
    """Add calendar months, clamping the day to the end of the target month.

    2024-01-31 + 1 month -> 2024-02-29, 2023-01-31 + 1 month -> 2023-02-28.
    """
    return d + relativedelta(months=months)


def add_years(d: date, years: int) -> date:
    """Add calendar years; Feb 29 lands on Feb 28 in non-leap years."""
    return d + relativedelta(years=years)


def ordinal_suffix(n: int) -> str:
    """Return the English ordinal suffix for n (1 -> 'st', 12 -> 'th', 22 -> 'nd')."""
    v = n % 100
    if 11 <= v <= 13:
        return 'th'
    r = v % 10
    if r < len(_ORDINAL_SUFFIXES):
        return _ORDINAL_SUFFIXES[r]
    return 'th'


def format_ordinal(n: int) -> str:
    return f'{n}{ordinal_suffix(n)}'

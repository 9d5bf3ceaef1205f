"""Human-readable phrases for recurrence patterns, and their inverse.

`parse_formatted_recurrence` only claims to read back what
`format_recurrence_pattern` writes; anything else returns None.
"""
import logging
import re
from typing import Optional

from .models import RecurrencePattern
from .recurrence import (
    IntervalRule,
    MonthDayRule,
    OrdinalWeekdayRule,
    PatternLike,
    WeekdayRule,
    WeekdaySetRule,
    create_daily_recurrence,
    create_month_day_recurrence,
    create_monthly_recurrence,
    create_ordinal_weekday_recurrence,
    create_weekday_recurrence,
    create_weekdays_recurrence,
    create_weekly_recurrence,
    create_yearly_recurrence,
    to_rule,
    validate_recurrence_pattern,
)
from .utils import WEEKDAY_NAMES, WEEKDAY_SHORT_NAMES, format_ordinal

logger = logging.getLogger(__name__)

INVALID_PATTERN_TEXT = 'Invalid recurrence pattern'

_SIMPLE_PHRASES = {
    'every day': create_daily_recurrence,
    'every week': create_weekly_recurrence,
    'every weekday': create_weekday_recurrence,
    'every month': create_monthly_recurrence,
    'every year': create_yearly_recurrence,
}

_UNIT_CONSTRUCTORS = {
    'day': create_daily_recurrence,
    'week': create_weekly_recurrence,
    'month': create_monthly_recurrence,
    'year': create_yearly_recurrence,
}

_WEEKDAY_RE = '(' + '|'.join(n.lower() for n in WEEKDAY_NAMES) + ')'
_INTERVAL_RE = re.compile(r'^every (\d+) (day|week|month|year)s?$')
_ORDINAL_RE = re.compile(
    r'^every (\d+)(?:st|nd|rd|th) ' + _WEEKDAY_RE + r' (?:of the month|every (\d+) months)$'
)
_MONTH_DAY_RE = re.compile(r'^every (\d+)(?:st|nd|rd|th) (?:of the month|every (\d+) months)$')
_LIST_SPLIT_RE = re.compile(r',?\s+and\s+|,\s*')


def _every(n: int, unit: str) -> str:
    if n == 1:
        return f'Every {unit}'
    return f'Every {n} {unit}s'


def _month_suffix(months: int) -> str:
    if months == 1:
        return 'of the month'
    return f'every {months} months'


def format_recurrence_pattern(pattern: PatternLike) -> str:
    """Describe a pattern, e.g. 'Every 2 weeks' or 'Every 3rd Monday of the month'."""
    if not validate_recurrence_pattern(pattern).valid:
        return INVALID_PATTERN_TEXT
    rule = to_rule(pattern)

    if isinstance(rule, IntervalRule):
        return _every(rule.interval, rule.unit)
    if isinstance(rule, WeekdayRule):
        return 'Every weekday'
    if isinstance(rule, WeekdaySetRule):
        if len(rule.weekdays) == 1:
            return f'Every {WEEKDAY_NAMES[rule.weekdays[0]]}'
        names = [WEEKDAY_SHORT_NAMES[d] for d in rule.weekdays]
        if len(names) == 2:
            return f'Every {names[0]} and {names[1]}'
        return f'Every {", ".join(names[:-1])}, and {names[-1]}'
    if isinstance(rule, OrdinalWeekdayRule):
        return f'Every {format_ordinal(rule.ordinal)} {WEEKDAY_NAMES[rule.weekday]} {_month_suffix(rule.months)}'
    if isinstance(rule, MonthDayRule):
        return f'Every {format_ordinal(rule.day)} {_month_suffix(rule.months)}'
    raise TypeError(f'unsupported recurrence rule: {rule!r}')


def _weekday_index(name: str) -> Optional[int]:
    for names in (WEEKDAY_SHORT_NAMES, WEEKDAY_NAMES):
        for idx, n in enumerate(names):
            if n.lower() == name:
                return idx
    return None


def parse_formatted_recurrence(text: str) -> Optional[RecurrencePattern]:
    """Turn a phrase written by format_recurrence_pattern back into a pattern.

    Matching is case-insensitive. Returns None for unrecognized text.
    """
    if not text:
        return None
    s = text.strip().lower()

    if s in _SIMPLE_PHRASES:
        return _SIMPLE_PHRASES[s]()

    m = _INTERVAL_RE.match(s)
    if m:
        n = int(m.group(1))
        return _UNIT_CONSTRUCTORS[m.group(2)](n) if n >= 1 else None

    m = _ORDINAL_RE.match(s)
    if m:
        ordinal = int(m.group(1))
        weekday = _weekday_index(m.group(2))
        months = int(m.group(3)) if m.group(3) else 1
        if 1 <= ordinal <= 5 and months >= 1:
            return create_ordinal_weekday_recurrence(ordinal, weekday, months)
        return None

    m = _MONTH_DAY_RE.match(s)
    if m:
        day = int(m.group(1))
        months = int(m.group(2)) if m.group(2) else 1
        if 1 <= day <= 31 and months >= 1:
            return create_month_day_recurrence(day, months)
        return None

    if s.startswith('every '):
        parts = [p.strip() for p in _LIST_SPLIT_RE.split(s[len('every '):])]
        weekdays = [_weekday_index(p) for p in parts]
        if parts and None not in weekdays:
            return create_weekdays_recurrence(weekdays)

    logger.debug('unrecognized recurrence phrase: %r', text)
    return None

"""Recurrence patterns: validation, normalization and next-occurrence math.

A pattern is stored loosely (a `type` plus optional fields). Before any date
math it is validated and then reduced by `to_rule` to one of a closed set of
rule shapes, so the calculator and the formatter never have to guess which
optional field wins.
"""
from dataclasses import dataclass, replace
from datetime import date
import logging
from typing import Any, Iterator, Mapping, Optional, Union

from .models import RecurrencePattern
from .utils import add_days, add_months, add_years, days_in_month, js_weekday

logger = logging.getLogger(__name__)

VALID_RECURRENCE_TYPES = ['daily', 'weekly', 'weekday', 'monthly', 'yearly', 'custom']

PatternLike = Union[RecurrencePattern, Mapping[str, Any]]


class InvalidPatternError(ValueError):
    """Raised when a recurrence pattern fails validation."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__('Invalid recurrence pattern: ' + '; '.join(self.errors))


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    errors: list


# --- rule shapes -----------------------------------------------------------

@dataclass(frozen=True)
class IntervalRule:
    """Every `interval` days/weeks/months/years."""
    unit: str
    interval: int = 1


@dataclass(frozen=True)
class WeekdayRule:
    """Every Monday to Friday."""


@dataclass(frozen=True)
class WeekdaySetRule:
    """Every listed weekday; `weekdays` is sorted and deduplicated."""
    weekdays: tuple


@dataclass(frozen=True)
class OrdinalWeekdayRule:
    """The `ordinal`-th `weekday` of every `months`-th month."""
    ordinal: int
    weekday: int
    months: int = 1


@dataclass(frozen=True)
class MonthDayRule:
    """Day `day` of every `months`-th month, clamped to the month length."""
    day: int
    months: int = 1


RecurrenceRule = Union[IntervalRule, WeekdayRule, WeekdaySetRule, OrdinalWeekdayRule, MonthDayRule]

_TYPE_UNITS = {'daily': 'day', 'weekly': 'week', 'monthly': 'month', 'yearly': 'year'}


def _is_int(v) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


def as_pattern(pattern: PatternLike) -> RecurrencePattern:
    """Accept either a RecurrencePattern or its stored dict shape."""
    if isinstance(pattern, RecurrencePattern):
        return pattern
    return RecurrencePattern.from_dict(pattern)


def validate_recurrence_pattern(pattern: PatternLike) -> ValidationResult:
    """Check a pattern's type and fields, collecting every problem found.

    An unknown type short-circuits with a single error; otherwise all field
    checks run so callers can show the complete list.
    """
    p = as_pattern(pattern)
    errors: list[str] = []

    if p.type not in VALID_RECURRENCE_TYPES:
        errors.append(
            f'Invalid recurrence type: {p.type}. Must be one of: {", ".join(VALID_RECURRENCE_TYPES)}'
        )
        return ValidationResult(valid=False, errors=errors)

    if p.interval is not None:
        if not _is_int(p.interval) or p.interval < 1:
            errors.append('Interval must be a positive integer')

    if p.weekdays is not None:
        if not isinstance(p.weekdays, (list, tuple)):
            errors.append('Weekdays must be a list')
        else:
            for day in p.weekdays:
                if not _is_int(day) or day < 0 or day > 6:
                    errors.append(f'Invalid weekday: {day}. Must be 0-6 (Sunday-Saturday)')
            if len(p.weekdays) == 0:
                errors.append('Weekdays array cannot be empty when specified')

    if p.month_day is not None:
        if not _is_int(p.month_day) or p.month_day < 1 or p.month_day > 31:
            errors.append(f'Invalid month day: {p.month_day}. Must be 1-31')

    if p.ordinal is not None:
        if not _is_int(p.ordinal) or p.ordinal < 1 or p.ordinal > 5:
            errors.append(f'Invalid ordinal: {p.ordinal}. Must be 1-5')

    if p.ordinal_weekday is not None:
        if not _is_int(p.ordinal_weekday) or p.ordinal_weekday < 0 or p.ordinal_weekday > 6:
            errors.append(f'Invalid ordinal weekday: {p.ordinal_weekday}. Must be 0-6 (Sunday-Saturday)')

    if p.type == 'custom':
        has_custom_field = (
            (_is_int(p.interval) and p.interval > 1)
            or p.weekdays is not None
            or p.month_day is not None
            or (p.ordinal is not None and p.ordinal_weekday is not None)
        )
        if not has_custom_field:
            errors.append(
                'Custom recurrence must specify at least one of: interval > 1, weekdays, '
                'monthDay, or ordinal with ordinalWeekday'
            )

    if (p.ordinal is None) != (p.ordinal_weekday is None):
        errors.append('Ordinal and ordinalWeekday must be specified together')

    return ValidationResult(valid=not errors, errors=errors)


def parse_recurrence_pattern(pattern: PatternLike) -> RecurrencePattern:
    """Validate and return a normalized copy of `pattern`.

    Normalization: interval defaults to 1 for daily/weekly/monthly/yearly and
    is dropped for custom/weekday unless it is greater than 1; weekdays are
    deduplicated and sorted.

    Raises InvalidPatternError when validation fails.
    """
    p = as_pattern(pattern)
    result = validate_recurrence_pattern(p)
    if not result.valid:
        raise InvalidPatternError(result.errors)

    if p.interval is not None and p.interval != 1:
        interval = p.interval
    elif p.type not in ('custom', 'weekday'):
        interval = 1
    else:
        interval = None

    weekdays = tuple(sorted(set(p.weekdays))) if p.weekdays else None

    ordinal = ordinal_weekday = None
    if p.ordinal is not None and p.ordinal_weekday is not None:
        ordinal, ordinal_weekday = p.ordinal, p.ordinal_weekday

    return replace(
        p,
        interval=interval,
        weekdays=weekdays,
        ordinal=ordinal,
        ordinal_weekday=ordinal_weekday,
    )


def to_rule(pattern: PatternLike) -> RecurrenceRule:
    """Reduce a pattern to its rule shape.

    Custom patterns are resolved in a fixed priority order: weekdays, then
    the ordinal/ordinalWeekday pair, then monthDay, then a bare interval of
    days. Raises InvalidPatternError for invalid patterns.
    """
    p = parse_recurrence_pattern(pattern)
    interval = p.interval or 1

    if p.type == 'weekday':
        return WeekdayRule()
    if p.type in _TYPE_UNITS:
        return IntervalRule(unit=_TYPE_UNITS[p.type], interval=interval)

    # custom
    if p.weekdays:
        return WeekdaySetRule(weekdays=p.weekdays)
    if p.ordinal is not None and p.ordinal_weekday is not None:
        return OrdinalWeekdayRule(ordinal=p.ordinal, weekday=p.ordinal_weekday, months=interval)
    if p.month_day is not None:
        return MonthDayRule(day=p.month_day, months=interval)
    return IntervalRule(unit='day', interval=interval)


# --- next occurrence -------------------------------------------------------

def _next_weekday(current: date) -> date:
    d = add_days(current, 1)
    while js_weekday(d) in (0, 6):
        d = add_days(d, 1)
    return d


def _next_in_weekday_set(current: date, weekdays: tuple) -> date:
    today = js_weekday(current)
    for wd in weekdays:
        if wd > today:
            return add_days(current, wd - today)
    # wrap into the following week
    return add_days(current, 7 - today + weekdays[0])


def _nth_weekday_of_month(current: date, ordinal: int, weekday: int, months: int) -> date:
    first = add_months(current, months).replace(day=1)
    d = first
    count = 0
    last = None
    while d.month == first.month:
        if js_weekday(d) == weekday:
            count += 1
            last = d
            if count == ordinal:
                return d
        d = add_days(d, 1)
    # month has fewer than `ordinal` such weekdays: use the last one
    logger.debug('ordinal %s of weekday %s missing in %s-%02d; using %s',
                 ordinal, weekday, first.year, first.month, last)
    return last


def _month_day(current: date, day: int, months: int) -> date:
    target = add_months(current, months)
    return target.replace(day=min(day, days_in_month(target.year, target.month)))


def next_for_rule(current: date, rule: RecurrenceRule) -> date:
    """Apply an already-resolved rule to `current`."""
    if isinstance(rule, IntervalRule):
        if rule.unit == 'day':
            return add_days(current, rule.interval)
        if rule.unit == 'week':
            return add_days(current, 7 * rule.interval)
        if rule.unit == 'month':
            return add_months(current, rule.interval)
        if rule.unit == 'year':
            return add_years(current, rule.interval)
        raise ValueError(f'unknown interval unit: {rule.unit}')
    if isinstance(rule, WeekdayRule):
        return _next_weekday(current)
    if isinstance(rule, WeekdaySetRule):
        return _next_in_weekday_set(current, rule.weekdays)
    if isinstance(rule, OrdinalWeekdayRule):
        return _nth_weekday_of_month(current, rule.ordinal, rule.weekday, rule.months)
    if isinstance(rule, MonthDayRule):
        return _month_day(current, rule.day, rule.months)
    raise TypeError(f'unsupported recurrence rule: {rule!r}')


def calculate_next_occurrence(current: date, pattern: PatternLike) -> Optional[date]:
    """Return the date after `current` on which the task recurs.

    `current` may be a date or datetime; the result has the same type and
    keeps time of day and tzinfo. Returns None when the pattern is invalid.
    """
    p = as_pattern(pattern)
    result = validate_recurrence_pattern(p)
    if not result.valid:
        logger.debug('cannot recur, invalid pattern %r: %s', p, result.errors)
        return None
    return next_for_rule(current, to_rule(p))


def upcoming_occurrences(start: date, pattern: PatternLike, count: int) -> Iterator[date]:
    """Yield the next `count` occurrences after `start`.

    Yields nothing when the pattern is invalid.
    """
    if not validate_recurrence_pattern(pattern).valid:
        return
    rule = to_rule(pattern)
    d = start
    for _ in range(count):
        d = next_for_rule(d, rule)
        yield d


# --- constructors ----------------------------------------------------------

def create_daily_recurrence(interval: int = 1) -> RecurrencePattern:
    return RecurrencePattern(type='daily', interval=interval)


def create_weekly_recurrence(interval: int = 1) -> RecurrencePattern:
    return RecurrencePattern(type='weekly', interval=interval)


def create_weekday_recurrence() -> RecurrencePattern:
    return RecurrencePattern(type='weekday')


def create_monthly_recurrence(interval: int = 1) -> RecurrencePattern:
    return RecurrencePattern(type='monthly', interval=interval)


def create_yearly_recurrence(interval: int = 1) -> RecurrencePattern:
    return RecurrencePattern(type='yearly', interval=interval)


def create_weekdays_recurrence(weekdays) -> RecurrencePattern:
    """Every one of `weekdays` (0=Sunday .. 6=Saturday)."""
    return RecurrencePattern(type='custom', weekdays=tuple(sorted(set(weekdays))))


def create_ordinal_weekday_recurrence(ordinal: int, weekday: int, interval: int = 1) -> RecurrencePattern:
    """The `ordinal`-th `weekday` of every `interval`-th month (e.g. 3rd Monday)."""
    return RecurrencePattern(type='custom', ordinal=ordinal, ordinal_weekday=weekday, interval=interval)


def create_month_day_recurrence(month_day: int, interval: int = 1) -> RecurrencePattern:
    return RecurrencePattern(type='custom', month_day=month_day, interval=interval)

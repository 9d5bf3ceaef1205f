"""Pull task fields out of a free-text entry such as
'urgent Review PR in Work tomorrow at 3 PM'.

Each pass removes the text it recognised before the next pass runs, so a
signal is consumed exactly once wherever it appears in the input. What is
left over becomes the task name.
"""
from datetime import date, datetime, time
import logging
import re
from typing import Optional

import dateparser

from . import config
from .models import ParsedTaskInput
from .utils import WEEKDAY_NAMES, add_days, add_months, js_weekday
from .validation import format_minutes_to_time

logger = logging.getLogger(__name__)

# (keyword, priority) in declaration order. Matching tries the longest keyword
# first across all classes; equal lengths keep this order.
PRIORITY_KEYWORDS = [
    ('urgent', 'high'),
    ('asap', 'high'),
    ('critical', 'high'),
    ('high priority', 'high'),
    ('high-priority', 'high'),
    ('important', 'medium'),
    ('medium priority', 'medium'),
    ('medium-priority', 'medium'),
    ('low priority', 'low'),
    ('low-priority', 'low'),
    ('whenever', 'low'),
    ('someday', 'low'),
]

MONTHS_EN = [
    'January', 'February', 'March', 'April', 'May', 'June', 'July', 'August',
    'September', 'October', 'November', 'December',
]

NUMBER_WORDS = {
    'one': 1, 'two': 2, 'three': 3, 'four': 4, 'five': 5, 'six': 6,
    'seven': 7, 'eight': 8, 'nine': 9, 'ten': 10, 'eleven': 11, 'twelve': 12,
}

# Words that follow 'in' in date/time phrases and must not be read as list names.
_NOT_LIST_NAMES = {
    'a', 'an', 'the', 'few', 'couple', 'morning', 'afternoon', 'evening', 'time',
} | set(NUMBER_WORDS) | {m.lower() for m in MONTHS_EN}

_HASH_LIST_RE = re.compile(r'(?:^|(?<=\s))#([A-Za-z0-9][A-Za-z0-9-]*)')
_IN_LIST_RE = re.compile(r'\bin\s+([A-Za-z][A-Za-z0-9-]*)(?![\w-])', re.IGNORECASE)

_MONTH_RE = '(?:' + '|'.join(m[:3].lower() + '(?:' + m[3:].lower() + ')?' for m in MONTHS_EN) + r')\.?'
_WEEKDAY_RE = '(' + '|'.join(n.lower() for n in WEEKDAY_NAMES) + ')'
_DATE_PREFIX = r'(?:(?:on|by)\s+)?'
_COUNT_RE = r'(\d+|an?|' + '|'.join(NUMBER_WORDS) + ')'

# (pattern, kind) pairs for date phrases; see _resolve_date.
_DATE_PATTERNS = [
    (re.compile(r'\b' + _DATE_PREFIX + r'(?:the\s+)?day\s+after\s+tomorrow\b', re.I), 'day_after_tomorrow'),
    (re.compile(r'\b' + _DATE_PREFIX + r'(?:today)\b', re.I), 'today'),
    (re.compile(r'\btonight\b', re.I), 'tonight'),
    (re.compile(r'\b' + _DATE_PREFIX + r'(?:tomorrow|tmrw)\b', re.I), 'tomorrow'),
    (re.compile(r'\bnext\s+week\b', re.I), 'next_week'),
    (re.compile(r'\bnext\s+month\b', re.I), 'next_month'),
    (re.compile(r'\bin\s+' + _COUNT_RE + r'\s+(day|week|month)s?\b', re.I), 'in_n'),
    (re.compile(r'\b(?:next|this|on)\s+' + _WEEKDAY_RE + r'\b', re.I), 'weekday'),
    (re.compile(r'\b' + _WEEKDAY_RE + r'\b', re.I), 'weekday'),
    (re.compile(r'\b' + _DATE_PREFIX + r'(\d{4}-\d{1,2}-\d{1,2})\b', re.I), 'iso'),
    (re.compile(r'\b' + _DATE_PREFIX + r'(' + _MONTH_RE + r'\s+\d{1,2}(?:st|nd|rd|th)?(?:,?\s+\d{4})?)\b', re.I), 'calendar'),
    (re.compile(r'\b' + _DATE_PREFIX + r'(\d{1,2}(?:st|nd|rd|th)?\s+(?:of\s+)?' + _MONTH_RE + r'(?:,?\s+\d{4})?)\b', re.I), 'calendar'),
]

_TIME_12H_RE = re.compile(r'\b(?:at\s+)?(\d{1,2})(?::([0-5]\d))?\s*([ap])\.?m\b\.?', re.I)
_TIME_24H_RE = re.compile(r'\b(?:at\s+)?([01]?\d|2[0-3]):([0-5]\d)\b', re.I)
_TIME_NAMED_RE = re.compile(r'\b(?:at\s+)?(noon|midday|midnight)\b', re.I)
_TIME_BARE_AT_RE = re.compile(r'\bat\s+([01]?\d|2[0-3])\b', re.I)

# Time implied by 'tonight' when no explicit time is given.
TONIGHT_TIME = '20:00'


def _remove_span(text: str, start: int, end: int) -> str:
    return text[:start] + ' ' + text[end:]


def _keyword_regex(keyword: str) -> re.Pattern:
    body = r'\s+'.join(re.escape(w) for w in keyword.split())
    return re.compile(r'\b' + body + r'\b', re.IGNORECASE)


def extract_priority(text: str) -> tuple[Optional[str], str]:
    """Return (priority, text without the matched keyword)."""
    for keyword, priority in sorted(PRIORITY_KEYWORDS, key=lambda kp: len(kp[0]), reverse=True):
        rx = _keyword_regex(keyword)
        if rx.search(text):
            return priority, rx.sub(' ', text)
    return None, text


def extract_list_reference(text: str) -> tuple[Optional[str], str]:
    """Return (list name, text without the reference).

    '#Work' is preferred over 'in Work' when both appear.
    """
    m = _HASH_LIST_RE.search(text)
    if m:
        return m.group(1), _remove_span(text, m.start(), m.end())
    for m in _IN_LIST_RE.finditer(text):
        name = m.group(1)
        if name.lower() in _NOT_LIST_NAMES:
            continue
        return name, _remove_span(text, m.start(), m.end())
    return None, text


def _find_time(text: str) -> tuple[Optional[int], str, bool]:
    """Return (minutes after midnight, remaining text, whether am/pm or a name
    fixed the half of the day)."""
    m = _TIME_12H_RE.search(text)
    if m:
        hour = int(m.group(1))
        minute = int(m.group(2) or 0)
        if 1 <= hour <= 12:
            hour = hour % 12
            if m.group(3).lower() == 'p':
                hour += 12
            return hour * 60 + minute, _remove_span(text, m.start(), m.end()), True

    m = _TIME_24H_RE.search(text)
    if m:
        minutes = int(m.group(1)) * 60 + int(m.group(2))
        return minutes, _remove_span(text, m.start(), m.end()), False

    m = _TIME_NAMED_RE.search(text)
    if m:
        minutes = 0 if m.group(1).lower() == 'midnight' else 12 * 60
        return minutes, _remove_span(text, m.start(), m.end()), True

    m = _TIME_BARE_AT_RE.search(text)
    if m:
        return int(m.group(1)) * 60, _remove_span(text, m.start(), m.end()), False

    return None, text, False


def extract_time(text: str) -> tuple[Optional[str], str]:
    """Return ('HH:mm', text without the time phrase)."""
    minutes, rest, _ = _find_time(text)
    if minutes is None:
        return None, text
    return format_minutes_to_time(minutes), rest


def _next_weekday_after(reference: date, weekday: int) -> date:
    delta = (weekday - js_weekday(reference)) % 7
    return add_days(reference, delta or 7)


def _resolve_calendar_phrase(phrase: str, reference: date) -> Optional[date]:
    settings = {
        'RELATIVE_BASE': datetime.combine(reference, time()),
        'PREFER_DATES_FROM': 'future',
        'DATE_ORDER': config.DATE_ORDER,
        'REQUIRE_PARTS': ['day', 'month'],
    }
    try:
        dt = dateparser.parse(phrase, languages=['en'], settings=settings)
    except Exception:
        logger.exception('dateparser failed on %r', phrase)
        return None
    return dt.date() if dt is not None else None


def _resolve_date(kind: str, m: re.Match, reference: date) -> Optional[date]:
    if kind in ('today', 'tonight'):
        return reference
    if kind == 'tomorrow':
        return add_days(reference, 1)
    if kind == 'day_after_tomorrow':
        return add_days(reference, 2)
    if kind == 'next_week':
        return add_days(reference, 7)
    if kind == 'next_month':
        return add_months(reference, 1)
    if kind == 'in_n':
        raw = m.group(1).lower()
        n = int(raw) if raw.isdigit() else NUMBER_WORDS.get(raw, 1)
        unit = m.group(2).lower()
        if unit == 'day':
            return add_days(reference, n)
        if unit == 'week':
            return add_days(reference, 7 * n)
        return add_months(reference, n)
    if kind == 'weekday':
        return _next_weekday_after(reference, WEEKDAY_NAMES.index(m.group(1).capitalize()))
    if kind == 'iso':
        try:
            y, mo, d = (int(p) for p in m.group(1).split('-'))
            return date(y, mo, d)
        except ValueError:
            return None
    if kind == 'calendar':
        return _resolve_calendar_phrase(m.group(1), reference)
    return None


def extract_date(text: str, reference: date) -> tuple[Optional[date], Optional[str], str]:
    """Return (date, implied time, text without the date phrase).

    The earliest date phrase in the text wins; among phrases starting at the
    same position the longest wins.
    """
    candidates = []
    for rx, kind in _DATE_PATTERNS:
        m = rx.search(text)
        if m:
            candidates.append((m.start(), -(m.end() - m.start()), kind, m))
    for _, _, kind, m in sorted(candidates, key=lambda c: (c[0], c[1])):
        resolved = _resolve_date(kind, m, reference)
        if resolved is None:
            continue
        logger.debug('date phrase %r resolved to %s', m.group(0), resolved)
        implied_time = TONIGHT_TIME if kind == 'tonight' else None
        return resolved, implied_time, _remove_span(text, m.start(), m.end())
    return None, None, text


def clean_task_name(text: str) -> str:
    s = re.sub(r'\s+', ' ', text).strip()
    s = re.sub(r'^[\s,.:;\-–—]+', '', s)
    s = re.sub(r'[\s,.:;\-–—]+$', '', s)
    return s.strip()


def parse_task_input(text: str, reference_date: date) -> ParsedTaskInput:
    """Parse a free-text task entry relative to `reference_date`.

    Recognises a priority keyword, a list reference ('in Work' or '#Work'),
    a date and a time of day. The remaining text is the task name; when the
    signals consumed everything the name falls back to the input itself.
    """
    if not text or not text.strip():
        return ParsedTaskInput(name='')
    if isinstance(reference_date, datetime):
        reference_date = reference_date.date()

    original = text.strip()
    working = original

    priority, working = extract_priority(working)
    list_name, working = extract_list_reference(working)
    minutes, working, half_day_fixed = _find_time(working)
    found_date, implied_time, working = extract_date(working, reference_date)
    if minutes is None:
        time_of_day = implied_time
    else:
        # 'at 7 tonight' means 19:00
        if implied_time is not None and not half_day_fixed and 60 <= minutes < 12 * 60:
            minutes += 12 * 60
        time_of_day = format_minutes_to_time(minutes)

    name = clean_task_name(working) or original
    return ParsedTaskInput(
        name=name,
        date=found_date,
        time=time_of_day,
        priority=priority,
        list_name=list_name,
    )

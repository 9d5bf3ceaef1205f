"""Small field validators for task input: priorities and HH:mm time strings."""
import re
from typing import Optional

VALID_PRIORITIES = ['high', 'medium', 'low', 'none']

# Priority used when a task does not specify one.
DEFAULT_PRIORITY = 'none'

_TIME_RE = re.compile(r'^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$')


def is_non_empty_string(value) -> bool:
    return isinstance(value, str) and len(value.strip()) > 0


def is_valid_priority(value) -> bool:
    return isinstance(value, str) and value in VALID_PRIORITIES


def is_valid_time_format(value) -> bool:
    """Return True for 'H:mm' / 'HH:mm' between 00:00 and 23:59."""
    return isinstance(value, str) and _TIME_RE.match(value) is not None


def parse_time_to_minutes(value: str) -> Optional[int]:
    """'09:30' -> 570. Returns None for malformed input."""
    if not is_valid_time_format(value):
        return None
    hours, minutes = (int(p) for p in value.split(':'))
    return hours * 60 + minutes


def format_minutes_to_time(minutes: int) -> str:
    """570 -> '09:30'."""
    return f'{minutes // 60:02d}:{minutes % 60:02d}'

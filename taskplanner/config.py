"""Runtime configuration for the task planner.

Values are read from environment variables once at import time. Callers
read them as module attributes (``config.WORK_START_HOUR``) at call time,
so tests and embedding applications can patch them.
"""
import os


def _int_env(name: str, default: int) -> int:
    v = os.getenv(name)
    if not v:
        return default
    try:
        return int(v)
    except ValueError:
        return default


# Working hours used by the schedule suggester, local wall-clock hours.
WORK_START_HOUR = _int_env('WORK_START_HOUR', 9)
WORK_END_HOUR = _int_env('WORK_END_HOUR', 18)

# Granularity of candidate start times in minutes.
SLOT_DURATION_MINUTES = _int_env('SLOT_DURATION_MINUTES', 30)

# How many days after today the suggester looks at (today is always included).
SCHEDULE_DAYS_AHEAD = _int_env('SCHEDULE_DAYS_AHEAD', 7)

DEFAULT_SUGGESTION_COUNT = 5
MAX_SUGGESTION_COUNT = 20

# Date ordering preference handed to dateparser for numeric dates:
# 'DMY' (day-month-year) or 'MDY' (month-day-year).
DATE_ORDER = os.getenv('DATE_ORDER', 'DMY').upper()

# Optional local overrides: define variables in taskplanner/local_config.py
# to change the defaults above without touching versioned config.
try:
    from .local_config import *  # type: ignore  # noqa: F401,F403
except ImportError:
    pass

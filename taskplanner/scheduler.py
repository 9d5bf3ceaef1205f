"""Suggest time slots for a task inside working hours over the coming week.

Candidates start on a fixed grid (config.SLOT_DURATION_MINUTES) between
config.WORK_START_HOUR and config.WORK_END_HOUR, must finish inside working
hours and must not overlap a committed period. Each candidate is scored
0-100 from the task's priority and deadline and how soon it starts.
"""
from datetime import datetime, time, timedelta
import logging
from typing import Any, Iterable, Iterator, Mapping, Optional, Union

from . import config
from .models import BusyPeriod, ScheduleRequest, ScheduleSuggestion, SchedulingTask
from .utils import add_days, now_utc

logger = logging.getLogger(__name__)

Slot = tuple[datetime, datetime]


def _align(dt: datetime, ref: datetime) -> datetime:
    """Make `dt` comparable with `ref` (both naive or both aware)."""
    if (dt.tzinfo is None) == (ref.tzinfo is None):
        return dt
    if dt.tzinfo is None:
        return dt.replace(tzinfo=ref.tzinfo)
    # aware value against a naive local clock
    return dt.astimezone().replace(tzinfo=None)


def _as_period(item: Union[BusyPeriod, tuple], now: datetime) -> BusyPeriod:
    if isinstance(item, BusyPeriod):
        start, end = item.start, item.end
    else:
        start, end = item
    return BusyPeriod(start=_align(start, now), end=_align(end, now))


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    return a_start < b_end and a_end > b_start


def candidate_slots(now: datetime, duration_minutes: int) -> Iterator[Slot]:
    """Yield working-hour slots of `duration_minutes` that start after `now`."""
    duration = timedelta(minutes=duration_minutes)
    step = timedelta(minutes=config.SLOT_DURATION_MINUTES)
    today = now.date()
    for offset in range(config.SCHEDULE_DAYS_AHEAD + 1):
        day = add_days(today, offset)
        day_start = datetime.combine(day, time(config.WORK_START_HOUR), tzinfo=now.tzinfo)
        day_end = datetime.combine(day, time(config.WORK_END_HOUR), tzinfo=now.tzinfo)
        start = day_start
        while start + duration <= day_end:
            if start > now:
                yield start, start + duration
            start += step


def score_slot(start: datetime, task: SchedulingTask, now: datetime) -> tuple[int, str]:
    """Return (score, reason) for a slot starting at `start`."""
    score = 50
    reasons: list[str] = []
    hours_from_now = (start - now).total_seconds() / 3600

    if task.priority == 'high':
        if hours_from_now < 24:
            score += 30
            reasons.append('Early slot for high priority task')
        elif hours_from_now < 48:
            score += 20
            reasons.append('Soon slot for high priority task')
    elif task.priority == 'medium':
        if hours_from_now < 48:
            score += 15
            reasons.append('Reasonable timing for medium priority')

    if task.deadline is not None:
        deadline = _align(task.deadline, now)
        hours_until_deadline = (deadline - start).total_seconds() / 3600
        duration_hours = (task.estimate or 60) / 60
        if 0 < hours_until_deadline <= duration_hours * 2:
            score += 25
            reasons.append('Close to deadline')
        elif 0 < hours_until_deadline <= 24:
            score += 20
            reasons.append('Within 24 hours of deadline')
        elif 0 < hours_until_deadline <= 48:
            score += 10
            reasons.append('Within 48 hours of deadline')
        elif hours_until_deadline < 0:
            score -= 20
            reasons.append('After deadline')

    if 9 <= start.hour < 12:
        score += 5
        reasons.append('Morning slot (peak focus time)')
    if start.hour >= 16:
        score -= 3

    days_from_now = hours_from_now / 24
    if days_from_now < 1:
        score += 5
        reasons.append('Available today')
    elif days_from_now < 2:
        score += 3
        reasons.append('Available tomorrow')

    score = max(0, min(100, score))
    return score, '; '.join(reasons) if reasons else 'Available time slot'


def suggest_time_slots(
    task: Union[SchedulingTask, Mapping[str, Any]],
    count: Optional[int] = None,
    *,
    now: Optional[datetime] = None,
    commitments: Iterable[Union[BusyPeriod, tuple]] = (),
) -> list[ScheduleSuggestion]:
    """Propose up to `count` non-overlapping slots for `task`, best first.

    `now` defaults to the current time as an aware datetime in the local
    zone; pass it explicitly for deterministic results. `commitments` are periods already taken. Ties in
    score go to the earlier slot. Raises ValueError when `count` is outside
    1..config.MAX_SUGGESTION_COUNT.
    """
    if count is None:
        count = config.DEFAULT_SUGGESTION_COUNT
    if not 1 <= count <= config.MAX_SUGGESTION_COUNT:
        raise ValueError(f'count must be between 1 and {config.MAX_SUGGESTION_COUNT}')
    if not isinstance(task, SchedulingTask):
        task = SchedulingTask.model_validate(task)
    if not task.estimate or task.estimate <= 0:
        return []
    if now is None:
        now = now_utc().astimezone()

    busy = [_as_period(c, now) for c in commitments]
    scored = []
    for start, end in candidate_slots(now, task.estimate):
        if any(overlaps(start, end, b.start, b.end) for b in busy):
            continue
        score, reason = score_slot(start, task, now)
        scored.append((score, start, end, reason))
    scored.sort(key=lambda s: (-s[0], s[1]))

    chosen: list[ScheduleSuggestion] = []
    for score, start, end, reason in scored:
        if len(chosen) >= count:
            break
        if any(overlaps(start, end, c.start_time, c.end_time) for c in chosen):
            continue
        chosen.append(ScheduleSuggestion(start_time=start, end_time=end, score=score, reason=reason))

    logger.debug('suggested %d of %d free slots for estimate=%s priority=%s',
                 len(chosen), len(scored), task.estimate, task.priority)
    return chosen


def suggest_for_request(
    request: ScheduleRequest,
    *,
    now: Optional[datetime] = None,
    commitments: Iterable[Union[BusyPeriod, tuple]] = (),
) -> list[ScheduleSuggestion]:
    """Run suggest_time_slots for an already validated ScheduleRequest."""
    return suggest_time_slots(request.to_task(), request.count, now=now, commitments=commitments)

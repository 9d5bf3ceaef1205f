from dataclasses import dataclass, field, asdict
from datetime import date as date_type, datetime as datetime_type
from typing import Any, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

Priority = Literal['high', 'medium', 'low', 'none']

# Stored (JSON) key -> attribute name for recurrence patterns.
_PATTERN_KEYS = {
    'type': 'type',
    'interval': 'interval',
    'weekdays': 'weekdays',
    'monthDay': 'month_day',
    'ordinal': 'ordinal',
    'ordinalWeekday': 'ordinal_weekday',
}


@dataclass(frozen=True)
class RecurrencePattern:
    """How a task repeats.

    Fields are not checked on construction: a pattern read from storage or a form may
    be invalid, and `recurrence.validate_recurrence_pattern` is what decides.
    Weekdays are numbered Sunday=0 .. Saturday=6.
    """
    type: str
    interval: Optional[int] = None
    weekdays: Optional[tuple] = None
    month_day: Optional[int] = None
    ordinal: Optional[int] = None
    ordinal_weekday: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'RecurrencePattern':
        """Build a pattern from its stored shape (camelCase keys).

        Snake-case keys are accepted as well. Unknown keys are ignored.
        """
        kwargs: dict = {}
        for key, value in data.items():
            attr = _PATTERN_KEYS.get(key)
            if attr is None and key in _PATTERN_KEYS.values():
                attr = key
            if attr is None or value is None:
                continue
            kwargs[attr] = value
        weekdays = kwargs.get('weekdays')
        if isinstance(weekdays, (list, set, frozenset)):
            kwargs['weekdays'] = tuple(weekdays)
        return cls(type=kwargs.pop('type', None), **kwargs)

    def to_dict(self) -> dict:
        """Return the stored shape, omitting unset fields."""
        out: dict = {}
        values = asdict(self)
        for key, attr in _PATTERN_KEYS.items():
            v = values.get(attr)
            if v is None:
                continue
            out[key] = list(v) if attr == 'weekdays' else v
        return out


class ParsedTaskInput(BaseModel):
    """Fields extracted from a free-text task entry."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = ''
    date: Optional[date_type] = None
    # 24-hour 'HH:mm'
    time: Optional[str] = None
    priority: Optional[Priority] = None
    list_name: Optional[str] = Field(default=None, alias='listName')


class SchedulingTask(BaseModel):
    """The parts of a task the schedule suggester looks at."""
    model_config = ConfigDict(frozen=True)

    # duration in minutes
    estimate: Optional[int] = None
    priority: Priority = 'none'
    deadline: Optional[datetime_type] = None


class ScheduleRequest(BaseModel):
    """Validated input of a scheduling-assist call."""
    estimate: int = Field(gt=0)
    priority: Priority = 'none'
    deadline: Optional[datetime_type] = None
    count: int = Field(default=5, ge=1, le=20)

    def to_task(self) -> SchedulingTask:
        return SchedulingTask(estimate=self.estimate, priority=self.priority, deadline=self.deadline)


class ScheduleSuggestion(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    start_time: datetime_type = Field(alias='startTime')
    end_time: datetime_type = Field(alias='endTime')
    score: int = Field(ge=0, le=100)
    reason: str


@dataclass(frozen=True)
class BusyPeriod:
    """An already-committed block of time."""
    start: datetime_type
    end: datetime_type
    label: str = field(default='', compare=False)

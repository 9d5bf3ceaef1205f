import pytest

from taskplanner.models import RecurrencePattern
from taskplanner.recurrence import (
    InvalidPatternError,
    parse_recurrence_pattern,
    validate_recurrence_pattern,
)


@pytest.mark.parametrize('rtype', ['daily', 'weekly', 'monthly', 'yearly'])
def test_standard_types_with_interval_one_are_valid(rtype):
    res = validate_recurrence_pattern({'type': rtype, 'interval': 1})
    assert res.valid
    assert res.errors == []


def test_weekday_type_needs_no_fields():
    assert validate_recurrence_pattern({'type': 'weekday'}).valid


def test_unknown_type_short_circuits():
    # interval is also bad, but only the type error is reported
    res = validate_recurrence_pattern({'type': 'hourly', 'interval': -3})
    assert not res.valid
    assert len(res.errors) == 1
    assert 'Invalid recurrence type: hourly' in res.errors[0]


def test_missing_type_is_invalid():
    assert not validate_recurrence_pattern({'interval': 2}).valid


@pytest.mark.parametrize('interval', [0, -1, -30, 1.5, True, '2'])
def test_non_positive_or_non_integer_interval_is_invalid(interval):
    res = validate_recurrence_pattern({'type': 'daily', 'interval': interval})
    assert not res.valid
    assert 'Interval must be a positive integer' in res.errors


@pytest.mark.parametrize('weekdays', [[], [7], [-1], [1, 9], [0, 2.5]])
def test_bad_weekdays_are_invalid(weekdays):
    res = validate_recurrence_pattern({'type': 'custom', 'weekdays': weekdays})
    assert not res.valid


def test_empty_weekdays_message():
    res = validate_recurrence_pattern({'type': 'custom', 'weekdays': []})
    assert res.errors == ['Weekdays array cannot be empty when specified']


@pytest.mark.parametrize('month_day', [0, 32, -5])
def test_month_day_out_of_range(month_day):
    res = validate_recurrence_pattern({'type': 'custom', 'monthDay': month_day})
    assert not res.valid
    assert any('Invalid month day' in e for e in res.errors)


def test_ordinal_without_weekday_is_invalid():
    res = validate_recurrence_pattern({'type': 'custom', 'ordinal': 2, 'interval': 2})
    assert not res.valid
    assert 'Ordinal and ordinalWeekday must be specified together' in res.errors


def test_ordinal_weekday_without_ordinal_is_invalid():
    res = validate_recurrence_pattern({'type': 'monthly', 'ordinalWeekday': 3})
    assert not res.valid
    assert res.errors == ['Ordinal and ordinalWeekday must be specified together']


def test_ordinal_range():
    res = validate_recurrence_pattern({'type': 'custom', 'ordinal': 6, 'ordinalWeekday': 1})
    assert not res.valid
    assert 'Invalid ordinal: 6. Must be 1-5' in res.errors


@pytest.mark.parametrize('data', [
    {'type': 'custom'},
    {'type': 'custom', 'interval': 1},
])
def test_custom_needs_a_distinguishing_field(data):
    res = validate_recurrence_pattern(data)
    assert not res.valid
    assert res.errors[-1].startswith('Custom recurrence must specify at least one of')


@pytest.mark.parametrize('data', [
    {'type': 'custom', 'interval': 3},
    {'type': 'custom', 'weekdays': [1, 3]},
    {'type': 'custom', 'monthDay': 15},
    {'type': 'custom', 'ordinal': 3, 'ordinalWeekday': 2},
])
def test_custom_valid_shapes(data):
    assert validate_recurrence_pattern(data).valid


def test_errors_accumulate_in_field_order():
    res = validate_recurrence_pattern({
        'type': 'custom',
        'interval': 0,
        'weekdays': [8],
        'monthDay': 40,
        'ordinal': 9,
    })
    assert not res.valid
    assert res.errors == [
        'Interval must be a positive integer',
        'Invalid weekday: 8. Must be 0-6 (Sunday-Saturday)',
        'Invalid month day: 40. Must be 1-31',
        'Invalid ordinal: 9. Must be 1-5',
        'Ordinal and ordinalWeekday must be specified together',
    ]


def test_pattern_object_and_dict_agree():
    obj = RecurrencePattern(type='custom', month_day=0)
    assert validate_recurrence_pattern(obj) == validate_recurrence_pattern({'type': 'custom', 'monthDay': 0})


def test_parse_raises_with_error_list():
    with pytest.raises(InvalidPatternError) as exc:
        parse_recurrence_pattern({'type': 'daily', 'interval': 0})
    assert exc.value.errors == ['Interval must be a positive integer']
    assert 'Interval must be a positive integer' in str(exc.value)
    assert isinstance(exc.value, ValueError)


def test_parse_defaults_interval_for_standard_types():
    p = parse_recurrence_pattern({'type': 'monthly'})
    assert p.interval == 1
    assert p.to_dict() == {'type': 'monthly', 'interval': 1}


def test_parse_drops_default_interval_for_custom_and_weekday():
    assert parse_recurrence_pattern({'type': 'weekday'}).interval is None
    assert parse_recurrence_pattern({'type': 'weekday', 'interval': 1}).interval is None
    p = parse_recurrence_pattern({'type': 'custom', 'monthDay': 5, 'interval': 1})
    assert p.interval is None
    assert p.month_day == 5


def test_parse_keeps_explicit_interval():
    p = parse_recurrence_pattern({'type': 'custom', 'monthDay': 5, 'interval': 3})
    assert p.interval == 3


def test_parse_sorts_and_dedupes_weekdays():
    original = {'type': 'custom', 'weekdays': [5, 1, 3, 1]}
    p = parse_recurrence_pattern(original)
    assert p.weekdays == (1, 3, 5)
    # input is left untouched
    assert original['weekdays'] == [5, 1, 3, 1]


def test_parse_returns_new_value():
    src = RecurrencePattern(type='daily')
    out = parse_recurrence_pattern(src)
    assert out is not src
    assert src.interval is None
    assert out.interval == 1


def test_from_dict_round_trip():
    data = {'type': 'custom', 'ordinal': 2, 'ordinalWeekday': 4, 'interval': 2}
    p = RecurrencePattern.from_dict(data)
    assert p.ordinal_weekday == 4
    assert p.to_dict() == data


def test_from_dict_accepts_snake_case_and_skips_unknown():
    p = RecurrencePattern.from_dict({'type': 'custom', 'month_day': 9, 'color': 'red'})
    assert p == RecurrencePattern(type='custom', month_day=9)

from datetime import date, datetime, time

import pytest

from backend.scheduling.errors import ValidationError
from backend.scheduling.queries import (
    AvailabilityCheckQuery,
    AvailableDatesQuery,
    AvailableDoctorsQuery,
    TimeSlotsQuery,
    build_query,
    parse_time_of_day,
)


@pytest.mark.parametrize(
    ('value', 'expected'),
    [
        ('08:00', time(8, 0)),
        ('8:05', time(8, 5)),
        (' 23:59 ', time(23, 59)),
        ('09:30:15', time(9, 30, 15)),
        (time(14, 0), time(14, 0)),
    ],
)
def test_parse_time_of_day_accepts_valid_values(value, expected: time) -> None:
    assert parse_time_of_day(value) == expected


@pytest.mark.parametrize('value', ['25:61', '24:00', '12:60', 'noon', '', '9', '09-30', 930, None])
def test_parse_time_of_day_rejects_invalid_values(value) -> None:
    with pytest.raises(ValueError):
        parse_time_of_day(value)


def test_build_query_returns_model() -> None:
    query = build_query(AvailableDoctorsQuery, tenant_id=1, day_of_week=3, time_of_day='10:15', on_date='2026-01-07')

    assert query.time_of_day == time(10, 15)
    assert query.on_date == date(2026, 1, 7)
    assert query.duration_minutes is None


def test_build_query_treats_blank_date_as_missing() -> None:
    query = build_query(AvailableDoctorsQuery, tenant_id=1, day_of_week=3, time_of_day='10:15', on_date='  ')

    assert query.on_date is None


@pytest.mark.parametrize(
    ('values', 'field'),
    [
        ({'day_of_week': 8}, 'day_of_week'),
        ({'day_of_week': 0}, 'day_of_week'),
        ({'time_of_day': '25:61'}, 'time_of_day'),
        ({'tenant_id': 0}, 'tenant_id'),
        ({'on_date': '2026-02-30'}, 'on_date'),
        ({'duration_minutes': 0}, 'duration_minutes'),
    ],
)
def test_build_query_raises_validation_error_for_doctor_search(values: dict, field: str) -> None:
    arguments = {'tenant_id': 1, 'day_of_week': 1, 'time_of_day': '09:00'}
    arguments.update(values)

    with pytest.raises(ValidationError) as exception_info:
        build_query(AvailableDoctorsQuery, **arguments)

    assert field in exception_info.value.message
    assert exception_info.value.errors[0]['loc'] == (field,)


def test_time_of_day_error_message_is_readable() -> None:
    with pytest.raises(ValidationError) as exception_info:
        build_query(AvailableDoctorsQuery, tenant_id=1, day_of_week=1, time_of_day='25:61')

    assert exception_info.value.message == 'time_of_day: Time of day is out of range.'


def test_available_dates_query_rejects_reversed_range() -> None:
    with pytest.raises(ValidationError) as exception_info:
        build_query(AvailableDatesQuery, tenant_id=1, from_date='2026-01-10', to_date='2026-01-05')

    assert exception_info.value.message == 'from_date must be on or before to_date.'


def test_available_dates_query_bounds_range_length() -> None:
    with pytest.raises(ValidationError):
        build_query(AvailableDatesQuery, tenant_id=1, from_date='2026-01-01', to_date='2026-01-08', max_range_days=7)

    query = build_query(AvailableDatesQuery, tenant_id=1, from_date='2026-01-01', to_date='2026-01-07', max_range_days=7)
    assert len(query.dates()) == 7


def test_available_dates_query_lists_inclusive_dates() -> None:
    query = build_query(AvailableDatesQuery, tenant_id=1, from_date=date(2026, 1, 30), to_date=date(2026, 2, 2))

    assert query.dates() == [date(2026, 1, 30), date(2026, 1, 31), date(2026, 2, 1), date(2026, 2, 2)]


def test_available_dates_query_rejects_malformed_date() -> None:
    with pytest.raises(ValidationError) as exception_info:
        build_query(AvailableDatesQuery, tenant_id=1, from_date='next monday', to_date='2026-01-05')

    assert 'from_date' in exception_info.value.message


def test_availability_check_query_requires_start_before_end() -> None:
    with pytest.raises(ValidationError) as exception_info:
        build_query(
            AvailabilityCheckQuery,
            doctor_id=1,
            start=datetime(2026, 1, 5, 10, 0),
            end=datetime(2026, 1, 5, 10, 0),
        )

    assert exception_info.value.message == 'start must be before end.'


def test_time_slots_query_defaults_duration() -> None:
    query = build_query(TimeSlotsQuery, doctor_id=4, slot_date='2026-01-05')

    assert query.slot_date == date(2026, 1, 5)
    assert query.duration_minutes is None

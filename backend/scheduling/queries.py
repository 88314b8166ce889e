import re
from datetime import date, datetime, time, timedelta
from typing import Any, TypeVar

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator, model_validator

from backend.scheduling.errors import ValidationError
from backend.scheduling.weekdays import MONDAY, SUNDAY

TIME_OF_DAY_PATTERN = re.compile(r'^(\d{1,2}):(\d{2})(?::(\d{2}))?$')

QueryT = TypeVar('QueryT', bound=BaseModel)


def parse_time_of_day(value: Any) -> time:
    if isinstance(value, time):
        return value

    if not isinstance(value, str):
        raise ValueError('Time of day must be a string in HH:mm format.')

    match = TIME_OF_DAY_PATTERN.match(value.strip())
    if not match:
        raise ValueError('Time of day must use HH:mm format.')

    hour, minute = int(match.group(1)), int(match.group(2))
    second = int(match.group(3) or 0)
    if hour > 23 or minute > 59 or second > 59:
        raise ValueError('Time of day is out of range.')

    return time(hour, minute, second)


def build_query(model: type[QueryT], **values: Any) -> QueryT:
    try:
        return model(**values)
    except PydanticValidationError as exc:
        errors = exc.errors(include_url=False)
        message = '; '.join(_describe(error) for error in errors)
        raise ValidationError(message, errors=errors) from exc


def _describe(error: dict) -> str:
    location = '.'.join(str(part) for part in error.get('loc', ()))
    detail = error.get('msg', 'Invalid value').removeprefix('Value error, ')
    return f'{location}: {detail}' if location else detail


class AvailabilityCheckQuery(BaseModel):
    doctor_id: int = Field(gt=0)
    start: datetime
    end: datetime
    exclude_appointment_id: int | None = None

    @model_validator(mode='after')
    def validate_interval(self) -> 'AvailabilityCheckQuery':
        if self.start >= self.end:
            raise ValueError('start must be before end.')
        return self


class TimeSlotsQuery(BaseModel):
    doctor_id: int = Field(gt=0)
    slot_date: date
    duration_minutes: int | None = Field(default=None, gt=0, le=24 * 60)


class AvailableDoctorsQuery(BaseModel):
    tenant_id: int = Field(gt=0)
    day_of_week: int = Field(ge=MONDAY, le=SUNDAY)
    time_of_day: time
    on_date: date | None = None
    duration_minutes: int | None = Field(default=None, gt=0, le=24 * 60)

    @field_validator('time_of_day', mode='before')
    @classmethod
    def validate_time_of_day(cls, value: Any) -> time:
        return parse_time_of_day(value)

    @field_validator('on_date', mode='before')
    @classmethod
    def validate_on_date(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class AvailableDatesQuery(BaseModel):
    tenant_id: int = Field(gt=0)
    from_date: date
    to_date: date
    max_range_days: int = Field(default=92, gt=0)

    @model_validator(mode='after')
    def validate_range(self) -> 'AvailableDatesQuery':
        if self.from_date > self.to_date:
            raise ValueError('from_date must be on or before to_date.')
        if self.to_date - self.from_date >= timedelta(days=self.max_range_days):
            raise ValueError(f'Date range cannot exceed {self.max_range_days} days.')
        return self

    def dates(self) -> list[date]:
        span = (self.to_date - self.from_date).days
        return [self.from_date + timedelta(days=offset) for offset in range(span + 1)]


class WorkingHoursQuery(BaseModel):
    doctor_id: int = Field(gt=0)

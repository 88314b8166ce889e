"""Value types exchanged between the availability engine and its collaborators."""

import enum
from dataclasses import dataclass
from datetime import datetime, time

from backend.scheduling.weekdays import day_name, is_valid_day_of_week

DEFAULT_SLOT_DURATION_MINUTES = 30


class ReservationStatus(str, enum.Enum):
    PENDING = 'Pending'
    CONFIRMED = 'Confirmed'
    IN_PROGRESS = 'InProgress'
    COMPLETED = 'Completed'
    CANCELLED = 'Cancelled'
    NO_SHOW = 'NoShow'


# Only these statuses keep a doctor busy; finished or abandoned visits free the time.
OCCUPYING_STATUSES = frozenset({
    ReservationStatus.PENDING,
    ReservationStatus.CONFIRMED,
    ReservationStatus.IN_PROGRESS,
})


@dataclass(frozen=True, slots=True)
class WorkingHourTemplate:
    """A recurring weekly working window for one doctor."""

    doctor_id: int
    day_of_week: int
    start_time: time
    end_time: time
    slot_duration_minutes: int = DEFAULT_SLOT_DURATION_MINUTES
    is_active: bool = True
    template_id: int | None = None

    def __post_init__(self) -> None:
        if not is_valid_day_of_week(self.day_of_week):
            raise ValueError(f'day_of_week must be between 1 and 7, got {self.day_of_week}.')
        if self.start_time >= self.end_time:
            raise ValueError('Working hours must start before they end.')
        if self.slot_duration_minutes <= 0:
            raise ValueError('slot_duration_minutes must be positive.')

    @property
    def day_name(self) -> str:
        return day_name(self.day_of_week)

    def covers(self, time_of_day: time) -> bool:
        return self.start_time <= time_of_day < self.end_time


@dataclass(frozen=True, slots=True)
class Reservation:
    """An appointment interval ``[start_at, end_at)`` that may occupy a doctor."""

    doctor_id: int
    start_at: datetime
    end_at: datetime
    status: ReservationStatus
    appointment_id: int | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.status, ReservationStatus):
            object.__setattr__(self, 'status', ReservationStatus(self.status))


@dataclass(frozen=True, slots=True)
class TimeSlot:
    start: datetime
    end: datetime
    available: bool

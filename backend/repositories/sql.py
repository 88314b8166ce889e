"""SQLAlchemy implementations of the availability engine's read interfaces."""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Callable, Collection, Iterable, Iterator

from pytz.tzinfo import BaseTzInfo
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.database import SessionLocal
from backend.models.appointment import Appointment
from backend.models.doctor import Doctor
from backend.models.working_hour import DoctorWorkingHour
from backend.scheduling.domain import (
    DEFAULT_SLOT_DURATION_MINUTES,
    OCCUPYING_STATUSES,
    Reservation,
    WorkingHourTemplate,
)
from backend.scheduling.errors import DependencyError
from backend.scheduling.slots import localize

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], Session]


@contextmanager
def read_session(session_factory: SessionFactory, collaborator: str) -> Iterator[Session]:
    db = session_factory()
    try:
        yield db
    except SQLAlchemyError as exc:
        logger.exception('%s query failed.', collaborator)
        raise DependencyError(f'{collaborator} unavailable. Verify DATABASE_URL and database credentials.') from exc
    finally:
        db.close()


def to_template(working_hour: DoctorWorkingHour) -> WorkingHourTemplate:
    return WorkingHourTemplate(
        doctor_id=working_hour.doctor_id,
        day_of_week=working_hour.day_of_week,
        start_time=working_hour.start_time,
        end_time=working_hour.end_time,
        slot_duration_minutes=working_hour.slot_duration_minutes or DEFAULT_SLOT_DURATION_MINUTES,
        is_active=bool(working_hour.is_active),
        template_id=working_hour.id,
    )


def to_templates(working_hours: Iterable[DoctorWorkingHour]) -> list[WorkingHourTemplate]:
    templates = []
    for working_hour in working_hours:
        try:
            templates.append(to_template(working_hour))
        except ValueError as exc:
            logger.warning(
                'Skipping invalid working hour %s for doctor %s: %s',
                working_hour.id,
                working_hour.doctor_id,
                exc,
            )
    return templates


def to_reservation(appointment: Appointment, timezone: BaseTzInfo | None = None) -> Reservation:
    return Reservation(
        doctor_id=appointment.doctor_id,
        start_at=localize(appointment.start_at, timezone),
        end_at=localize(appointment.end_at, timezone),
        status=appointment.status,
        appointment_id=appointment.id,
    )


class SqlTemplateStore:
    """Reads active working-hour templates of active doctors."""

    def __init__(self, session_factory: SessionFactory = SessionLocal) -> None:
        self._session_factory = session_factory

    def get_active_templates(self, tenant_id: int, day_of_week: int) -> list[WorkingHourTemplate]:
        with read_session(self._session_factory, 'Template store') as db:
            working_hours = db.query(DoctorWorkingHour).join(
                Doctor, Doctor.id == DoctorWorkingHour.doctor_id,
            ).filter(
                Doctor.tenant_id == tenant_id,
                Doctor.is_active.is_(True),
                DoctorWorkingHour.day_of_week == day_of_week,
                DoctorWorkingHour.is_active.is_(True),
            ).order_by(
                DoctorWorkingHour.doctor_id.asc(),
                DoctorWorkingHour.start_time.asc(),
            ).all()

            return to_templates(working_hours)

    def get_doctor_templates(self, doctor_id: int, day_of_week: int | None = None) -> list[WorkingHourTemplate]:
        with read_session(self._session_factory, 'Template store') as db:
            query = db.query(DoctorWorkingHour).join(
                Doctor, Doctor.id == DoctorWorkingHour.doctor_id,
            ).filter(
                DoctorWorkingHour.doctor_id == doctor_id,
                Doctor.is_active.is_(True),
                DoctorWorkingHour.is_active.is_(True),
            )
            if day_of_week is not None:
                query = query.filter(DoctorWorkingHour.day_of_week == day_of_week)

            working_hours = query.order_by(
                DoctorWorkingHour.day_of_week.asc(),
                DoctorWorkingHour.start_time.asc(),
            ).all()

            return to_templates(working_hours)


class SqlReservationLookup:
    """Reads occupying appointments for a batch of doctors in one query.

    Appointment times are stored as naive clinic-local datetimes. When a
    timezone is given, aware query bounds are converted to it and returned
    reservations are localized back.
    """

    def __init__(self, session_factory: SessionFactory = SessionLocal, timezone: BaseTzInfo | None = None) -> None:
        self._session_factory = session_factory
        self._timezone = timezone

    def get_reservations(
        self,
        doctor_ids: Collection[int],
        window_start: datetime,
        window_end: datetime,
    ) -> list[Reservation]:
        if not doctor_ids:
            return []

        occupying = [status.value for status in OCCUPYING_STATUSES]

        with read_session(self._session_factory, 'Reservation lookup') as db:
            appointments = db.query(Appointment).filter(
                Appointment.doctor_id.in_(list(doctor_ids)),
                Appointment.start_at < self._to_storage(window_end),
                Appointment.end_at > self._to_storage(window_start),
                Appointment.status.in_(occupying),
            ).order_by(Appointment.doctor_id.asc(), Appointment.start_at.asc()).all()

            return [to_reservation(appointment, self._timezone) for appointment in appointments]

    def _to_storage(self, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value
        if self._timezone is None:
            return value.replace(tzinfo=None)
        return value.astimezone(self._timezone).replace(tzinfo=None)

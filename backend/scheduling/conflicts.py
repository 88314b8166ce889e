"""
Conflict detection between candidate intervals and reservations.

Intervals are half-open: a reservation ending at 09:30 does not block a slot
starting at 09:30.
"""

from bisect import bisect_left
from collections import defaultdict
from datetime import datetime
from typing import Collection, Iterable

from backend.scheduling.domain import OCCUPYING_STATUSES, Reservation, ReservationStatus


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    return a_start < b_end and a_end > b_start


def conflicts_with(
    reservation: Reservation,
    start: datetime,
    end: datetime,
    busy_statuses: Collection[ReservationStatus] = OCCUPYING_STATUSES,
) -> bool:
    return reservation.status in busy_statuses and overlaps(reservation.start_at, reservation.end_at, start, end)


def find_conflicts(
    doctor_id: int,
    start: datetime,
    end: datetime,
    reservations: Iterable[Reservation],
    busy_statuses: Collection[ReservationStatus] = OCCUPYING_STATUSES,
    exclude_appointment_id: int | None = None,
) -> list[Reservation]:
    conflicts = [
        reservation
        for reservation in reservations
        if reservation.doctor_id == doctor_id
        and (exclude_appointment_id is None or reservation.appointment_id != exclude_appointment_id)
        and conflicts_with(reservation, start, end, busy_statuses)
    ]
    conflicts.sort(key=lambda reservation: (reservation.start_at, reservation.end_at))
    return conflicts


def is_busy(
    doctor_id: int,
    start: datetime,
    end: datetime,
    reservations: Iterable[Reservation],
    busy_statuses: Collection[ReservationStatus] = OCCUPYING_STATUSES,
    exclude_appointment_id: int | None = None,
) -> bool:
    return any(
        reservation.doctor_id == doctor_id
        and (exclude_appointment_id is None or reservation.appointment_id != exclude_appointment_id)
        and conflicts_with(reservation, start, end, busy_statuses)
        for reservation in reservations
    )


def check_doctor_availability(
    doctor_id: int,
    start: datetime,
    end: datetime,
    reservations: Iterable[Reservation],
    busy_statuses: Collection[ReservationStatus] = OCCUPYING_STATUSES,
    exclude_appointment_id: int | None = None,
) -> bool:
    return not is_busy(doctor_id, start, end, reservations, busy_statuses, exclude_appointment_id)


class ReservationIndex:
    """Occupying reservations grouped by doctor and sorted by start time.

    Built once per query from a batched fetch so that every candidate slot is
    resolved in memory.
    """

    def __init__(
        self,
        reservations: Iterable[Reservation],
        busy_statuses: Collection[ReservationStatus] = OCCUPYING_STATUSES,
    ) -> None:
        grouped: dict[int, list[Reservation]] = defaultdict(list)
        for reservation in reservations:
            if reservation.status in busy_statuses:
                grouped[reservation.doctor_id].append(reservation)

        self._by_doctor: dict[int, list[Reservation]] = {}
        self._starts: dict[int, list[datetime]] = {}
        for doctor_id, doctor_reservations in grouped.items():
            doctor_reservations.sort(key=lambda reservation: (reservation.start_at, reservation.end_at))
            self._by_doctor[doctor_id] = doctor_reservations
            self._starts[doctor_id] = [reservation.start_at for reservation in doctor_reservations]

    def __len__(self) -> int:
        return sum(len(items) for items in self._by_doctor.values())

    def is_busy(
        self,
        doctor_id: int,
        start: datetime,
        end: datetime,
        exclude_appointment_id: int | None = None,
    ) -> bool:
        doctor_reservations = self._by_doctor.get(doctor_id)
        if not doctor_reservations:
            return False

        # Reservations starting at or after ``end`` cannot overlap the interval.
        candidate_count = bisect_left(self._starts[doctor_id], end)
        for reservation in doctor_reservations[:candidate_count]:
            if exclude_appointment_id is not None and reservation.appointment_id == exclude_appointment_id:
                continue
            if reservation.end_at > start:
                return True

        return False

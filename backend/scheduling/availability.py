"""
Availability resolver.

Answers the booking questions asked of a clinic's calendar:

- is a doctor free for a given interval (``check_availability``)
- what does a doctor's day look like, slot by slot (``list_time_slots``)
- which doctors of a tenant work and are free at a time of day
  (``list_available_doctors``)
- which dates in a range have at least one free slot with any doctor
  (``list_available_dates``)

Every query validates its input first, then performs a bounded number of
collaborator reads (templates per weekday, one batched reservation fetch) and
resolves every candidate slot in memory.
"""

import logging
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeoutError
from datetime import date, datetime, time, timedelta
from typing import Any, Callable, Collection, Iterable, TypeVar

from backend.scheduling.conflicts import ReservationIndex, check_doctor_availability
from backend.scheduling.domain import Reservation, TimeSlot, WorkingHourTemplate
from backend.scheduling.errors import DependencyError
from backend.scheduling.ports import ReservationLookup, TemplateStore
from backend.scheduling.queries import (
    AvailabilityCheckQuery,
    AvailableDatesQuery,
    AvailableDoctorsQuery,
    TimeSlotsQuery,
    WorkingHoursQuery,
    build_query,
)
from backend.scheduling.settings import ResolverSettings
from backend.scheduling.slots import Window, generate_slots, localize, merge_windows, normalize, template_window
from backend.scheduling.weekdays import iso_day_of_week

logger = logging.getLogger(__name__)

T = TypeVar('T')
R = TypeVar('R')


class AvailabilityResolver:
    """Read-only availability queries over a template store and a reservation lookup."""

    def __init__(
        self,
        template_store: TemplateStore,
        reservation_lookup: ReservationLookup,
        settings: ResolverSettings | None = None,
    ) -> None:
        self._templates = template_store
        self._reservations = reservation_lookup
        self.settings = settings or ResolverSettings.from_config()

    def check_availability(
        self,
        doctor_id: int,
        start: datetime,
        end: datetime,
        exclude_appointment_id: int | None = None,
    ) -> bool:
        query = build_query(
            AvailabilityCheckQuery,
            doctor_id=doctor_id,
            start=start,
            end=end,
            exclude_appointment_id=exclude_appointment_id,
        )
        start_at = localize(query.start, self.settings.timezone)
        end_at = localize(query.end, self.settings.timezone)

        reservations = self._fetch_reservations([query.doctor_id], start_at, end_at)
        available = check_doctor_availability(
            query.doctor_id,
            start_at,
            end_at,
            reservations,
            exclude_appointment_id=query.exclude_appointment_id,
        )

        logger.debug(
            'Doctor %s is %s from %s to %s (%d reservations checked).',
            query.doctor_id,
            'available' if available else 'busy',
            start_at,
            end_at,
            len(reservations),
        )
        return available

    def list_time_slots(
        self,
        doctor_id: int,
        slot_date: date,
        duration_minutes: int | None = None,
    ) -> list[TimeSlot]:
        query = build_query(
            TimeSlotsQuery,
            doctor_id=doctor_id,
            slot_date=slot_date,
            duration_minutes=duration_minutes,
        )
        day_of_week = iso_day_of_week(query.slot_date)

        templates = self._active_templates(
            self._call('Template store', self._templates.get_doctor_templates, query.doctor_id, day_of_week),
            day_of_week,
        )
        if not templates:
            logger.debug('Doctor %s has no working hours on %s.', query.doctor_id, query.slot_date)
            return []

        windows_by_duration = self._windows_by_duration(templates, query.slot_date, query.duration_minutes)
        all_windows = [window for windows in windows_by_duration.values() for window in windows]
        index = ReservationIndex(
            self._fetch_reservations(
                [query.doctor_id],
                min(start for start, _ in all_windows),
                max(end for _, end in all_windows),
            )
        )

        slots: dict[Window, TimeSlot] = {}
        for duration, windows in windows_by_duration.items():
            for window_start, window_end in windows:
                for slot_start, slot_end in generate_slots(window_start, window_end, duration):
                    if (slot_start, slot_end) in slots:
                        continue
                    slots[(slot_start, slot_end)] = TimeSlot(
                        start=slot_start,
                        end=slot_end,
                        available=not index.is_busy(query.doctor_id, slot_start, slot_end),
                    )

        ordered = [slots[key] for key in sorted(slots)]
        logger.debug(
            'Found %d slots (%d available, %d reservations) for doctor %s on %s.',
            len(ordered),
            sum(1 for slot in ordered if slot.available),
            len(index),
            query.doctor_id,
            query.slot_date,
        )
        return ordered

    def list_available_slot_starts(
        self,
        doctor_id: int,
        slot_date: date,
        duration_minutes: int | None = None,
    ) -> list[datetime]:
        return [
            slot.start
            for slot in self.list_time_slots(doctor_id, slot_date, duration_minutes)
            if slot.available
        ]

    def list_available_doctors(
        self,
        tenant_id: int,
        day_of_week: int,
        time_of_day: time | str,
        on_date: date | str | None = None,
        duration_minutes: int | None = None,
    ) -> list[int]:
        """Doctors of the tenant working at ``time_of_day`` on ``day_of_week``.

        Without ``on_date`` the answer only reflects working hours. With it,
        doctors holding an occupying reservation in the probed window are
        removed.
        """
        query = build_query(
            AvailableDoctorsQuery,
            tenant_id=tenant_id,
            day_of_week=day_of_week,
            time_of_day=time_of_day,
            on_date=on_date,
            duration_minutes=duration_minutes,
        )

        templates = self._active_templates(
            self._call('Template store', self._templates.get_active_templates, query.tenant_id, query.day_of_week),
            query.day_of_week,
        )
        working_doctor_ids = sorted({
            template.doctor_id for template in templates if template.covers(query.time_of_day)
        })

        if not working_doctor_ids or query.on_date is None:
            return working_doctor_ids

        window_minutes = query.duration_minutes or self.settings.default_slot_window_minutes
        start_at = localize(datetime.combine(query.on_date, query.time_of_day), self.settings.timezone)
        end_at = normalize(start_at + timedelta(minutes=window_minutes))

        index = ReservationIndex(self._fetch_reservations(working_doctor_ids, start_at, end_at))
        available_doctor_ids = [
            doctor_id for doctor_id in working_doctor_ids if not index.is_busy(doctor_id, start_at, end_at)
        ]

        logger.debug(
            'Tenant %s: %d of %d working doctors free from %s to %s.',
            query.tenant_id,
            len(available_doctor_ids),
            len(working_doctor_ids),
            start_at,
            end_at,
        )
        return available_doctor_ids

    def list_available_dates(
        self,
        tenant_id: int,
        from_date: date | str,
        to_date: date | str,
    ) -> list[date]:
        query = build_query(
            AvailableDatesQuery,
            tenant_id=tenant_id,
            from_date=from_date,
            to_date=to_date,
            max_range_days=self.settings.max_range_days,
        )
        dates = query.dates()

        # Templates recur weekly, so at most seven reads cover any range.
        templates_by_weekday: dict[int, list[WorkingHourTemplate]] = {}
        for current_date in dates:
            day_of_week = iso_day_of_week(current_date)
            if day_of_week not in templates_by_weekday:
                templates_by_weekday[day_of_week] = self._active_templates(
                    self._call('Template store', self._templates.get_active_templates, query.tenant_id, day_of_week),
                    day_of_week,
                )

        doctor_ids = sorted({
            template.doctor_id for templates in templates_by_weekday.values() for template in templates
        })
        if not doctor_ids:
            return []

        timezone = self.settings.timezone
        range_start = localize(datetime.combine(query.from_date, time.min), timezone)
        range_end = localize(datetime.combine(query.to_date + timedelta(days=1), time.min), timezone)
        index = ReservationIndex(self._fetch_reservations(doctor_ids, range_start, range_end))

        def date_has_free_slot(current_date: date) -> bool:
            return self._has_free_slot(current_date, templates_by_weekday[iso_day_of_week(current_date)], index)

        flags = self._map(date_has_free_slot, dates)
        available_dates = [current_date for current_date, has_slot in zip(dates, flags) if has_slot]

        logger.debug(
            'Tenant %s has %d available dates between %s and %s (%d reservations indexed).',
            query.tenant_id,
            len(available_dates),
            query.from_date,
            query.to_date,
            len(index),
        )
        return available_dates

    def list_working_hours(self, doctor_id: int) -> list[WorkingHourTemplate]:
        query = build_query(WorkingHoursQuery, doctor_id=doctor_id)
        templates = self._call('Template store', self._templates.get_doctor_templates, query.doctor_id)
        return sorted(
            (template for template in templates if template.is_active),
            key=lambda template: (template.day_of_week, template.start_time, template.end_time),
        )

    def _has_free_slot(
        self,
        on_date: date,
        templates: list[WorkingHourTemplate],
        index: ReservationIndex,
    ) -> bool:
        templates_by_doctor: dict[int, list[WorkingHourTemplate]] = defaultdict(list)
        for template in templates:
            templates_by_doctor[template.doctor_id].append(template)

        for doctor_id in sorted(templates_by_doctor):
            windows_by_duration = self._windows_by_duration(templates_by_doctor[doctor_id], on_date)
            for duration, windows in windows_by_duration.items():
                for window_start, window_end in windows:
                    for slot_start, slot_end in generate_slots(window_start, window_end, duration):
                        if not index.is_busy(doctor_id, slot_start, slot_end):
                            return True

        return False

    def _windows_by_duration(
        self,
        templates: Iterable[WorkingHourTemplate],
        on_date: date,
        duration_minutes: int | None = None,
    ) -> dict[int, list[Window]]:
        grouped: dict[int, list[Window]] = defaultdict(list)
        for template in templates:
            duration = duration_minutes or template.slot_duration_minutes
            grouped[duration].append(template_window(template, on_date, self.settings.timezone))

        return {duration: merge_windows(windows) for duration, windows in sorted(grouped.items())}

    @staticmethod
    def _active_templates(templates: Iterable[WorkingHourTemplate], day_of_week: int) -> list[WorkingHourTemplate]:
        return [template for template in templates if template.is_active and template.day_of_week == day_of_week]

    def _fetch_reservations(
        self,
        doctor_ids: Collection[int],
        window_start: datetime,
        window_end: datetime,
    ) -> list[Reservation]:
        if not doctor_ids:
            return []
        return self._call(
            'Reservation lookup',
            self._reservations.get_reservations,
            list(doctor_ids),
            window_start,
            window_end,
        )

    def _call(self, collaborator: str, func: Callable[..., Iterable[T]], *args: Any) -> list[T]:
        timeout = self.settings.collaborator_timeout_seconds
        if not timeout:
            return list(func(*args))

        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix='availability-io')
        future = executor.submit(func, *args)
        try:
            return list(future.result(timeout=timeout))
        except FuturesTimeoutError as exc:
            future.cancel()
            logger.error('%s did not answer within %s seconds.', collaborator, timeout)
            raise DependencyError(f'{collaborator} timed out after {timeout} seconds.') from exc
        finally:
            executor.shutdown(wait=False)

    def _map(self, func: Callable[[T], R], items: list[T]) -> list[R]:
        workers = min(self.settings.max_workers, len(items))
        if workers <= 1:
            return [func(item) for item in items]

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix='availability') as executor:
            return list(executor.map(func, items))

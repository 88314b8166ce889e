"""Read interfaces the availability engine consumes."""

from datetime import datetime
from typing import Collection, Protocol

from backend.scheduling.domain import Reservation, WorkingHourTemplate


class TemplateStore(Protocol):
    def get_active_templates(self, tenant_id: int, day_of_week: int) -> list[WorkingHourTemplate]:
        """Active templates of every doctor of the tenant for one weekday."""

    def get_doctor_templates(self, doctor_id: int, day_of_week: int | None = None) -> list[WorkingHourTemplate]:
        """Active templates of one doctor, optionally restricted to one weekday."""


class ReservationLookup(Protocol):
    def get_reservations(
        self,
        doctor_ids: Collection[int],
        window_start: datetime,
        window_end: datetime,
    ) -> list[Reservation]:
        """Reservations of the given doctors overlapping ``[window_start, window_end)``."""

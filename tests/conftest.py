import os

import pytest

os.environ.setdefault('DATABASE_URL', 'sqlite:///:memory:')

from backend.scheduling.availability import AvailabilityResolver  # noqa: E402
from backend.scheduling.settings import ResolverSettings  # noqa: E402


class FakeTemplateStore:
    def __init__(self, templates=(), tenant_by_doctor=None):
        self.templates = list(templates)
        self.tenant_by_doctor = tenant_by_doctor or {}
        self.calls = []

    def get_active_templates(self, tenant_id, day_of_week):
        self.calls.append(('get_active_templates', tenant_id, day_of_week))
        return [
            template
            for template in self.templates
            if self.tenant_by_doctor.get(template.doctor_id, 1) == tenant_id
            and template.day_of_week == day_of_week
            and template.is_active
        ]

    def get_doctor_templates(self, doctor_id, day_of_week=None):
        self.calls.append(('get_doctor_templates', doctor_id, day_of_week))
        return [
            template
            for template in self.templates
            if template.doctor_id == doctor_id
            and (day_of_week is None or template.day_of_week == day_of_week)
            and template.is_active
        ]


class FakeReservationLookup:
    def __init__(self, reservations=()):
        self.reservations = list(reservations)
        self.calls = []

    def get_reservations(self, doctor_ids, window_start, window_end):
        self.calls.append(('get_reservations', sorted(doctor_ids), window_start, window_end))
        return [
            reservation
            for reservation in self.reservations
            if reservation.doctor_id in doctor_ids
            and reservation.start_at < window_end
            and reservation.end_at > window_start
        ]


@pytest.fixture
def make_resolver():
    def _make(templates=(), reservations=(), tenant_by_doctor=None, **settings_overrides):
        settings_values = {'max_workers': 1, 'collaborator_timeout_seconds': None}
        settings_values.update(settings_overrides)

        store = FakeTemplateStore(templates, tenant_by_doctor)
        lookup = FakeReservationLookup(reservations)
        resolver = AvailabilityResolver(store, lookup, ResolverSettings(**settings_values))
        return resolver, store, lookup

    return _make

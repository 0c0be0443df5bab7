"""
In-memory fakes of the scheduling ports.
"""

import dataclasses
import itertools
from datetime import UTC, datetime
from typing import Sequence

from clinicbot.domains.scheduling.domain.entities import AppointmentSnapshot, MessageLogEntry, Party
from clinicbot.domains.scheduling.domain.value_objects import AppointmentStatus, Language, MessageStatus


class FakeRuleRepository:
    def __init__(self, rules=None):
        self.rules = list(rules or [])

    async def list_active(self):
        return [r for r in self.rules if r.is_active]


class FakeAppointmentRepository:
    def __init__(self, appointments=None):
        self.appointments = {a.id: a for a in (appointments or [])}
        self.window_queries: list[tuple[datetime, datetime]] = []

    async def list_confirmed_between(self, start, end):
        self.window_queries.append((start, end))
        return [
            a
            for a in self.appointments.values()
            if a.status is AppointmentStatus.CONFIRMED and start <= a.scheduled_at < end
        ]

    async def list_by_statuses(self, statuses: Sequence[AppointmentStatus]):
        return [a for a in self.appointments.values() if a.status in statuses]

    async def transition_status(self, appointment_id, new_status, expected):
        current = self.appointments[appointment_id]
        if current.status not in expected:
            return False
        self.appointments[appointment_id] = dataclasses.replace(current, status=new_status)
        return True


class FakeMessageLogRepository:
    def __init__(self):
        self.rows: list[MessageLogEntry] = []
        self._ids = itertools.count(1)

    async def exists_successful(self, appointment_id, template_name, phone):
        return any(r.is_successful() and r.dedup_key == (appointment_id, template_name, phone) for r in self.rows)

    async def add(self, entry):
        entry.id = f"log-{next(self._ids)}"
        self.rows.append(entry)
        return entry

    async def list_retryable(self, max_attempts, limit):
        failed = [r for r in self.rows if r.status is MessageStatus.FAILED and r.retry_count < max_attempts]
        failed.sort(key=lambda r: r.created_at or datetime.min.replace(tzinfo=UTC))
        return [dataclasses.replace(r) for r in failed[:limit]]

    def get(self, entry_id):
        return next(r for r in self.rows if r.id == entry_id)

    async def mark_retry_succeeded(self, entry_id, retry_count, at):
        row = self.get(entry_id)
        row.status = MessageStatus.SENT
        row.sent_at = at
        row.last_retry_at = at
        row.retry_count = retry_count
        row.error = None

    async def mark_retry_failed(self, entry_id, retry_count, error, at):
        row = self.get(entry_id)
        row.retry_count = retry_count
        row.last_retry_at = at
        row.error = error

    def successful_rows(self):
        return [r for r in self.rows if r.is_successful()]


class FakeTemplateRepository:
    def __init__(self, templates=None):
        self.templates = dict(templates or {})
        self.lookups: list[tuple[str, str]] = []

    async def get_active_content(self, name, language):
        self.lookups.append((name, language))
        return self.templates.get((name, language))


class FakeGateway:
    """Messaging gateway that records sends; `results` is consumed per send (default success)."""

    def __init__(self, instances=None, states=None, results=None):
        self.instances = list(instances) if instances is not None else ["clinic"]
        self.states = dict(states) if states is not None else {name: "open" for name in self.instances}
        self.results = list(results or [])
        self.sent: list[tuple[str, str, str]] = []

    async def fetch_instances(self):
        return list(self.instances)

    async def connection_state(self, instance_name):
        return self.states.get(instance_name)

    async def send_text(self, instance_name, number, text):
        self.sent.append((instance_name, number, text))
        return self.results.pop(0) if self.results else True


class FakeResolver:
    def __init__(self, instance="clinic"):
        self.instance = instance
        self.calls = 0

    async def get_connected_instance(self):
        self.calls += 1
        return self.instance


def make_appointment(
    appointment_id="appt-1",
    scheduled_at=datetime(2024, 3, 10, 14, 0, tzinfo=UTC),
    status=AppointmentStatus.CONFIRMED,
    duration_minutes=30,
    patient_phone="+55 11 99999-0000",
    patient_language=Language.PT,
    provider_id="prov-1",
    provider_phone="+1 954 555 0100",
):
    return AppointmentSnapshot(
        id=appointment_id,
        scheduled_at=scheduled_at,
        status=status,
        patient=Party(
            id="pat-1",
            first_name="Maria",
            last_name="Silva",
            phone=patient_phone,
            language=patient_language,
        ),
        provider=Party(
            id=provider_id,
            first_name="Ana",
            last_name="Costa",
            phone=provider_phone,
            language=Language.EN,
        ),
        type="Consulta",
        duration_minutes=duration_minutes,
    )

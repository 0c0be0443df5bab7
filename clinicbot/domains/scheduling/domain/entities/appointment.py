"""Appointment snapshot as read from the store, joined with both parties' profiles."""

from dataclasses import dataclass
from datetime import datetime, timedelta

from ..value_objects.language import Language
from ..value_objects.statuses import AppointmentStatus


@dataclass(frozen=True)
class Party:
    """Contact details of one side of an appointment (patient or provider)."""

    id: str
    first_name: str = ""
    last_name: str = ""
    phone: str | None = None
    language: Language = Language.PT

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class AppointmentSnapshot:
    """Read-only view of an appointment used by the notification passes."""

    id: str
    scheduled_at: datetime
    status: AppointmentStatus
    patient: Party
    provider: Party
    type: str = ""
    duration_minutes: int | None = None

    @property
    def patient_id(self) -> str:
        return self.patient.id

    @property
    def provider_id(self) -> str:
        return self.provider.id

    def ends_at(self, default_duration_minutes: int = 30) -> datetime:
        duration = self.duration_minutes or default_duration_minutes
        return self.scheduled_at + timedelta(minutes=duration)

    def no_show_deadline(self, grace_minutes: int = 30, default_duration_minutes: int = 30) -> datetime:
        """Instant from which an unattended appointment counts as a no-show."""
        return self.ends_at(default_duration_minutes) + timedelta(minutes=grace_minutes)

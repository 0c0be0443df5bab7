# ============================================================================
# SCOPE: APPLICATION LAYER (Scheduling)
# Description: Use case for marking unattended appointments as no-shows.
# ============================================================================
"""Detect No-Shows Use Case.

An appointment still confirmed or checked in when
scheduled_at + duration + grace has passed becomes a no-show. The transition
is conditional on the current status, so it happens once; the notices that
follow are best-effort and never undo it.
"""

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from ...domain.entities import AppointmentSnapshot
from ...domain.value_objects import AppointmentStatus
from ..dto import DeliveryOutcome, NoShowSummary
from ..ports import IAppointmentRepository
from ..services import NotificationDeliveryService

logger = logging.getLogger(__name__)

NO_SHOW_PATIENT_TEMPLATE = "no_show_patient"
NO_SHOW_PROVIDER_TEMPLATE = "no_show_provider"


class DetectNoShowsUseCase:
    """No-show pass: one call per orchestrator tick."""

    def __init__(
        self,
        appointments: IAppointmentRepository,
        delivery: NotificationDeliveryService,
        grace_minutes: int = 30,
        default_duration_minutes: int = 30,
        panel_base_url: str = "",
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._appointments = appointments
        self._delivery = delivery
        self._grace_minutes = grace_minutes
        self._default_duration_minutes = default_duration_minutes
        self._rebook_link = f"{panel_base_url.rstrip('/')}/appointments/new"
        self._clock = clock or (lambda: datetime.now(UTC))

    def is_overdue(self, appointment: AppointmentSnapshot, now: datetime) -> bool:
        deadline = appointment.no_show_deadline(self._grace_minutes, self._default_duration_minutes)
        return now >= deadline

    async def execute(self, now: datetime | None = None) -> NoShowSummary:
        now = now or self._clock()
        summary = NoShowSummary()
        candidates = AppointmentStatus.no_show_candidates()

        try:
            appointments = await self._appointments.list_by_statuses(candidates)
        except Exception as e:
            logger.error(f"Error fetching no-show candidates: {e}", exc_info=True)
            summary.errors += 1
            return summary

        for appointment in appointments:
            summary.scanned += 1
            if not self.is_overdue(appointment, now):
                continue

            try:
                transitioned = await self._appointments.transition_status(
                    appointment.id, AppointmentStatus.NO_SHOW, expected=candidates
                )
            except Exception as e:
                logger.error(f"Error marking appointment {appointment.id} as no-show: {e}", exc_info=True)
                summary.errors += 1
                continue

            if not transitioned:
                continue

            summary.marked += 1
            summary.appointment_ids.append(appointment.id)
            summary.notifications_sent += await self._notify(appointment)

        if summary.marked:
            logger.info(f"Marked {summary.marked} appointment(s) as no-show")

        return summary

    async def _notify(self, appointment: AppointmentSnapshot) -> int:
        """Send the no-show notices to both parties; returns how many were sent."""
        notices = (
            (appointment.patient, NO_SHOW_PATIENT_TEMPLATE, {"link": self._rebook_link}),
            (appointment.provider, NO_SHOW_PROVIDER_TEMPLATE, None),
        )

        sent = 0
        for recipient, template_name, extra in notices:
            try:
                outcome = await self._delivery.deliver(appointment, recipient, template_name, extra)
            except Exception as e:
                logger.error(f"Error sending '{template_name}' for {appointment.id}: {e}", exc_info=True)
                continue
            if outcome is DeliveryOutcome.SENT:
                sent += 1
        return sent

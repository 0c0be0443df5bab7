# ============================================================================
# SCOPE: APPLICATION LAYER (Scheduling)
# Description: Use case for the lead-time reminder pass.
# ============================================================================
"""Dispatch Reminders Use Case.

For every distinct lead time among the active rules, fetches the confirmed
appointments due in that lead time's window and delivers every applicable
rule's template to its recipient.

The window for lead time L at tick time T is
[T + L - interval/2, T + L + interval/2). Its width equals the tick interval,
so consecutive on-schedule ticks cover each instant exactly once per lead
time. A tick that never fires leaves its window uncovered.
"""

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from ..dto import DispatchSummary
from ..ports import IAppointmentRepository, INotificationRuleRepository
from ..services import NotificationDeliveryService, RuleResolver

logger = logging.getLogger(__name__)


def reminder_window(now: datetime, minutes_before: int, interval_minutes: int) -> tuple[datetime, datetime]:
    """Half-open [start, end) window of scheduled_at values due at `now` for a lead time."""
    half_tick = timedelta(minutes=interval_minutes) / 2
    target = now + timedelta(minutes=minutes_before)
    return target - half_tick, target + half_tick


class DispatchRemindersUseCase:
    """Reminder pass: one call per orchestrator tick."""

    def __init__(
        self,
        rules: INotificationRuleRepository,
        appointments: IAppointmentRepository,
        delivery: NotificationDeliveryService,
        interval_minutes: int = 5,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """
        Args:
            rules: Notification rule repository.
            appointments: Appointment repository.
            delivery: Deduplicating delivery service.
            interval_minutes: Orchestrator tick interval; sets the window width.
            clock: Returns the current UTC time.
        """
        self._rules = rules
        self._appointments = appointments
        self._delivery = delivery
        self._interval_minutes = interval_minutes
        self._clock = clock or (lambda: datetime.now(UTC))

    async def execute(self, now: datetime | None = None) -> DispatchSummary:
        now = now or self._clock()
        summary = DispatchSummary()

        try:
            rules = await self._rules.list_active()
        except Exception as e:
            logger.error(f"Error fetching notification rules: {e}", exc_info=True)
            summary.errors += 1
            return summary

        resolver = RuleResolver(rules)
        if not resolver:
            return summary

        for minutes_before in resolver.thresholds():
            summary.thresholds += 1
            start, end = reminder_window(now, minutes_before, self._interval_minutes)

            try:
                appointments = await self._appointments.list_confirmed_between(start, end)
            except Exception as e:
                logger.error(f"Error fetching appointments ({minutes_before}min): {e}", exc_info=True)
                summary.errors += 1
                continue

            for appointment in appointments:
                summary.appointments += 1
                for rule in resolver.rules_for(appointment.provider_id, minutes_before):
                    recipient = appointment.patient if rule.targets_patient else appointment.provider
                    try:
                        outcome = await self._delivery.deliver(appointment, recipient, rule.template_name)
                    except Exception as e:
                        logger.error(
                            f"Error sending {rule.target_role.value} reminder '{rule.template_name}' "
                            f"for appointment {appointment.id}: {e}",
                            exc_info=True,
                        )
                        summary.errors += 1
                        continue
                    summary.record(outcome)

        if summary.sent or summary.failed:
            logger.info(f"Reminders processed: {summary.sent} sent, {summary.failed} failed")

        return summary

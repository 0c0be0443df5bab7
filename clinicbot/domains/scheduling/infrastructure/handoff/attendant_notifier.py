# ============================================================================
# SCOPE: INFRASTRUCTURE (Scheduling)
# Description: Attendant availability and WhatsApp notification on handoff.
# ============================================================================
"""Attendant Notifier.

Attendant shifts are stored in clinic local time, so "now" is converted to
CLINIC_TIMEZONE before matching the weekday (0 = Sunday) and the time window.
"""

import logging
import re
from collections.abc import Callable
from datetime import UTC, datetime, time

from pytz import timezone
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from clinicbot.domains.scheduling.application.ports import IMessagingGateway
from clinicbot.domains.scheduling.application.utils import to_gateway_number
from clinicbot.models.db import Attendant, AttendantSchedule

logger = logging.getLogger(__name__)

NOTIFICATION_TEMPLATE = """🔔 *New support request / Nova solicitação de suporte*

Patient / Paciente: {name}
Phone / Telefone: {phone}
Reason / Motivo: {reason}

Reply directly to the patient via WhatsApp Web.
When finished, send *#close* in the patient's conversation.

Responda diretamente ao paciente pelo WhatsApp Web.
Ao finalizar, envie *#fechar* na conversa do paciente."""


def format_display_phone(phone: str) -> str:
    """Strip the JID suffix and split off the country code for display."""
    digits = to_gateway_number(phone)
    match = re.match(r"^(\d{1,3})(\d+)$", digits)
    if not match:
        return digits
    return f"+{match.group(1)} {match.group(2)}"


class AttendantNotifier:
    """Checks attendant shifts and messages the attendants on duty."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        gateway: IMessagingGateway,
        timezone_name: str = "America/New_York",
        clock: Callable[[], datetime] | None = None,
    ):
        self._session_factory = session_factory
        self._gateway = gateway
        self.tz = timezone(timezone_name)
        self._clock = clock or (lambda: datetime.now(UTC))

    def clinic_local_time(self) -> tuple[int, time]:
        """Current (day_of_week with 0 = Sunday, time of day) in clinic time."""
        local = self._clock().astimezone(self.tz)
        return local.isoweekday() % 7, local.time().replace(microsecond=0, tzinfo=None)

    async def _on_duty(self) -> list[Attendant]:
        day_of_week, current_time = self.clinic_local_time()
        stmt = (
            select(Attendant)
            .join(AttendantSchedule, AttendantSchedule.attendant_id == Attendant.id)
            .where(
                AttendantSchedule.day_of_week == day_of_week,
                AttendantSchedule.is_active == True,  # noqa: E712
                AttendantSchedule.start_time <= current_time,
                AttendantSchedule.end_time >= current_time,
                Attendant.is_active == True,  # noqa: E712
            )
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            rows = result.scalars().all()

        # an attendant can have several shift segments
        seen: set = set()
        attendants = []
        for attendant in rows:
            if attendant.id in seen:
                continue
            seen.add(attendant.id)
            attendants.append(attendant)
        return attendants

    async def has_available_attendants(self) -> bool:
        try:
            return bool(await self._on_duty())
        except Exception as e:
            logger.error(f"Error checking attendant availability: {e}")
            return False

    async def notify_attendants(
        self,
        patient_name: str | None,
        patient_phone: str,
        reason: str,
        instance_name: str,
    ) -> int:
        try:
            attendants = await self._on_duty()
        except Exception as e:
            logger.error(f"Error fetching attendants on duty: {e}")
            return 0

        message = NOTIFICATION_TEMPLATE.format(
            name=patient_name or "Unknown",
            phone=format_display_phone(patient_phone),
            reason=reason,
        )

        notified = 0
        for attendant in attendants:
            if attendant.notify_whatsapp and attendant.phone:
                sent = await self._gateway.send_text(instance_name, to_gateway_number(attendant.phone), message)
                if sent:
                    notified += 1
                    logger.info(f"Notified attendant {attendant.name} via WhatsApp")
                else:
                    logger.error(f"Failed to notify attendant {attendant.name}")

            if attendant.notify_email and attendant.email:
                logger.info(f"Email notification pending for {attendant.name} ({attendant.email})")

        return notified

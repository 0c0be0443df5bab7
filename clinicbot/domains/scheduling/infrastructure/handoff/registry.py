# ============================================================================
# SCOPE: INFRASTRUCTURE (Scheduling)
# Description: Human handoff session registry with an in-memory phone set.
# ============================================================================
"""Handoff Session Registry.

The inbound-message path asks `is_in_handoff(phone)` for every message, so
membership is answered from an in-memory set without touching the store.
The set is updated synchronously by create/resolve and rebuilt from the store
on every stale sweep, which absorbs resolutions made elsewhere (operator
console, other processes).

The duplicate guard in `create` is advisory: two creates racing before the
first insert completes can still produce two rows.
"""

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from clinicbot.domains.scheduling.application.dto import HandoffCreateResult, HandoffSweepSummary
from clinicbot.domains.scheduling.application.ports import IAttendantNotifier, IHandoffRepository
from clinicbot.domains.scheduling.domain.entities import HandoffSession
from clinicbot.domains.scheduling.domain.value_objects import HandoffStatus

logger = logging.getLogger(__name__)

AUTO_TIMEOUT_RESOLVER = "auto_timeout"


class HandoffRegistry:
    """Owns the handoff membership set; one instance per container."""

    def __init__(
        self,
        repository: IHandoffRepository,
        notifier: IAttendantNotifier | None = None,
        stale_minutes: int = 30,
        clock: Callable[[], datetime] | None = None,
    ):
        """
        Args:
            repository: Persisted handoff sessions.
            notifier: Attendant availability and notification (optional).
            stale_minutes: Inactivity before an open session is auto-resolved.
            clock: Returns the current UTC time.
        """
        self._repository = repository
        self._notifier = notifier
        self._stale_minutes = stale_minutes
        self._clock = clock or (lambda: datetime.now(UTC))
        self._active_phones: set[str] = set()

    def is_in_handoff(self, phone: str) -> bool:
        return phone in self._active_phones

    async def load(self) -> int:
        """Rebuild the membership set from open sessions in the store.

        On a store error the previous set is kept.
        """
        try:
            phones = await self._repository.list_open_phones()
        except Exception as e:
            logger.error(f"Error loading active handoffs: {e}", exc_info=True)
            return len(self._active_phones)

        self._active_phones = set(phones)
        logger.info(f"Loaded {len(self._active_phones)} active handoff(s)")
        return len(self._active_phones)

    async def create(
        self,
        patient_phone: str,
        instance_name: str,
        reason: str = "",
        patient_id: str | None = None,
        patient_name: str | None = None,
    ) -> HandoffCreateResult:
        """Open a handoff for a phone, or return the one already open.

        Store errors on insert propagate to the caller.
        """
        if patient_phone in self._active_phones:
            existing_id = await self._repository.find_open_id(patient_phone)
            if existing_id:
                logger.info(f"Handoff already open for {patient_phone} ({existing_id})")
                return HandoffCreateResult(id=existing_id, has_attendants=False, created=False)

        now = self._clock()
        session_id = await self._repository.insert(
            HandoffSession(
                patient_phone=patient_phone,
                instance_name=instance_name,
                reason=reason,
                status=HandoffStatus.WAITING,
                patient_id=patient_id,
                patient_name=patient_name,
                created_at=now,
                last_message_at=now,
            )
        )
        self._active_phones.add(patient_phone)
        logger.info(f"Handoff created for {patient_phone} ({session_id})")

        has_attendants = await self._check_and_notify(patient_name, patient_phone, reason, instance_name)
        return HandoffCreateResult(id=session_id, has_attendants=has_attendants)

    async def _check_and_notify(
        self,
        patient_name: str | None,
        patient_phone: str,
        reason: str,
        instance_name: str,
    ) -> bool:
        if self._notifier is None:
            return True

        try:
            has_attendants = await self._notifier.has_available_attendants()
        except Exception as e:
            logger.error(f"Error checking attendant availability: {e}", exc_info=True)
            has_attendants = False

        try:
            await self._notifier.notify_attendants(patient_name, patient_phone, reason, instance_name)
        except Exception as e:
            logger.error(f"Error notifying attendants for {patient_phone}: {e}", exc_info=True)

        return has_attendants

    async def resolve(self, patient_phone: str, resolved_by: str) -> bool:
        """Resolve every open session for a phone; False when none was open."""
        try:
            resolved = await self._repository.resolve_by_phone(patient_phone, resolved_by, self._clock())
        except Exception as e:
            logger.error(f"Error resolving handoff for {patient_phone}: {e}", exc_info=True)
            return False

        self._active_phones.discard(patient_phone)
        if not resolved:
            return False

        logger.info(f"Handoff resolved for {patient_phone} by {resolved_by} ({len(resolved)} session(s))")
        return True

    async def resolve_by_id(self, session_id: str, resolved_by: str) -> bool:
        """Resolve one session; False when it was not open or the store failed."""
        try:
            phone = await self._repository.resolve_by_id(session_id, resolved_by, self._clock())
        except Exception as e:
            logger.error(f"Error resolving handoff {session_id}: {e}", exc_info=True)
            return False

        if phone is None:
            return False

        self._active_phones.discard(phone)
        logger.info(f"Handoff {session_id} resolved by {resolved_by}")
        return True

    async def touch(self, patient_phone: str) -> None:
        """Record activity on the open session (staleness tracking only)."""
        try:
            await self._repository.touch(patient_phone, self._clock())
        except Exception as e:
            logger.error(f"Error updating handoff activity for {patient_phone}: {e}")

    async def sweep_stale(self) -> HandoffSweepSummary:
        """Auto-resolve inactive sessions, then reload the set from the store."""
        now = self._clock()
        cutoff = now - timedelta(minutes=self._stale_minutes)
        summary = HandoffSweepSummary()

        try:
            phones = await self._repository.resolve_stale(cutoff, AUTO_TIMEOUT_RESOLVER, now)
            self._active_phones.difference_update(phones)
            summary.closed = len(phones)
            if phones:
                logger.info(f"Auto-closed {len(phones)} stale handoff(s)")
        except Exception as e:
            logger.error(f"Error closing stale handoffs: {e}", exc_info=True)

        summary.active = await self.load()
        return summary

    async def list_open_sessions(self) -> list[HandoffSession]:
        return await self._repository.list_open()

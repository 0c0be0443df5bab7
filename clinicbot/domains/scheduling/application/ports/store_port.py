# ============================================================================
# SCOPE: APPLICATION LAYER (Scheduling)
# Description: Persisted-store ports used by the notification passes.
# ============================================================================
"""Store Ports.

Segregated interfaces over the persisted store. Each repository exposes only
the filtered reads and conditional writes the passes need.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Protocol, Sequence, runtime_checkable

if TYPE_CHECKING:
    from ...domain.entities import AppointmentSnapshot, MessageLogEntry, NotificationRule
    from ...domain.value_objects import AppointmentStatus


@runtime_checkable
class INotificationRuleRepository(Protocol):
    """Read access to notification rules."""

    async def list_active(self) -> list["NotificationRule"]:
        """Return every rule with is_active = true."""
        ...


@runtime_checkable
class IAppointmentRepository(Protocol):
    """Read/transition access to appointments joined with both parties."""

    async def list_confirmed_between(self, start: datetime, end: datetime) -> list["AppointmentSnapshot"]:
        """Confirmed appointments with start <= scheduled_at < end."""
        ...

    async def list_by_statuses(self, statuses: Sequence["AppointmentStatus"]) -> list["AppointmentSnapshot"]:
        """Appointments whose status is one of `statuses`."""
        ...

    async def transition_status(
        self,
        appointment_id: str,
        new_status: "AppointmentStatus",
        expected: Sequence["AppointmentStatus"],
    ) -> bool:
        """Set `new_status` only if the current status is in `expected`.

        Returns:
            True if a row was updated.
        """
        ...


@runtime_checkable
class IMessageLogRepository(Protocol):
    """Append-mostly access to the outbound message log."""

    async def exists_successful(self, appointment_id: str, template_name: str, phone: str) -> bool:
        """Is there a sent/delivered/read row for this dedup triple?"""
        ...

    async def add(self, entry: "MessageLogEntry") -> "MessageLogEntry":
        """Insert a new row and return it with its id."""
        ...

    async def list_retryable(self, max_attempts: int, limit: int) -> list["MessageLogEntry"]:
        """Oldest failed rows with retry_count < max_attempts, by created_at."""
        ...

    async def mark_retry_succeeded(self, entry_id: str, retry_count: int, at: datetime) -> None: ...

    async def mark_retry_failed(self, entry_id: str, retry_count: int, error: str, at: datetime) -> None: ...


@runtime_checkable
class ITemplateRepository(Protocol):
    """Read access to message templates."""

    async def get_active_content(self, name: str, language: str) -> str | None:
        """Body of the active template for (name, language), or None."""
        ...

"""Handoff Ports."""

from datetime import datetime
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ...domain.entities import HandoffSession


@runtime_checkable
class IHandoffRepository(Protocol):
    """Persisted handoff sessions."""

    async def find_open_id(self, phone: str) -> str | None:
        """Id of a waiting/active session for this phone."""
        ...

    async def insert(self, session: "HandoffSession") -> str:
        """Insert a new session and return its id."""
        ...

    async def resolve_by_phone(self, phone: str, resolved_by: str, at: datetime) -> list[str]:
        """Resolve all open sessions for a phone; returns resolved session ids."""
        ...

    async def resolve_by_id(self, session_id: str, resolved_by: str, at: datetime) -> str | None:
        """Resolve one open session; returns its phone, or None if nothing was open."""
        ...

    async def touch(self, phone: str, at: datetime) -> None:
        """Stamp last_message_at on the open sessions for a phone."""
        ...

    async def resolve_stale(self, cutoff: datetime, resolved_by: str, at: datetime) -> list[str]:
        """Resolve open sessions with last_message_at < cutoff; returns their phones."""
        ...

    async def list_open_phones(self) -> list[str]: ...

    async def list_open(self) -> list["HandoffSession"]:
        """Open sessions, newest first."""
        ...


@runtime_checkable
class IAttendantNotifier(Protocol):
    """Human attendants on shift."""

    async def has_available_attendants(self) -> bool: ...

    async def notify_attendants(
        self,
        patient_name: str | None,
        patient_phone: str,
        reason: str,
        instance_name: str,
    ) -> int:
        """Message the attendants on shift; returns how many were notified."""
        ...

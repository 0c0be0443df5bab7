"""Handoff Session Entity."""

from dataclasses import dataclass
from datetime import datetime

from ..value_objects.statuses import HandoffStatus


@dataclass
class HandoffSession:
    """A conversation escalated from the bot to a human attendant.

    Sessions are never deleted; they end in RESOLVED with the resolver recorded
    (an attendant id, the patient, or "auto_timeout").
    """

    patient_phone: str
    instance_name: str
    reason: str | None = None
    status: HandoffStatus = HandoffStatus.WAITING
    id: str | None = None
    patient_id: str | None = None
    patient_name: str | None = None
    attendant_id: str | None = None
    created_at: datetime | None = None
    resolved_at: datetime | None = None
    resolved_by: str | None = None
    last_message_at: datetime | None = None

    @property
    def is_open(self) -> bool:
        return self.status in HandoffStatus.open_statuses()

"""Message Log Entity.

One row per outbound notification attempt. The (appointment_id,
template_name, phone) triple is the delivery dedup key: at most one row per
triple may be in a successful status.
"""

from dataclasses import dataclass
from datetime import datetime

from ..value_objects.statuses import MessageStatus


@dataclass
class MessageLogEntry:
    appointment_id: str | None
    patient_id: str | None
    template_name: str | None
    phone: str
    message: str
    status: MessageStatus
    id: str | None = None
    language: str | None = None
    retry_count: int = 0
    last_retry_at: datetime | None = None
    sent_at: datetime | None = None
    error: str | None = None
    created_at: datetime | None = None

    @property
    def dedup_key(self) -> tuple[str | None, str | None, str]:
        return (self.appointment_id, self.template_name, self.phone)

    def is_successful(self) -> bool:
        return self.status in MessageStatus.successful()

    def can_retry(self, max_attempts: int) -> bool:
        return self.status is MessageStatus.FAILED and self.retry_count < max_attempts

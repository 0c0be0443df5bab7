from .appointment import AppointmentSnapshot, Party
from .handoff_session import HandoffSession
from .message_log import MessageLogEntry
from .notification_rule import NotificationRule

__all__ = [
    "AppointmentSnapshot",
    "HandoffSession",
    "MessageLogEntry",
    "NotificationRule",
    "Party",
]

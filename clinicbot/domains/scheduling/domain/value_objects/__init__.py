from .language import Language
from .statuses import (
    AppointmentStatus,
    HandoffStatus,
    MessageStatus,
    TargetRole,
)

__all__ = [
    "AppointmentStatus",
    "HandoffStatus",
    "Language",
    "MessageStatus",
    "TargetRole",
]

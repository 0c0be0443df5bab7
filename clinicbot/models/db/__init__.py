"""
ORM models for the tables the notification engine reads and writes.

The schema is owned by the external store; these mappings mirror it.
"""

from .base import Base
from .handoff import Attendant, AttendantSchedule, HandoffSessionRow
from .notifications import MessageLog, MessageTemplate, NotificationRuleRow
from .scheduling import AppointmentRow, Profile, Provider

__all__ = [
    "AppointmentRow",
    "Attendant",
    "AttendantSchedule",
    "Base",
    "HandoffSessionRow",
    "MessageLog",
    "MessageTemplate",
    "NotificationRuleRow",
    "Profile",
    "Provider",
]

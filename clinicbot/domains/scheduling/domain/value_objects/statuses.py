"""Status value objects for appointments, message logs and handoff sessions."""

from enum import Enum


class AppointmentStatus(str, Enum):
    """Appointment lifecycle states."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CHECKED_IN = "checked_in"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"

    def is_no_show_candidate(self) -> bool:
        """Can this appointment still become a no-show?"""
        return self in (AppointmentStatus.CONFIRMED, AppointmentStatus.CHECKED_IN)

    @classmethod
    def no_show_candidates(cls) -> tuple["AppointmentStatus", ...]:
        return (cls.CONFIRMED, cls.CHECKED_IN)


class MessageStatus(str, Enum):
    """Delivery status of a message log row."""

    SENT = "sent"
    DELIVERED = "delivered"
    READ = "read"
    FAILED = "failed"

    @classmethod
    def successful(cls) -> tuple["MessageStatus", ...]:
        """Statuses that count as a completed delivery for deduplication."""
        return (cls.SENT, cls.DELIVERED, cls.READ)


class HandoffStatus(str, Enum):
    """Human-handoff session states."""

    WAITING = "waiting"
    ACTIVE = "active"
    RESOLVED = "resolved"

    @classmethod
    def open_statuses(cls) -> tuple["HandoffStatus", ...]:
        return (cls.WAITING, cls.ACTIVE)


class TargetRole(str, Enum):
    """Who a notification rule addresses."""

    PATIENT = "patient"
    PROVIDER = "provider"

# ============================================================================
# SCOPE: APPLICATION LAYER (Scheduling)
# Description: Result DTOs returned by the notification passes.
# ============================================================================
"""Notification DTOs."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class DeliveryOutcome(str, Enum):
    """What happened to one (appointment, template, recipient) delivery."""

    SENT = "sent"
    FAILED = "failed"
    DUPLICATE = "duplicate"
    NO_PHONE = "no_phone"
    NO_TEMPLATE = "no_template"
    NO_GATEWAY = "no_gateway"

    @property
    def logged(self) -> bool:
        """Whether a message log row was written for this outcome."""
        return self in (DeliveryOutcome.SENT, DeliveryOutcome.FAILED)


@dataclass
class DispatchSummary:
    """Result of one reminder pass."""

    thresholds: int = 0
    appointments: int = 0
    sent: int = 0
    failed: int = 0
    skipped: int = 0
    errors: int = 0

    def record(self, outcome: DeliveryOutcome) -> None:
        if outcome is DeliveryOutcome.SENT:
            self.sent += 1
        elif outcome is DeliveryOutcome.FAILED:
            self.failed += 1
        else:
            self.skipped += 1


@dataclass
class NoShowSummary:
    """Result of one no-show pass."""

    scanned: int = 0
    marked: int = 0
    notifications_sent: int = 0
    errors: int = 0
    appointment_ids: list[str] = field(default_factory=list)


@dataclass
class RetrySummary:
    """Result of one retry sweep."""

    selected: int = 0
    retried: int = 0
    succeeded: int = 0
    superseded: int = 0
    errors: int = 0
    skipped_no_gateway: bool = False

    @property
    def still_failing(self) -> int:
        return self.retried - self.succeeded


@dataclass
class HandoffSweepSummary:
    """Result of one stale-handoff sweep plus reload."""

    closed: int = 0
    active: int = 0


@dataclass(frozen=True)
class HandoffCreateResult:
    """Returned by the handoff registry on escalation."""

    id: str
    has_attendants: bool
    created: bool = True


@dataclass
class TickReport:
    """Per-pass outcome of one orchestrator tick: a summary, or the error text."""

    results: dict[str, Any] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

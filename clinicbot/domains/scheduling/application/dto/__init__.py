from .notification_dtos import (
    DeliveryOutcome,
    DispatchSummary,
    HandoffCreateResult,
    HandoffSweepSummary,
    NoShowSummary,
    RetrySummary,
    TickReport,
)

__all__ = [
    "DeliveryOutcome",
    "DispatchSummary",
    "HandoffCreateResult",
    "HandoffSweepSummary",
    "NoShowSummary",
    "RetrySummary",
    "TickReport",
]

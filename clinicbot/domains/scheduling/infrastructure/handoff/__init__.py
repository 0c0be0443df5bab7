from .attendant_notifier import AttendantNotifier
from .registry import AUTO_TIMEOUT_RESOLVER, HandoffRegistry

__all__ = ["AUTO_TIMEOUT_RESOLVER", "AttendantNotifier", "HandoffRegistry"]

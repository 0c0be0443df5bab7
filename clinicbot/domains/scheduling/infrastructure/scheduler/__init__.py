from .orchestrator import PASS_ORDER, NotificationOrchestrator

__all__ = ["PASS_ORDER", "NotificationOrchestrator"]

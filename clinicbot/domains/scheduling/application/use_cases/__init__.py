from .detect_no_shows import DetectNoShowsUseCase
from .dispatch_reminders import DispatchRemindersUseCase, reminder_window
from .retry_failed_messages import RetryFailedMessagesUseCase

__all__ = [
    "DetectNoShowsUseCase",
    "DispatchRemindersUseCase",
    "RetryFailedMessagesUseCase",
    "reminder_window",
]

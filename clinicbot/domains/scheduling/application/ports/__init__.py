"""
Application ports.

Interfaces the use cases depend on; infrastructure provides the implementations.
"""

from .gateway_port import IConnectionResolver, IMessagingGateway
from .handoff_port import IAttendantNotifier, IHandoffRepository
from .store_port import (
    IAppointmentRepository,
    IMessageLogRepository,
    INotificationRuleRepository,
    ITemplateRepository,
)

__all__ = [
    "IAppointmentRepository",
    "IAttendantNotifier",
    "IConnectionResolver",
    "IHandoffRepository",
    "IMessageLogRepository",
    "IMessagingGateway",
    "INotificationRuleRepository",
    "ITemplateRepository",
]

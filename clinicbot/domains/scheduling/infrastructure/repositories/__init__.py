"""
Scheduling Infrastructure Repositories

SQLAlchemy implementations of the store ports. Each call opens its own
session from the injected factory, so repositories are safe to share across
scheduler ticks and request handlers.
"""

from clinicbot.domains.scheduling.infrastructure.repositories.appointment_repository import (
    SQLAlchemyAppointmentRepository,
)
from clinicbot.domains.scheduling.infrastructure.repositories.handoff_repository import (
    SQLAlchemyHandoffRepository,
)
from clinicbot.domains.scheduling.infrastructure.repositories.message_log_repository import (
    SQLAlchemyMessageLogRepository,
)
from clinicbot.domains.scheduling.infrastructure.repositories.notification_rule_repository import (
    SQLAlchemyNotificationRuleRepository,
)
from clinicbot.domains.scheduling.infrastructure.repositories.template_repository import (
    SQLAlchemyTemplateRepository,
)

__all__ = [
    "SQLAlchemyAppointmentRepository",
    "SQLAlchemyHandoffRepository",
    "SQLAlchemyMessageLogRepository",
    "SQLAlchemyNotificationRuleRepository",
    "SQLAlchemyTemplateRepository",
]

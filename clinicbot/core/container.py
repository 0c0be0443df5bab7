"""
Dependency Injection Container

Composition root: the only place that reads Settings and wires concrete
implementations (SQLAlchemy repositories, Evolution API client) to the
application ports. Each container owns its own gateway cache and handoff
membership set; nothing here is a module-level singleton.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine

from clinicbot.config.settings import Settings, get_settings
from clinicbot.database.async_db import create_async_database_engine, create_session_factory
from clinicbot.domains.scheduling.application.services import NotificationDeliveryService, TemplateRenderer
from clinicbot.domains.scheduling.application.use_cases import (
    DetectNoShowsUseCase,
    DispatchRemindersUseCase,
    RetryFailedMessagesUseCase,
)
from clinicbot.domains.scheduling.domain.value_objects import Language
from clinicbot.domains.scheduling.infrastructure.gateway import ConnectionResolver
from clinicbot.domains.scheduling.infrastructure.handoff import AttendantNotifier, HandoffRegistry
from clinicbot.domains.scheduling.infrastructure.repositories import (
    SQLAlchemyAppointmentRepository,
    SQLAlchemyHandoffRepository,
    SQLAlchemyMessageLogRepository,
    SQLAlchemyNotificationRuleRepository,
    SQLAlchemyTemplateRepository,
)
from clinicbot.domains.scheduling.infrastructure.scheduler import NotificationOrchestrator
from clinicbot.integrations.evolution import EvolutionClient

logger = logging.getLogger(__name__)


@dataclass
class Container:
    """Long-lived components shared by the scheduler and the admin routes."""

    settings: Settings
    handoff_registry: HandoffRegistry
    orchestrator: NotificationOrchestrator
    gateway: EvolutionClient | None = None
    engine: AsyncEngine | None = None

    async def close(self) -> None:
        """Stop the scheduler and release HTTP and database resources."""
        await self.orchestrator.stop()
        if self.gateway is not None:
            await self.gateway.close()
        if self.engine is not None:
            await self.engine.dispose()
        logger.info("Container closed")


def build_container(settings: Settings | None = None) -> Container:
    """Wire every component from settings."""
    settings = settings or get_settings()
    default_language = Language(settings.DEFAULT_LANGUAGE)

    engine = create_async_database_engine(settings)
    session_factory = create_session_factory(engine)

    gateway = EvolutionClient(
        base_url=settings.EVOLUTION_API_URL,
        api_key=settings.EVOLUTION_API_KEY,
        timeout=settings.GATEWAY_TIMEOUT_SECONDS,
        simulate_typing=settings.GATEWAY_SIMULATE_TYPING,
    )
    resolver = ConnectionResolver(gateway, ttl_seconds=settings.GATEWAY_INSTANCE_CACHE_TTL_SECONDS)

    rules = SQLAlchemyNotificationRuleRepository(session_factory)
    appointments = SQLAlchemyAppointmentRepository(session_factory, default_language=default_language)
    message_logs = SQLAlchemyMessageLogRepository(session_factory)
    templates = SQLAlchemyTemplateRepository(session_factory)
    handoffs = SQLAlchemyHandoffRepository(session_factory)

    delivery = NotificationDeliveryService(
        message_logs=message_logs,
        templates=templates,
        connection_resolver=resolver,
        gateway=gateway,
        renderer=TemplateRenderer(settings.CLINIC_TIMEZONE),
        default_language=default_language,
    )

    dispatch_reminders = DispatchRemindersUseCase(
        rules=rules,
        appointments=appointments,
        delivery=delivery,
        interval_minutes=settings.SCHEDULER_INTERVAL_MINUTES,
    )
    detect_no_shows = DetectNoShowsUseCase(
        appointments=appointments,
        delivery=delivery,
        grace_minutes=settings.NO_SHOW_GRACE_MINUTES,
        default_duration_minutes=settings.DEFAULT_APPOINTMENT_DURATION_MINUTES,
        panel_base_url=settings.PANEL_BASE_URL,
    )
    retry_failed = RetryFailedMessagesUseCase(
        message_logs=message_logs,
        connection_resolver=resolver,
        gateway=gateway,
        max_attempts=settings.RETRY_MAX_ATTEMPTS,
        batch_size=settings.RETRY_BATCH_SIZE,
    )

    notifier = AttendantNotifier(session_factory, gateway, timezone_name=settings.CLINIC_TIMEZONE)
    registry = HandoffRegistry(handoffs, notifier=notifier, stale_minutes=settings.HANDOFF_STALE_MINUTES)

    orchestrator = NotificationOrchestrator(
        dispatch_reminders=dispatch_reminders,
        detect_no_shows=detect_no_shows,
        retry_failed=retry_failed,
        handoff_registry=registry,
        interval_minutes=settings.SCHEDULER_INTERVAL_MINUTES,
        initial_delay_seconds=settings.SCHEDULER_INITIAL_DELAY_SECONDS,
        enabled=settings.SCHEDULER_ENABLED,
    )

    logger.info("Container built")
    return Container(
        settings=settings,
        handoff_registry=registry,
        orchestrator=orchestrator,
        gateway=gateway,
        engine=engine,
    )

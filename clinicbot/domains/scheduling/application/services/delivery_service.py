# ============================================================================
# SCOPE: APPLICATION LAYER (Scheduling)
# Description: Deduplicated, logged delivery of one templated notification.
# ============================================================================
"""Notification Delivery Service.

Shared by the reminder dispatcher and the no-show detector. One call handles
one (appointment, template, recipient) delivery:

1. skip when the recipient has no phone
2. skip silently when the dedup triple already has a successful log row
3. load the template for the recipient language, falling back to the default
4. render placeholders
5. resolve a connected gateway instance (skip when none)
6. send and append a `sent` or `failed` log row
"""

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from ...domain.entities import AppointmentSnapshot, MessageLogEntry, Party
from ...domain.value_objects import Language, MessageStatus
from ..dto import DeliveryOutcome
from ..ports import IConnectionResolver, IMessageLogRepository, IMessagingGateway, ITemplateRepository
from ..utils import to_gateway_number
from .template_renderer import TemplateRenderer

logger = logging.getLogger(__name__)

SEND_FAILED_ERROR = "Gateway send failed"


class NotificationDeliveryService:
    """Sends one templated notification at most once per dedup key."""

    def __init__(
        self,
        message_logs: IMessageLogRepository,
        templates: ITemplateRepository,
        connection_resolver: IConnectionResolver,
        gateway: IMessagingGateway,
        renderer: TemplateRenderer | None = None,
        default_language: Language | str = Language.PT,
        clock: Callable[[], datetime] | None = None,
    ):
        """
        Args:
            message_logs: Message log repository (dedup + outcome rows).
            templates: Template repository.
            connection_resolver: Finds a connected gateway instance.
            gateway: Messaging gateway used to send.
            renderer: Placeholder renderer.
            default_language: Fallback template language.
            clock: Returns the current UTC time.
        """
        self._message_logs = message_logs
        self._templates = templates
        self._resolver = connection_resolver
        self._gateway = gateway
        self._renderer = renderer or TemplateRenderer()
        self._default_language = Language(default_language)
        self._clock = clock or (lambda: datetime.now(UTC))

    @property
    def renderer(self) -> TemplateRenderer:
        return self._renderer

    async def load_template(self, name: str, language: Language) -> str | None:
        """Active template body for (name, language), else the default language's."""
        content = await self._templates.get_active_content(name, language.value)
        if content is None and language is not self._default_language:
            content = await self._templates.get_active_content(name, self._default_language.value)
        return content

    async def deliver(
        self,
        appointment: AppointmentSnapshot,
        recipient: Party,
        template_name: str,
        extra_variables: dict[str, Any] | None = None,
    ) -> DeliveryOutcome:
        """Deliver `template_name` about `appointment` to `recipient`.

        Store and gateway errors propagate; callers isolate them per item.
        """
        phone = recipient.phone
        if not phone:
            logger.warning(f"No phone for recipient {recipient.id} (appointment {appointment.id}), skipping")
            return DeliveryOutcome.NO_PHONE

        if await self._message_logs.exists_successful(appointment.id, template_name, phone):
            return DeliveryOutcome.DUPLICATE

        content = await self.load_template(template_name, recipient.language)
        if content is None:
            logger.warning(f"Template not found: {template_name} ({recipient.language.value})")
            return DeliveryOutcome.NO_TEMPLATE

        variables = self._renderer.build_variables(appointment, recipient.language, extra_variables)
        message = self._renderer.render(content, variables)

        instance_name = await self._resolver.get_connected_instance()
        if not instance_name:
            logger.warning("No connected WhatsApp instance, skipping")
            return DeliveryOutcome.NO_GATEWAY

        success = await self._gateway.send_text(instance_name, to_gateway_number(phone), message)
        now = self._clock()

        await self._message_logs.add(
            MessageLogEntry(
                appointment_id=appointment.id,
                patient_id=appointment.patient_id,
                template_name=template_name,
                phone=phone,
                message=message,
                language=recipient.language.value,
                status=MessageStatus.SENT if success else MessageStatus.FAILED,
                sent_at=now if success else None,
                error=None if success else SEND_FAILED_ERROR,
                created_at=now,
            )
        )

        if success:
            logger.info(f"Sent '{template_name}' to {recipient.full_name or recipient.id} ({phone})")
            return DeliveryOutcome.SENT

        logger.error(f"FAILED '{template_name}' to {recipient.full_name or recipient.id} ({phone})")
        return DeliveryOutcome.FAILED

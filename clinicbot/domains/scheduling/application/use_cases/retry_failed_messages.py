# ============================================================================
# SCOPE: APPLICATION LAYER (Scheduling)
# Description: Use case for resending failed notifications.
# ============================================================================
"""Retry Failed Messages Use Case.

Resends a bounded batch of the oldest failed log rows. A row whose
retry_count reaches the maximum stays failed for good.
"""

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from ..dto import RetrySummary
from ..ports import IConnectionResolver, IMessageLogRepository, IMessagingGateway
from ..utils import to_gateway_number

logger = logging.getLogger(__name__)

SUPERSEDED_ERROR = "Superseded by successful delivery"


class RetryFailedMessagesUseCase:
    """Retry sweep: one call per orchestrator tick."""

    def __init__(
        self,
        message_logs: IMessageLogRepository,
        connection_resolver: IConnectionResolver,
        gateway: IMessagingGateway,
        max_attempts: int = 3,
        batch_size: int = 10,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._message_logs = message_logs
        self._resolver = connection_resolver
        self._gateway = gateway
        self._max_attempts = max_attempts
        self._batch_size = batch_size
        self._clock = clock or (lambda: datetime.now(UTC))

    async def execute(self) -> RetrySummary:
        summary = RetrySummary()

        try:
            entries = await self._message_logs.list_retryable(self._max_attempts, self._batch_size)
        except Exception as e:
            logger.error(f"Error fetching failed messages: {e}", exc_info=True)
            summary.errors += 1
            return summary

        if not entries:
            return summary
        summary.selected = len(entries)

        # All or nothing: without a connection no row is touched this tick
        instance_name = await self._resolver.get_connected_instance()
        if not instance_name:
            logger.warning("No connected WhatsApp instance, skipping retries")
            summary.skipped_no_gateway = True
            return summary

        for entry in entries:
            if entry.id is None or not entry.can_retry(self._max_attempts):
                continue
            try:
                if await self._has_successful_duplicate(entry.appointment_id, entry.template_name, entry.phone):
                    await self._message_logs.mark_retry_failed(
                        entry.id, self._max_attempts, SUPERSEDED_ERROR, self._clock()
                    )
                    summary.superseded += 1
                    continue

                attempt = entry.retry_count + 1
                success = await self._gateway.send_text(instance_name, to_gateway_number(entry.phone), entry.message)
                now = self._clock()

                if success:
                    await self._message_logs.mark_retry_succeeded(entry.id, attempt, now)
                    summary.succeeded += 1
                else:
                    await self._message_logs.mark_retry_failed(
                        entry.id, attempt, f"Retry {attempt}/{self._max_attempts} failed", now
                    )
                summary.retried += 1

            except Exception as e:
                logger.error(f"Error retrying message {entry.id}: {e}", exc_info=True)
                summary.errors += 1

        if summary.retried:
            logger.info(
                f"Retried {summary.retried} message(s): {summary.succeeded} succeeded, "
                f"{summary.still_failing} still failing"
            )

        return summary

    async def _has_successful_duplicate(
        self,
        appointment_id: str | None,
        template_name: str | None,
        phone: str,
    ) -> bool:
        if not appointment_id or not template_name:
            return False
        return await self._message_logs.exists_successful(appointment_id, template_name, phone)

"""
Notification Rule Repository Implementation

SQLAlchemy implementation of INotificationRuleRepository.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from clinicbot.domains.scheduling.domain.entities import NotificationRule
from clinicbot.domains.scheduling.domain.value_objects import TargetRole
from clinicbot.models.db import NotificationRuleRow

logger = logging.getLogger(__name__)


class SQLAlchemyNotificationRuleRepository:
    """Reads active notification rules."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def list_active(self) -> list[NotificationRule]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(NotificationRuleRow).where(NotificationRuleRow.is_active == True)  # noqa: E712
            )
            rows = result.scalars().all()

        rules = []
        for row in rows:
            try:
                rules.append(self._to_entity(row))
            except ValueError:
                logger.warning(f"Ignoring notification rule {row.id} with unknown target_role '{row.target_role}'")
        return rules

    @staticmethod
    def _to_entity(row: NotificationRuleRow) -> NotificationRule:
        return NotificationRule(
            id=str(row.id),
            target_role=TargetRole(row.target_role),
            minutes_before=row.minutes_before,
            template_name=row.template_name,
            provider_id=str(row.provider_id) if row.provider_id else None,
            is_active=row.is_active,
        )

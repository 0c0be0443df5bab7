"""
Message Log Repository Implementation

SQLAlchemy implementation of IMessageLogRepository.
"""

import uuid
from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from clinicbot.domains.scheduling.domain.entities import MessageLogEntry
from clinicbot.domains.scheduling.domain.value_objects import MessageStatus
from clinicbot.models.db import MessageLog


def _as_uuid(value: str | None) -> uuid.UUID | None:
    return uuid.UUID(value) if value else None


class SQLAlchemyMessageLogRepository:
    """Outbound message log: dedup lookups, appends and retry bookkeeping."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def exists_successful(self, appointment_id: str, template_name: str, phone: str) -> bool:
        stmt = (
            select(func.count())
            .select_from(MessageLog)
            .where(
                MessageLog.appointment_id == _as_uuid(appointment_id),
                MessageLog.template_name == template_name,
                MessageLog.phone_number == phone,
                MessageLog.status.in_([s.value for s in MessageStatus.successful()]),
            )
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return (result.scalar() or 0) > 0

    async def add(self, entry: MessageLogEntry) -> MessageLogEntry:
        row = MessageLog(
            id=uuid.uuid4(),
            appointment_id=_as_uuid(entry.appointment_id),
            patient_id=_as_uuid(entry.patient_id),
            template_name=entry.template_name,
            phone_number=entry.phone,
            message=entry.message,
            language=entry.language,
            status=entry.status.value,
            retry_count=entry.retry_count,
            last_retry_at=entry.last_retry_at,
            sent_at=entry.sent_at,
            error=entry.error,
        )
        if entry.created_at is not None:
            row.created_at = entry.created_at

        async with self._session_factory() as session:
            session.add(row)
            await session.commit()

        return self._to_entity(row)

    async def list_retryable(self, max_attempts: int, limit: int) -> list[MessageLogEntry]:
        stmt = (
            select(MessageLog)
            .where(
                MessageLog.status == MessageStatus.FAILED.value,
                MessageLog.retry_count < max_attempts,
            )
            .order_by(MessageLog.created_at.asc())
            .limit(limit)
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return [self._to_entity(row) for row in result.scalars().all()]

    async def mark_retry_succeeded(self, entry_id: str, retry_count: int, at: datetime) -> None:
        await self._update(
            entry_id,
            status=MessageStatus.SENT.value,
            sent_at=at,
            retry_count=retry_count,
            last_retry_at=at,
            error=None,
        )

    async def mark_retry_failed(self, entry_id: str, retry_count: int, error: str, at: datetime) -> None:
        await self._update(entry_id, retry_count=retry_count, last_retry_at=at, error=error)

    async def _update(self, entry_id: str, **values) -> None:
        stmt = update(MessageLog).where(MessageLog.id == uuid.UUID(entry_id)).values(**values)
        async with self._session_factory() as session:
            await session.execute(stmt)
            await session.commit()

    @staticmethod
    def _to_entity(row: MessageLog) -> MessageLogEntry:
        return MessageLogEntry(
            id=str(row.id),
            appointment_id=str(row.appointment_id) if row.appointment_id else None,
            patient_id=str(row.patient_id) if row.patient_id else None,
            template_name=row.template_name,
            phone=row.phone_number,
            message=row.message,
            language=row.language,
            status=MessageStatus(row.status),
            retry_count=row.retry_count or 0,
            last_retry_at=row.last_retry_at,
            sent_at=row.sent_at,
            error=row.error,
            created_at=row.created_at,
        )

"""
Handoff Repository Implementation

SQLAlchemy implementation of IHandoffRepository. Resolution is always a
conditional update on the open statuses, so concurrent resolvers never
overwrite each other's resolved_by.
"""

import uuid
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from clinicbot.domains.scheduling.domain.entities import HandoffSession
from clinicbot.domains.scheduling.domain.value_objects import HandoffStatus
from clinicbot.models.db import HandoffSessionRow

OPEN_STATUSES = [s.value for s in HandoffStatus.open_statuses()]


class SQLAlchemyHandoffRepository:
    """Persisted human-handoff sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def find_open_id(self, phone: str) -> str | None:
        stmt = (
            select(HandoffSessionRow.id)
            .where(
                HandoffSessionRow.patient_phone == phone,
                HandoffSessionRow.status.in_(OPEN_STATUSES),
            )
            .limit(1)
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            found = result.scalars().first()
        return str(found) if found else None

    async def insert(self, handoff: HandoffSession) -> str:
        row = HandoffSessionRow(
            id=uuid.uuid4(),
            patient_phone=handoff.patient_phone,
            patient_id=uuid.UUID(handoff.patient_id) if handoff.patient_id else None,
            patient_name=handoff.patient_name,
            reason=handoff.reason,
            status=handoff.status.value,
            instance_name=handoff.instance_name,
        )
        if handoff.created_at is not None:
            row.created_at = handoff.created_at
        if handoff.last_message_at is not None:
            row.last_message_at = handoff.last_message_at

        async with self._session_factory() as session:
            session.add(row)
            await session.commit()
        return str(row.id)

    async def resolve_by_phone(self, phone: str, resolved_by: str, at: datetime) -> list[str]:
        stmt = (
            update(HandoffSessionRow)
            .where(
                HandoffSessionRow.patient_phone == phone,
                HandoffSessionRow.status.in_(OPEN_STATUSES),
            )
            .values(status=HandoffStatus.RESOLVED.value, resolved_at=at, resolved_by=resolved_by)
            .returning(HandoffSessionRow.id)
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            ids = [str(i) for i in result.scalars().all()]
            await session.commit()
        return ids

    async def resolve_by_id(self, session_id: str, resolved_by: str, at: datetime) -> str | None:
        stmt = (
            update(HandoffSessionRow)
            .where(
                HandoffSessionRow.id == uuid.UUID(session_id),
                HandoffSessionRow.status.in_(OPEN_STATUSES),
            )
            .values(status=HandoffStatus.RESOLVED.value, resolved_at=at, resolved_by=resolved_by)
            .returning(HandoffSessionRow.patient_phone)
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            phone = result.scalars().first()
            await session.commit()
        return phone

    async def touch(self, phone: str, at: datetime) -> None:
        stmt = (
            update(HandoffSessionRow)
            .where(
                HandoffSessionRow.patient_phone == phone,
                HandoffSessionRow.status.in_(OPEN_STATUSES),
            )
            .values(last_message_at=at)
        )
        async with self._session_factory() as session:
            await session.execute(stmt)
            await session.commit()

    async def resolve_stale(self, cutoff: datetime, resolved_by: str, at: datetime) -> list[str]:
        stmt = (
            update(HandoffSessionRow)
            .where(
                HandoffSessionRow.status.in_(OPEN_STATUSES),
                HandoffSessionRow.last_message_at < cutoff,
            )
            .values(status=HandoffStatus.RESOLVED.value, resolved_at=at, resolved_by=resolved_by)
            .returning(HandoffSessionRow.patient_phone)
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            phones = list(result.scalars().all())
            await session.commit()
        return phones

    async def list_open_phones(self) -> list[str]:
        stmt = select(HandoffSessionRow.patient_phone).where(HandoffSessionRow.status.in_(OPEN_STATUSES))
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def list_open(self) -> list[HandoffSession]:
        stmt = (
            select(HandoffSessionRow)
            .where(HandoffSessionRow.status.in_(OPEN_STATUSES))
            .order_by(HandoffSessionRow.created_at.desc())
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return [self._to_entity(row) for row in result.scalars().all()]

    @staticmethod
    def _to_entity(row: HandoffSessionRow) -> HandoffSession:
        return HandoffSession(
            id=str(row.id),
            patient_phone=row.patient_phone,
            patient_id=str(row.patient_id) if row.patient_id else None,
            patient_name=row.patient_name,
            attendant_id=str(row.attendant_id) if row.attendant_id else None,
            reason=row.reason,
            status=HandoffStatus(row.status),
            instance_name=row.instance_name,
            created_at=row.created_at,
            resolved_at=row.resolved_at,
            resolved_by=row.resolved_by,
            last_message_at=row.last_message_at,
        )

"""
Appointment Repository Implementation

SQLAlchemy implementation of IAppointmentRepository. Appointments are read
joined with the patient profile and the provider's profile and returned as
AppointmentSnapshot entities.
"""

import logging
import uuid
from datetime import datetime
from typing import Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from clinicbot.domains.scheduling.domain.entities import AppointmentSnapshot, Party
from clinicbot.domains.scheduling.domain.value_objects import AppointmentStatus, Language
from clinicbot.models.db import AppointmentRow, Profile, Provider

logger = logging.getLogger(__name__)


class SQLAlchemyAppointmentRepository:
    """
    SQLAlchemy implementation of the appointment repository.

    Rows whose patient or provider profile is missing are skipped with a
    warning rather than failing the whole read.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        default_language: Language | str = Language.PT,
    ):
        """
        Initialize repository.

        Args:
            session_factory: Factory for SQLAlchemy async sessions
            default_language: Language assumed when a profile has no English preference
        """
        self._session_factory = session_factory
        self._default_language = Language(default_language)

    def _base_query(self):
        return select(AppointmentRow).options(
            selectinload(AppointmentRow.patient),
            selectinload(AppointmentRow.provider).selectinload(Provider.profile),
        )

    async def list_confirmed_between(self, start: datetime, end: datetime) -> list[AppointmentSnapshot]:
        """Confirmed appointments with start <= scheduled_at < end."""
        stmt = self._base_query().where(
            AppointmentRow.status == AppointmentStatus.CONFIRMED.value,
            AppointmentRow.scheduled_at >= start,
            AppointmentRow.scheduled_at < end,
        )
        return await self._fetch(stmt)

    async def list_by_statuses(self, statuses: Sequence[AppointmentStatus]) -> list[AppointmentSnapshot]:
        stmt = self._base_query().where(AppointmentRow.status.in_([s.value for s in statuses]))
        return await self._fetch(stmt)

    async def transition_status(
        self,
        appointment_id: str,
        new_status: AppointmentStatus,
        expected: Sequence[AppointmentStatus],
    ) -> bool:
        """Conditional update; a concurrent transition makes this a no-op."""
        stmt = (
            update(AppointmentRow)
            .where(
                AppointmentRow.id == uuid.UUID(appointment_id),
                AppointmentRow.status.in_([s.value for s in expected]),
            )
            .values(status=new_status.value)
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            await session.commit()
            return (result.rowcount or 0) > 0

    async def _fetch(self, stmt) -> list[AppointmentSnapshot]:
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            rows = result.scalars().all()

        snapshots = []
        for row in rows:
            snapshot = self._to_entity(row)
            if snapshot is not None:
                snapshots.append(snapshot)
        return snapshots

    def _to_party(self, profile: Profile | None, party_id: uuid.UUID) -> Party | None:
        if profile is None:
            return None
        return Party(
            id=str(party_id),
            first_name=profile.first_name or "",
            last_name=profile.last_name or "",
            phone=profile.phone,
            language=Language.from_preference(profile.preferred_language, self._default_language),
        )

    def _to_entity(self, row: AppointmentRow) -> AppointmentSnapshot | None:
        patient = self._to_party(row.patient, row.patient_id)
        provider_profile = row.provider.profile if row.provider is not None else None
        provider = self._to_party(provider_profile, row.provider_id)

        if patient is None or provider is None:
            logger.warning(f"Appointment {row.id} is missing patient or provider profile, skipping")
            return None

        try:
            status = AppointmentStatus(row.status)
        except ValueError:
            logger.warning(f"Appointment {row.id} has unknown status '{row.status}', skipping")
            return None

        return AppointmentSnapshot(
            id=str(row.id),
            scheduled_at=row.scheduled_at,
            status=status,
            patient=patient,
            provider=provider,
            type=row.type or "",
            duration_minutes=row.duration,
        )

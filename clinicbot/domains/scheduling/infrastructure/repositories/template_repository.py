"""
Template Repository Implementation

SQLAlchemy implementation of ITemplateRepository.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from clinicbot.models.db import MessageTemplate


class SQLAlchemyTemplateRepository:
    """Looks up active template bodies by (name, language)."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get_active_content(self, name: str, language: str) -> str | None:
        stmt = (
            select(MessageTemplate.content)
            .where(
                MessageTemplate.name == name,
                MessageTemplate.language == language,
                MessageTemplate.is_active == True,  # noqa: E712
            )
            .limit(1)
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return result.scalars().first()

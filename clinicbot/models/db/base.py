"""
Base models and mixins for the database
"""

from datetime import UTC, datetime

from sqlalchemy import DateTime
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(UTC)


class CreatedAtMixin:
    """Mixin adding a timezone-aware creation timestamp."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

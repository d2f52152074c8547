"""
Base Classes and Mixins
------------------------

Foundational ORM classes for the caseledger database.

Classes:
    - Base: Declarative base for all SQLAlchemy models
    - GuildEntityMixin: Primary key, guild scope and timestamps shared by
      every guild-scoped record

Cross-references between records are plain columns. No table declares a
ForeignKey: the store is denormalized and the integrity engine is what
keeps references honest.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from datetime import datetime, timezone

# --- Third party ---
from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


# --- Base ORM class ---
class Base(DeclarativeBase):
    """
    Base class for all ORM models.

    Serves as the declarative base for SQLAlchemy models and provides
    access to the metadata object for table creation.
    """

    pass


# --- Guild scope ---
class GuildEntityMixin:
    """
    Mixin providing identity, guild scope and timestamps.

    Attributes:
        id: Surrogate primary key
        guild_id: Tenant the record belongs to
        created_at: Creation timestamp (UTC)
        updated_at: Last modification timestamp (UTC)
    """

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    guild_id: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(id={self.id}, guild_id={self.guild_id})>"

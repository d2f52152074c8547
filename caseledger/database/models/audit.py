"""
Audit Log
---------

Append-only record of automated changes. The integrity engine writes one
row per successful repair.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from datetime import datetime
from typing import Any, Dict, Optional

# --- Third party ---
from sqlalchemy import JSON, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

# --- Local imports ---
from .base import Base, utc_now


class AuditLog(Base):
    """
    Audit log entry.

    Attributes:
        guild_id: Guild of the changed record
        action: Action tag (e.g. "integrity_repair")
        actor_id: Who made the change ("SYSTEM" for automated repairs)
        entity_type: Kind of record changed
        entity_id: Id of the record changed
        message: Human-readable description
        details: Structured extra data
        timestamp: When the change happened
    """

    __tablename__ = "audit_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    guild_id: Mapped[Optional[str]] = mapped_column(String(32), nullable=True, index=True)
    action: Mapped[str] = mapped_column(String(64), nullable=False)
    actor_id: Mapped[str] = mapped_column(String(32), nullable=False, default="SYSTEM")
    entity_type: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    entity_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    message: Mapped[str] = mapped_column(Text, nullable=False, default="")
    details: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )

    def __repr__(self) -> str:
        return (
            f"<AuditLog(id={self.id}, action={self.action}, "
            f"{self.entity_type}:{self.entity_id})>"
        )

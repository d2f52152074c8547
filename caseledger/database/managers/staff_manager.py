#!/usr/bin/env python3
"""
staff_manager.py
----------------
Manager for Staff records.

Other records refer to staff by the external ``user_id`` rather than by
primary key, so besides the generic guild contract this manager resolves
staff by (guild_id, user_id).
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from caseledger.core.logging_manager import LedgerLogger
from caseledger.database.decorators import handle_db_errors
from caseledger.database.models import EntityType, Staff, StaffStatus
from .guild_manager import GuildEntityConfig, GuildEntityManager

STAFF_CONFIG = GuildEntityConfig(
    model_class=Staff,
    entity_type=EntityType.STAFF,
    required_fields=["guild_id", "user_id", "role"],
    datetime_fields=["hired_at"],
)


class StaffManager(GuildEntityManager):
    """Manager for Staff records."""

    def __init__(self, session: Session, logger: Optional[LedgerLogger] = None):
        super().__init__(session, logger, STAFF_CONFIG)

    @handle_db_errors
    def find_by_user_id(self, guild_id: str, user_id: str) -> Optional[Staff]:
        """
        Resolve a staff member by their external user id.

        Args:
            guild_id: Guild to search
            user_id: External user id

        Returns:
            Staff record, or None if the user is not staff in that guild
        """
        if not user_id:
            return None
        return (
            self.session.query(Staff)
            .filter(Staff.guild_id == str(guild_id), Staff.user_id == str(user_id))
            .order_by(Staff.id)
            .first()
        )

    def create(self, metadata: Dict[str, Any]) -> Staff:
        """Create a staff record; status defaults to active."""
        values = dict(metadata)
        values.setdefault("status", StaffStatus.ACTIVE.value)
        values.setdefault("promotion_history", [])
        return super().create(values)

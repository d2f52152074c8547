#!/usr/bin/env python3
"""
case_manager.py
---------------
Manager for Case records.

Adds the two lawyer-centric lookups the staff rules need: cases led by a
user and cases a user is assigned to.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from caseledger.core.logging_manager import LedgerLogger
from caseledger.database.decorators import handle_db_errors
from caseledger.database.models import Case, CaseStatus, EntityType
from .guild_manager import GuildEntityConfig, GuildEntityManager

CASE_CONFIG = GuildEntityConfig(
    model_class=Case,
    entity_type=EntityType.CASE,
    required_fields=["guild_id", "case_number", "client_id"],
    datetime_fields=["closed_at"],
)


class CaseManager(GuildEntityManager):
    """Manager for Case records."""

    def __init__(self, session: Session, logger: Optional[LedgerLogger] = None):
        super().__init__(session, logger, CASE_CONFIG)

    @handle_db_errors
    def find_by_lead_attorney(self, guild_id: str, user_id: str) -> List[Case]:
        """Cases in a guild whose lead attorney is the given user."""
        return (
            self.session.query(Case)
            .filter(Case.guild_id == str(guild_id), Case.lead_attorney_id == str(user_id))
            .order_by(Case.id)
            .all()
        )

    def find_assigned_to_lawyer(self, guild_id: str, user_id: str) -> List[Case]:
        """
        Cases in a guild the given user is assigned to.

        assigned_lawyer_ids is a JSON column, so membership is checked in
        Python over the guild's cases.
        """
        return [
            case
            for case in self.find_by_guild_id(guild_id)
            if str(user_id) in (case.assigned_lawyer_ids or [])
        ]

    def create(self, metadata: Dict[str, Any]) -> Case:
        """Create a case; status defaults to pending, no lawyers assigned."""
        values = dict(metadata)
        values.setdefault("status", CaseStatus.PENDING.value)
        values.setdefault("assigned_lawyer_ids", [])
        return super().create(values)

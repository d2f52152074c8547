#!/usr/bin/env python3
"""
audit_manager.py
----------------
Append-only audit sink backed by the audit_logs table.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from caseledger.core.exceptions import ValidationError
from caseledger.core.validators import DataValidator
from caseledger.database.decorators import (
    handle_db_errors,
    log_database_operation,
    validate_metadata,
)
from caseledger.database.models import AuditLog
from .base_manager import BaseManager

_ENTRY_FIELDS = (
    "guild_id",
    "action",
    "actor_id",
    "entity_type",
    "entity_id",
    "message",
    "details",
    "timestamp",
)


class AuditLogManager(BaseManager):
    """Writes and lists audit log entries."""

    @handle_db_errors
    @log_database_operation("audit_add")
    @validate_metadata(["action"])
    def add(self, entry: Dict[str, Any]) -> AuditLog:
        """
        Append an audit entry.

        Args:
            entry: Mapping with at least ``action``; other keys among
                guild_id, actor_id, entity_type, entity_id, message,
                details, timestamp

        Returns:
            The stored AuditLog row

        Raises:
            ValidationError: If ``action`` is missing or unknown keys are given
        """
        unknown = set(entry) - set(_ENTRY_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown audit entry fields: {sorted(unknown)}")

        values = dict(entry)
        if values.get("entity_id") is not None:
            values["entity_id"] = str(values["entity_id"])
        if values.get("guild_id") is not None:
            values["guild_id"] = str(values["guild_id"])
        if "timestamp" in values:
            values["timestamp"] = DataValidator.normalize_datetime(values["timestamp"])
        values.setdefault("details", {})

        def _do_add():
            row = AuditLog(**{k: v for k, v in values.items() if v is not None})
            self.session.add(row)
            self.session.flush()
            return row

        return self._execute_with_retry(_do_add)

    @handle_db_errors
    def find_by_guild_id(self, guild_id: str, action: Optional[str] = None) -> List[AuditLog]:
        """List a guild's audit entries, oldest first."""
        query = self.session.query(AuditLog).filter(AuditLog.guild_id == str(guild_id))
        if action:
            query = query.filter(AuditLog.action == action)
        return query.order_by(AuditLog.id).all()

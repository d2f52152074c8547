#!/usr/bin/env python3
"""
repair.py
---------
Applies RepairActions through the entity accessors.

List actions re-read the record and compute the new list from its current
value, so applying an action twice has the same effect as applying it
once.
"""
from __future__ import annotations

from typing import Any, Optional

from caseledger.core.exceptions import RepairError
from caseledger.core.logging_manager import LedgerLogger, LogScope, safe_logger
from .accessors import EntityAccessors
from .issues import RepairAction, RepairKind


class RepairExecutor:
    """Interprets repair actions against an EntityAccessors bundle."""

    def __init__(self, accessors: EntityAccessors, logger: Optional[LedgerLogger] = None):
        self.accessors = accessors
        self.logger = logger

    def apply(self, action: RepairAction) -> Any:
        """
        Apply one action.

        Args:
            action: Action to apply

        Returns:
            The record after the change

        Raises:
            RepairError: If the record no longer exists or the action does
                not fit it
        """
        accessor = self.accessors.for_type(action.entity_type)

        if action.kind is RepairKind.SET_FIELDS:
            updated = accessor.update(action.entity_id, dict(action.changes))
        else:
            record = accessor.find_by_id(action.entity_id)
            if record is None:
                raise self._missing(action)
            if not hasattr(record, action.list_field or ""):
                raise RepairError(
                    f"{action.entity_type.value} {action.entity_id} "
                    f"has no field '{action.list_field}'"
                )
            current = list(getattr(record, action.list_field) or [])

            if action.kind is RepairKind.REMOVE_FROM_LIST:
                new_values = [v for v in current if v != action.value]
            else:
                new_values = current if action.value in current else current + [action.value]

            if new_values == current:
                safe_logger(self.logger).log_debug(
                    "Repair already applied", {"action": action.describe()}, self._scope(action)
                )
                return record
            updated = accessor.update(action.entity_id, {action.list_field: new_values})

        if updated is None:
            raise self._missing(action)

        safe_logger(self.logger).log_debug(
            "Repair applied", {"action": action.describe()}, self._scope(action)
        )
        return updated

    @staticmethod
    def _scope(action: RepairAction) -> LogScope:
        return LogScope.of(
            "apply_repair", entity_type=action.entity_type, entity_id=action.entity_id
        )

    @staticmethod
    def _missing(action: RepairAction) -> RepairError:
        return RepairError(f"{action.entity_type.value} {action.entity_id} not found")

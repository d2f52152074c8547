#!/usr/bin/env python3
"""
issues.py
---------
Value types produced by the integrity engine.

Types:
    - Severity: critical | warning | info
    - RepairKind / RepairAction: inspectable description of a corrective
      mutation (set fields, remove a value from a list field, append a
      value to a list field)
    - IntegrityIssue: one detected inconsistency
    - IntegrityReport: immutable result of a guild scan
    - FailedRepair / RepairResult: outcome of a repair batch

Repair actions are data, not callables: the engine's RepairExecutor
interprets them against the entity accessors. This keeps issues printable,
serialisable and testable without a database.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import dataclasses
from collections import Counter
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

# --- Local imports ---
from caseledger.database.models.enums import EntityType

EntityId = Union[int, str]


class Severity(str, Enum):
    """Issue severity, most severe first."""

    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"

    @property
    def rank(self) -> int:
        """Sort key: 0 for critical, 2 for info."""
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {Severity.CRITICAL: 0, Severity.WARNING: 1, Severity.INFO: 2}


class RepairKind(str, Enum):
    """Kinds of corrective mutation."""

    SET_FIELDS = "set_fields"
    REMOVE_FROM_LIST = "remove_from_list"
    APPEND_TO_LIST = "append_to_list"


@dataclasses.dataclass(frozen=True)
class RepairAction:
    """
    A single-record corrective mutation.

    Attributes:
        kind: What to do
        entity_type: Type of the record to change
        entity_id: Id of the record to change
        changes: Field -> new value (SET_FIELDS only; None clears a field)
        list_field: List-valued field (REMOVE_FROM_LIST / APPEND_TO_LIST)
        value: Value to remove or append

    All kinds are idempotent: applying an action a second time leaves the
    record unchanged.
    """

    kind: RepairKind
    entity_type: EntityType
    entity_id: EntityId
    changes: Mapping[str, Any] = dataclasses.field(default_factory=dict)
    list_field: Optional[str] = None
    value: Any = None

    @classmethod
    def set_fields(
        cls, entity_type: EntityType, entity_id: EntityId, **changes: Any
    ) -> "RepairAction":
        """Action that overwrites the given fields."""
        return cls(RepairKind.SET_FIELDS, entity_type, entity_id, changes=dict(changes))

    @classmethod
    def remove_from_list(
        cls, entity_type: EntityType, entity_id: EntityId, list_field: str, value: Any
    ) -> "RepairAction":
        """Action that removes every occurrence of a value from a list field."""
        return cls(
            RepairKind.REMOVE_FROM_LIST, entity_type, entity_id,
            list_field=list_field, value=value,
        )

    @classmethod
    def append_to_list(
        cls, entity_type: EntityType, entity_id: EntityId, list_field: str, value: Any
    ) -> "RepairAction":
        """Action that appends a value to a list field if absent."""
        return cls(
            RepairKind.APPEND_TO_LIST, entity_type, entity_id,
            list_field=list_field, value=value,
        )

    def describe(self) -> str:
        """One-line human-readable description."""
        target = f"{self.entity_type.value} {self.entity_id}"
        if self.kind is RepairKind.SET_FIELDS:
            assignments = ", ".join(f"{k}={v!r}" for k, v in self.changes.items())
            return f"set {assignments} on {target}"
        if self.kind is RepairKind.REMOVE_FROM_LIST:
            return f"remove {self.value!r} from {self.list_field} on {target}"
        return f"append {self.value!r} to {self.list_field} on {target}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "entity_type": self.entity_type.value,
            "entity_id": self.entity_id,
            "changes": dict(self.changes),
            "list_field": self.list_field,
            "value": self.value,
        }


@dataclasses.dataclass(frozen=True)
class IntegrityIssue:
    """
    One detected inconsistency.

    Attributes:
        severity: How bad it is
        entity_type: Type of the offending record
        entity_id: Id of the offending record
        message: Human-readable description
        field: Offending field, if any
        can_auto_repair: Whether repair_action may be applied unattended
        repair_action: Corrective mutation, if any
        guild_id: Guild of the offending record
        rule_name: Rule that produced the issue
    """

    severity: Severity
    entity_type: EntityType
    entity_id: Optional[EntityId]
    message: str
    field: Optional[str] = None
    can_auto_repair: bool = False
    repair_action: Optional[RepairAction] = None
    guild_id: Optional[str] = None
    rule_name: Optional[str] = None

    @property
    def is_repairable(self) -> bool:
        """Auto-repairable and carrying an action to apply."""
        return self.can_auto_repair and self.repair_action is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "severity": self.severity.value,
            "entity_type": self.entity_type.value,
            "entity_id": self.entity_id,
            "field": self.field,
            "message": self.message,
            "can_auto_repair": self.can_auto_repair,
            "repair_action": self.repair_action.to_dict() if self.repair_action else None,
            "guild_id": self.guild_id,
            "rule_name": self.rule_name,
        }


@dataclasses.dataclass(frozen=True)
class IntegrityReport:
    """
    Result of one guild scan. Immutable once returned.

    Attributes:
        guild_id: Guild scanned
        issues: Issues in discovery order
        scan_started_at: Scan start (UTC)
        scan_completed_at: Scan end (UTC)
        total_entities_scanned: Number of records evaluated
    """

    guild_id: str
    issues: Tuple[IntegrityIssue, ...]
    scan_started_at: datetime
    scan_completed_at: datetime
    total_entities_scanned: int = 0

    @property
    def issues_by_severity(self) -> Dict[str, int]:
        counts = Counter(issue.severity for issue in self.issues)
        return {severity.value: counts.get(severity, 0) for severity in Severity}

    @property
    def issues_by_entity_type(self) -> Dict[str, int]:
        counts = Counter(issue.entity_type.value for issue in self.issues)
        return dict(counts)

    @property
    def repairable_issues(self) -> int:
        return sum(1 for issue in self.issues if issue.is_repairable)

    @property
    def status(self) -> str:
        """healthy, warning, or critical."""
        if not self.issues:
            return "healthy"
        if any(issue.severity is Severity.CRITICAL for issue in self.issues):
            return "critical"
        return "warning"

    @property
    def duration_seconds(self) -> float:
        return (self.scan_completed_at - self.scan_started_at).total_seconds()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "guild_id": self.guild_id,
            "status": self.status,
            "scan_started_at": self.scan_started_at.isoformat(),
            "scan_completed_at": self.scan_completed_at.isoformat(),
            "total_entities_scanned": self.total_entities_scanned,
            "issues_by_severity": self.issues_by_severity,
            "issues_by_entity_type": self.issues_by_entity_type,
            "repairable_issues": self.repairable_issues,
            "issues": [issue.to_dict() for issue in self.issues],
        }


@dataclasses.dataclass(frozen=True)
class FailedRepair:
    """An issue whose repair raised, with the error message verbatim."""

    issue: IntegrityIssue
    error: str


@dataclasses.dataclass
class RepairResult:
    """
    Outcome of one repair batch.

    Attributes:
        total_issues_found: Issues handed in, repairable or not
        issues_repaired: Repairs applied (or that would be, in a dry run)
        issues_failed: Repairs that raised
        failed_repairs: One entry per failure
        repaired_issues: Issues whose repair succeeded
        dry_run: Whether the store was left untouched
    """

    total_issues_found: int = 0
    issues_repaired: int = 0
    issues_failed: int = 0
    failed_repairs: List[FailedRepair] = dataclasses.field(default_factory=list)
    repaired_issues: List[IntegrityIssue] = dataclasses.field(default_factory=list)
    dry_run: bool = False

    @property
    def issues_skipped(self) -> int:
        """Issues neither repaired nor failed (not auto-repairable)."""
        return self.total_issues_found - self.issues_repaired - self.issues_failed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_issues_found": self.total_issues_found,
            "issues_repaired": self.issues_repaired,
            "issues_failed": self.issues_failed,
            "issues_skipped": self.issues_skipped,
            "dry_run": self.dry_run,
            "failed_repairs": [
                {"issue": failure.issue.to_dict(), "error": failure.error}
                for failure in self.failed_repairs
            ],
        }

#!/usr/bin/env python3
"""
accessors.py
------------
Read/write contracts the integrity engine needs from the entity store.

The engine never touches the database directly. It is handed an
EntityAccessors bundle whose members satisfy these protocols; the
SQLAlchemy managers in caseledger.database.managers do, and so does any
test double with the same methods.

The ValidationContext carries everything a rule may look at while
evaluating one entity: the guild, the accessors, the configuration and a
per-scan memo of looked-up related records.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

from caseledger.core.exceptions import ValidationError
from caseledger.core.validators import DataValidator
from caseledger.database.models.enums import EntityType
from .config import IntegrityConfig


class EntityAccessor(Protocol):
    """Lookup and update of one entity type."""

    def find_by_id(self, entity_id: Any) -> Optional[Any]: ...

    def find_by_guild_id(self, guild_id: str) -> List[Any]: ...

    def update(self, entity_id: Any, changes: Dict[str, Any]) -> Optional[Any]: ...


class StaffAccessor(EntityAccessor, Protocol):
    def find_by_user_id(self, guild_id: str, user_id: str) -> Optional[Any]: ...


class CaseAccessor(EntityAccessor, Protocol):
    def find_by_lead_attorney(self, guild_id: str, user_id: str) -> List[Any]: ...

    def find_assigned_to_lawyer(self, guild_id: str, user_id: str) -> List[Any]: ...


class AuditSink(Protocol):
    def add(self, entry: Dict[str, Any]) -> Any: ...


@dataclass
class EntityAccessors:
    """
    The engine's collaborators: one accessor per entity type plus the
    audit sink repairs are recorded in.

    Attributes:
        staff: Staff records, resolvable by user id
        cases: Case records, searchable by attorney
        jobs, applications, retainers, feedback, reminders: Plain accessors
        audit_log: Optional audit sink; repairs are not audited without one
    """

    staff: StaffAccessor
    cases: CaseAccessor
    jobs: EntityAccessor
    applications: EntityAccessor
    retainers: EntityAccessor
    feedback: EntityAccessor
    reminders: EntityAccessor
    audit_log: Optional[AuditSink] = None

    def for_type(self, entity_type: Any) -> EntityAccessor:
        """
        Map an entity type to its accessor.

        Raises:
            ValidationError: If the entity type is unknown
        """
        entity_type = DataValidator.normalize_enum(entity_type, EntityType)
        return {
            EntityType.STAFF: self.staff,
            EntityType.CASE: self.cases,
            EntityType.JOB: self.jobs,
            EntityType.APPLICATION: self.applications,
            EntityType.RETAINER: self.retainers,
            EntityType.FEEDBACK: self.feedback,
            EntityType.REMINDER: self.reminders,
        }[entity_type]


# Order in which a guild scan fetches and evaluates entity types
SCAN_ORDER: Tuple[EntityType, ...] = (
    EntityType.STAFF,
    EntityType.CASE,
    EntityType.APPLICATION,
    EntityType.JOB,
    EntityType.RETAINER,
    EntityType.FEEDBACK,
    EntityType.REMINDER,
)

VALIDATION_LEVELS = ("strict", "lenient")


@dataclass
class ValidationContext:
    """
    Evaluation context for one scan or batch.

    Attributes:
        guild_id: Guild being validated
        accessors: Entity store
        config: Thresholds and defaults used by the built-in rules
        validation_level: 'strict' runs every rule; 'lenient' skips rules
            marked strict_only
        repair_mode: Set when evaluating on behalf of a repair run
        related_entities: Memo of related records looked up by rules
    """

    guild_id: str
    accessors: EntityAccessors
    config: IntegrityConfig = field(default_factory=IntegrityConfig)
    validation_level: str = "strict"
    repair_mode: bool = False
    related_entities: Dict[Tuple[str, Any], Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.validation_level not in VALIDATION_LEVELS:
            raise ValidationError(
                f"Unknown validation level: '{self.validation_level}' "
                f"(expected one of {', '.join(VALIDATION_LEVELS)})"
            )

    @property
    def is_strict(self) -> bool:
        return self.validation_level == "strict"

    def _memo(self, key: Tuple[str, Any], loader: Callable[[], Any]) -> Any:
        if key not in self.related_entities:
            self.related_entities[key] = loader()
        return self.related_entities[key]

    def find_staff(self, user_id: Any) -> Optional[Any]:
        """Staff record of the context guild with this user id, or None."""
        if user_id is None:
            return None
        return self._memo(
            ("staff", str(user_id)),
            lambda: self.accessors.staff.find_by_user_id(self.guild_id, str(user_id)),
        )

    def find_job(self, job_id: Any) -> Optional[Any]:
        """Job with this id in the context guild, or None."""
        return self._find_in_guild("job", self.accessors.jobs, job_id)

    def find_case(self, case_id: Any) -> Optional[Any]:
        """Case with this id in the context guild, or None."""
        return self._find_in_guild("case", self.accessors.cases, case_id)

    def _find_in_guild(self, kind: str, accessor: EntityAccessor, entity_id: Any) -> Optional[Any]:
        if entity_id is None:
            return None
        record = self._memo((kind, entity_id), lambda: accessor.find_by_id(entity_id))
        # A record owned by another guild does not resolve here
        if record is not None and str(getattr(record, "guild_id", self.guild_id)) != str(self.guild_id):
            return None
        return record

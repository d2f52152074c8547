#!/usr/bin/env python3
"""
validator.py
------------
Cross-entity referential-integrity validation and repair.

The CrossEntityValidator checks the records of a guild against each other
(staff, cases, jobs, applications, retainers, feedback, reminders),
reports every inconsistency as an IntegrityIssue and can apply the
corrective actions attached to the repairable ones.

Key Features:
    - Priority-ordered rule registry with replaceable custom rules
    - Per-entity result cache with TTL, cleared after every repair run
    - Guild scans that either read everything or fail as a whole
    - Isolated rule failures: a raising rule is logged and skipped
    - Severity-ordered, idempotent repairs, each recorded in the audit log
    - Pre-write validation of single entities or batches

Usage:
    from caseledger.database import CaseLedgerDB

    db = CaseLedgerDB(db_path)
    with db.session_scope():
        report = db.integrity.scan_for_integrity_issues("1234")
        if report.status != "healthy":
            result = db.integrity.repair_integrity_issues(list(report.issues))
            print(f"Repaired {result.issues_repaired} of {result.total_issues_found}")

Report Structure (IntegrityReport.to_dict()):
    {
        "guild_id": "1234",
        "status": "healthy" | "warning" | "critical",
        "total_entities_scanned": 42,
        "issues_by_severity": {"critical": 1, "warning": 0, "info": 0},
        "issues_by_entity_type": {"case": 1},
        "repairable_issues": 1,
        "issues": [...]
    }

Notes:
    - Scans are read-only; only repair_integrity_issues writes
    - Rule exceptions never propagate; accessor exceptions during a scan do,
      as IntegrityScanError
    - The cache is keyed by entity, not by content: callers that change
      records outside repair_integrity_issues should clear it
"""
from __future__ import annotations

import dataclasses
from datetime import datetime, timezone
from typing import Any, Dict, Hashable, Iterable, List, Optional, Sequence, Tuple

from caseledger.core.exceptions import IntegrityScanError, ValidationError
from caseledger.core.logging_manager import LedgerLogger, LogScope, safe_logger
from caseledger.core.validators import DataValidator
from caseledger.database.decorators import log_database_operation
from caseledger.database.models.enums import EntityType
from .accessors import SCAN_ORDER, EntityAccessors, ValidationContext
from .builtin_rules import builtin_rules, check_lead_in_assigned
from .cache import ValidationCache
from .config import IntegrityConfig
from .issues import (
    FailedRepair,
    IntegrityIssue,
    IntegrityReport,
    RepairResult,
)
from .repair import RepairExecutor
from .rules import RuleRegistry, ValidationRule

OPERATIONS = ("create", "update", "delete")

REPAIR_AUDIT_ACTION = "integrity_repair"
SYSTEM_ACTOR = "SYSTEM"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CrossEntityValidator:
    """
    Validation and repair engine for guild-scoped records.

    Attributes:
        accessors: Entity store the engine reads and repairs
        config: Thresholds and defaults for the built-in rules
        logger: Optional logger
        registry: Rules by name and entity type
        cache: Evaluation result cache
    """

    def __init__(
        self,
        accessors: EntityAccessors,
        config: Optional[IntegrityConfig] = None,
        logger: Optional[LedgerLogger] = None,
        rules: Optional[Sequence[ValidationRule]] = None,
        include_builtin_rules: bool = True,
    ) -> None:
        """
        Initialize the engine.

        Args:
            accessors: Entity store
            config: Configuration (defaults if None)
            logger: Optional logger for engine operations
            rules: Extra rules registered after the built-in ones
            include_builtin_rules: Register the built-in rule set
        """
        self.accessors = accessors
        self.config = config or IntegrityConfig()
        self.logger = logger
        self.registry = RuleRegistry(builtin_rules() if include_builtin_rules else None)
        for rule in rules or ():
            self.registry.register(rule)
        self.cache = ValidationCache(self.config.cache_ttl_seconds)

    # -------------------------------------------------------------------------
    # Rule management
    # -------------------------------------------------------------------------

    def add_custom_rule(self, rule: ValidationRule) -> None:
        """
        Register a rule, replacing any rule with the same name.

        Cached results are dropped since they no longer reflect the rule set.

        Raises:
            RuleRegistrationError: If the rule is malformed
        """
        replaced = self.registry.register(rule)
        self.cache.clear()
        log = safe_logger(self.logger)
        scope = LogScope.of(entity_type=rule.entity_type, rule=rule.name)
        log.log_info(
            "Validation rule registered",
            {"priority": rule.priority, "replaced": replaced is not None},
            scope,
        )
        missing = self.registry.missing_dependencies().get(rule.name)
        if missing:
            log.log_warning(
                "Validation rule depends on unregistered rules", {"missing": missing}, scope
            )

    def remove_rule(self, name: str) -> bool:
        """Unregister a rule by name. Returns False if there was none."""
        removed = self.registry.unregister(name)
        if removed:
            self.cache.clear()
            safe_logger(self.logger).log_info(
                "Validation rule removed", scope=LogScope.of(rule=name)
            )
        return removed

    def get_validation_rules(self) -> List[ValidationRule]:
        """All registered rules in registration order."""
        return self.registry.all_rules()

    def get_rules_for(self, entity_type: Any) -> List[ValidationRule]:
        """Rules of one entity type in evaluation order."""
        return self.registry.rules_for(entity_type)

    def clear_validation_cache(self) -> None:
        self.cache.clear()
        safe_logger(self.logger).log_debug("Validation cache cleared")

    # -------------------------------------------------------------------------
    # Evaluation
    # -------------------------------------------------------------------------

    def create_context(
        self,
        guild_id: Any,
        validation_level: str = "strict",
        repair_mode: bool = False,
    ) -> ValidationContext:
        """Fresh evaluation context for a guild."""
        return ValidationContext(
            guild_id=str(guild_id),
            accessors=self.accessors,
            config=self.config,
            validation_level=validation_level,
            repair_mode=repair_mode,
        )

    @staticmethod
    def _cache_key(
        entity: Any, entity_type: EntityType, context: ValidationContext
    ) -> Optional[Hashable]:
        entity_id = getattr(entity, "id", None)
        if entity_id is None:
            return None
        return (entity_type.value, entity_id, context.validation_level)

    def evaluate(
        self,
        entity: Any,
        entity_type: Any,
        context: ValidationContext,
        use_cache: bool = True,
    ) -> List[IntegrityIssue]:
        """
        Run every applicable rule against one entity.

        Args:
            entity: Record to check
            entity_type: Its EntityType (or type name)
            context: Evaluation context
            use_cache: Read and write the result cache

        Returns:
            Issues in rule order. A rule that raises is logged and
            contributes nothing.

        Raises:
            ValidationError: If the entity type is unknown
        """
        entity_type = DataValidator.normalize_enum(entity_type, EntityType)
        key = self._cache_key(entity, entity_type, context) if use_cache else None
        if key is not None:
            cached = self.cache.get(key)
            if cached is not None:
                return cached

        issues: List[IntegrityIssue] = []
        for rule in self.registry.rules_for(entity_type):
            if rule.strict_only and not context.is_strict:
                continue
            try:
                produced = rule.validate(entity, context) or []
            except Exception as e:
                safe_logger(self.logger).log_error(
                    e,
                    scope=LogScope.of(
                        "evaluate_rule",
                        guild_id=context.guild_id,
                        entity_type=entity_type,
                        entity_id=getattr(entity, "id", None),
                        rule=rule.name,
                    ),
                )
                continue
            for issue in produced:
                issues.append(self._attribute(issue, rule, entity))

        if key is not None:
            self.cache.set(key, issues)
        return issues

    @staticmethod
    def _attribute(issue: IntegrityIssue, rule: ValidationRule, entity: Any) -> IntegrityIssue:
        """Fill in rule name and guild id when a rule left them out."""
        updates: Dict[str, Any] = {}
        if issue.rule_name is None:
            updates["rule_name"] = rule.name
        if issue.guild_id is None and getattr(entity, "guild_id", None) is not None:
            updates["guild_id"] = str(entity.guild_id)
        return dataclasses.replace(issue, **updates) if updates else issue

    # -------------------------------------------------------------------------
    # Scans
    # -------------------------------------------------------------------------

    def _fetch_guild(self, guild_id: str) -> List[Tuple[EntityType, List[Any]]]:
        """
        Read every entity type of a guild.

        Raises:
            IntegrityScanError: If any read fails
        """
        fetched: List[Tuple[EntityType, List[Any]]] = []
        for entity_type in SCAN_ORDER:
            accessor = self.accessors.for_type(entity_type)
            try:
                records = list(accessor.find_by_guild_id(guild_id) or [])
            except Exception as e:
                raise IntegrityScanError(
                    f"Failed to load {entity_type.value} records for guild {guild_id}: {e}",
                    guild_id=guild_id,
                    entity_type=entity_type,
                ) from e
            fetched.append((entity_type, records))
        return fetched

    def _scan(
        self, guild_id: Any, validation_level: str
    ) -> Tuple[List[IntegrityIssue], int, ValidationContext, List[Tuple[EntityType, List[Any]]]]:
        context = self.create_context(guild_id, validation_level)
        fetched = self._fetch_guild(context.guild_id)

        issues: List[IntegrityIssue] = []
        scanned = 0
        for entity_type, records in fetched:
            for record in records:
                issues.extend(self.evaluate(record, entity_type, context))
                scanned += 1
        return issues, scanned, context, fetched

    @log_database_operation("integrity_scan")
    def scan_for_integrity_issues(
        self, guild_id: Any, validation_level: str = "strict"
    ) -> IntegrityReport:
        """
        Evaluate every record of a guild.

        Args:
            guild_id: Guild to scan
            validation_level: 'strict' or 'lenient'

        Returns:
            IntegrityReport (no issues for an empty guild)

        Raises:
            IntegrityScanError: If reading the guild's records fails
        """
        started_at = _utc_now()
        issues, scanned, _, _ = self._scan(guild_id, validation_level)
        report = IntegrityReport(
            guild_id=str(guild_id),
            issues=tuple(issues),
            scan_started_at=started_at,
            scan_completed_at=_utc_now(),
            total_entities_scanned=scanned,
        )
        self._log_report("integrity_scan_report", report)
        return report

    @log_database_operation("deep_integrity_check")
    def perform_deep_integrity_check(
        self, guild_id: Any, validation_level: str = "strict"
    ) -> IntegrityReport:
        """
        Scan a guild, then run the guild-wide checks on top.

        Currently adds: case lead attorney missing from the assigned
        lawyers list (warning, repaired by appending the lead).

        Raises:
            IntegrityScanError: If reading the guild's records fails
        """
        started_at = _utc_now()
        issues, scanned, context, fetched = self._scan(guild_id, validation_level)

        records = dict(fetched)
        for case in records.get(EntityType.CASE, []):
            try:
                produced = check_lead_in_assigned(case, context)
            except Exception as e:
                safe_logger(self.logger).log_error(
                    e,
                    scope=LogScope.of(
                        "deep_check",
                        guild_id=context.guild_id,
                        entity_type=EntityType.CASE,
                        entity_id=getattr(case, "id", None),
                        rule="case-lead-in-assigned",
                    ),
                )
                continue
            issues.extend(
                dataclasses.replace(issue, rule_name="case-lead-in-assigned")
                for issue in produced
            )

        report = IntegrityReport(
            guild_id=str(guild_id),
            issues=tuple(issues),
            scan_started_at=started_at,
            scan_completed_at=_utc_now(),
            total_entities_scanned=scanned,
        )
        self._log_report("deep_integrity_check_report", report)
        return report

    def _log_report(self, operation: str, report: IntegrityReport) -> None:
        log = safe_logger(self.logger)
        scope = LogScope.of(guild_id=report.guild_id)
        details = {
            "status": report.status,
            "entities": report.total_entities_scanned,
            "issues": report.issues_by_severity,
            "repairable": report.repairable_issues,
        }
        log.log_operation(operation, details, scope)
        if report.status == "critical":
            log.log_warning("Critical integrity issues found", details, scope)

    # -------------------------------------------------------------------------
    # Repair
    # -------------------------------------------------------------------------

    @log_database_operation("integrity_repair")
    def repair_integrity_issues(
        self, issues: Iterable[IntegrityIssue], dry_run: bool = False
    ) -> RepairResult:
        """
        Apply the repair actions of auto-repairable issues.

        Issues are handled most severe first; issues that are not
        auto-repairable are counted but left alone. A failing repair is
        recorded and processing continues. Every successful repair is
        written to the audit log. The result cache is cleared afterwards.

        Args:
            issues: Issues to repair (not modified)
            dry_run: Count what would be repaired without writing anything

        Returns:
            RepairResult
        """
        ordered = sorted(list(issues), key=lambda issue: issue.severity.rank)
        result = RepairResult(total_issues_found=len(ordered), dry_run=dry_run)
        executor = RepairExecutor(self.accessors, self.logger)
        log = safe_logger(self.logger)

        try:
            for issue in ordered:
                if not issue.is_repairable:
                    continue
                if dry_run:
                    result.issues_repaired += 1
                    result.repaired_issues.append(issue)
                    continue
                try:
                    executor.apply(issue.repair_action)
                except Exception as e:
                    result.issues_failed += 1
                    result.failed_repairs.append(FailedRepair(issue, str(e)))
                    log.log_error(
                        e,
                        {"repair": issue.repair_action.describe()},
                        LogScope.for_issue("repair_issue", issue),
                    )
                    continue
                result.issues_repaired += 1
                result.repaired_issues.append(issue)
                self._audit_repair(issue)
        finally:
            self.cache.clear()

        log.log_operation("integrity_repair_summary", result.to_dict())
        return result

    def _audit_repair(self, issue: IntegrityIssue) -> None:
        """Record a successful repair. Sink failures are logged only."""
        sink = self.accessors.audit_log
        if sink is None:
            return
        entry = {
            "guild_id": issue.guild_id,
            "action": REPAIR_AUDIT_ACTION,
            "actor_id": SYSTEM_ACTOR,
            "entity_type": issue.entity_type.value,
            "entity_id": str(issue.entity_id),
            "message": f"Auto-repaired: {issue.message}",
            "details": {
                "severity": issue.severity.value,
                "field": issue.field,
                "rule": issue.rule_name,
                "repair": issue.repair_action.to_dict() if issue.repair_action else None,
            },
            "timestamp": _utc_now(),
        }
        try:
            sink.add(entry)
        except Exception as e:
            safe_logger(self.logger).log_error(
                e, scope=LogScope.for_issue("audit_repair", issue)
            )

    # -------------------------------------------------------------------------
    # Pre-write validation
    # -------------------------------------------------------------------------

    @staticmethod
    def _unpack(item: Any) -> Tuple[Any, Any]:
        if isinstance(item, dict):
            if "entity" not in item or "type" not in item:
                raise ValidationError("Batch items need 'entity' and 'type' keys")
            return item["entity"], item["type"]
        try:
            entity, entity_type = item
        except (TypeError, ValueError) as e:
            raise ValidationError(
                "Batch items must be (entity, entity_type) pairs or mappings"
            ) from e
        return entity, entity_type

    def batch_validate(
        self,
        entities: Iterable[Any],
        context: Optional[ValidationContext] = None,
    ) -> Dict[str, List[IntegrityIssue]]:
        """
        Validate a set of entities, typically before writing them.

        Args:
            entities: (entity, entity_type) pairs or
                {"entity": ..., "type": ...} mappings
            context: Shared context; by default one per guild found on the
                entities

        Returns:
            '<type>:<id>' -> issues, for entities with at least one issue,
            so records of different types sharing an id stay apart.
            Entities without an id are keyed '<type>#<position>'.
        """
        contexts: Dict[str, ValidationContext] = {}
        results: Dict[str, List[IntegrityIssue]] = {}

        for position, item in enumerate(entities):
            entity, entity_type = self._unpack(item)
            entity_type = DataValidator.normalize_enum(entity_type, EntityType)

            entity_context = context
            if entity_context is None:
                guild_id = str(getattr(entity, "guild_id", ""))
                entity_context = contexts.get(guild_id)
                if entity_context is None:
                    entity_context = contexts[guild_id] = self.create_context(guild_id)

            issues = self.evaluate(entity, entity_type, entity_context)
            if issues:
                entity_id = getattr(entity, "id", None)
                if entity_id is not None:
                    key = f"{entity_type.value}:{entity_id}"
                else:
                    key = f"{entity_type.value}#{position}"
                results[key] = issues

        safe_logger(self.logger).log_debug(
            "Batch validated", {"entities_with_issues": len(results)}
        )
        return results

    def validate_before_operation(
        self,
        entity: Any,
        entity_type: Any,
        operation: str,
        context: Optional[ValidationContext] = None,
    ) -> List[IntegrityIssue]:
        """
        Validate one entity ahead of a create, update or delete.

        The entity is evaluated as given, bypassing the result cache: a
        pending update shares its id with the stored record.

        Args:
            entity: Record as it would be written
            entity_type: Its EntityType
            operation: 'create', 'update' or 'delete'
            context: Optional context; by default built from the entity's guild

        Returns:
            Issues found (empty when the write is clean)

        Raises:
            ValidationError: If the operation or entity type is unknown
        """
        if operation not in OPERATIONS:
            raise ValidationError(
                f"Unknown operation: '{operation}' (expected one of {', '.join(OPERATIONS)})"
            )
        if context is None:
            context = self.create_context(getattr(entity, "guild_id", ""))

        issues = self.evaluate(entity, entity_type, context, use_cache=False)
        safe_logger(self.logger).log_debug(
            "Pre-operation validation",
            {"issues": len(issues)},
            LogScope.of(
                f"before_{operation}",
                guild_id=context.guild_id,
                entity_type=entity_type,
                entity_id=getattr(entity, "id", None),
            ),
        )
        return issues

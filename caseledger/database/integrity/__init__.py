"""
Integrity Engine
----------------

Cross-entity referential-integrity validation and repair for guild-scoped
records.

Modules:
    - issues: IntegrityIssue, IntegrityReport, RepairAction, RepairResult
    - accessors: Store protocols, EntityAccessors, ValidationContext
    - rules: ValidationRule and RuleRegistry
    - builtin_rules: The firm's standing rule set
    - cache: ValidationCache
    - repair: RepairExecutor
    - config: IntegrityConfig and YAML loading
    - validator: CrossEntityValidator (the engine)
"""
from .accessors import (
    AuditSink,
    CaseAccessor,
    EntityAccessor,
    EntityAccessors,
    SCAN_ORDER,
    StaffAccessor,
    ValidationContext,
)
from .builtin_rules import builtin_rules
from .cache import ValidationCache
from .config import IntegrityConfig, load_integrity_config
from .issues import (
    FailedRepair,
    IntegrityIssue,
    IntegrityReport,
    RepairAction,
    RepairKind,
    RepairResult,
    Severity,
)
from .repair import RepairExecutor
from .rules import RuleRegistry, ValidationRule
from .validator import CrossEntityValidator

__all__ = [
    # Engine
    "CrossEntityValidator",
    # Value types
    "Severity",
    "IntegrityIssue",
    "IntegrityReport",
    "RepairKind",
    "RepairAction",
    "RepairResult",
    "FailedRepair",
    # Store contracts
    "EntityAccessor",
    "StaffAccessor",
    "CaseAccessor",
    "AuditSink",
    "EntityAccessors",
    "ValidationContext",
    "SCAN_ORDER",
    # Rules
    "ValidationRule",
    "RuleRegistry",
    "builtin_rules",
    # Support
    "ValidationCache",
    "RepairExecutor",
    "IntegrityConfig",
    "load_integrity_config",
]

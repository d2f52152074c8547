#!/usr/bin/env python3
"""
caseledger Database Package
---------------------------
Record store and integrity engine for guild-scoped law-firm records.

This package provides:
- CaseLedgerDB: engine, sessions and per-session entity managers
- Entity managers for staff, cases, jobs, applications, retainers,
  feedback, reminders and the audit log
- The cross-entity integrity engine (caseledger.database.integrity)
"""

from .manager import CaseLedgerDB
from caseledger.core.exceptions import (
    DatabaseError,
    ValidationError,
    HealthCheckError,
    IntegrityScanError,
    RepairError,
)
from .integrity import CrossEntityValidator, IntegrityConfig, load_integrity_config
from .decorators import (
    log_database_operation,
    handle_db_errors,
    validate_metadata,
)

__version__ = "1.0.0"

__all__ = [
    # Main manager
    "CaseLedgerDB",
    # Integrity engine
    "CrossEntityValidator",
    "IntegrityConfig",
    "load_integrity_config",
    # Exceptions
    "DatabaseError",
    "ValidationError",
    "HealthCheckError",
    "IntegrityScanError",
    "RepairError",
    # Decorators
    "log_database_operation",
    "handle_db_errors",
    "validate_metadata",
]

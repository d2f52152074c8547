#!/usr/bin/env python3
"""
managers package
--------------------
Entity managers for the caseledger database.

Each manager implements the accessor contract the integrity engine reads
through (find_by_id / find_by_guild_id / update) for one record kind.

Available Managers:
    BaseManager: Abstract base class with common utilities
    GuildEntityManager: Config-driven manager for Job, Application,
        Retainer, Feedback and Reminder
    StaffManager: Staff, plus lookup by external user id
    CaseManager: Case, plus lawyer-centric lookups
    AuditLogManager: Append-only audit sink

Usage:
    from caseledger.database.managers import StaffManager, GuildEntityManager

    staff = StaffManager(session, logger)
    jobs = GuildEntityManager.for_jobs(session, logger)
"""
from .base_manager import BaseManager
from .guild_manager import GuildEntityConfig, GuildEntityManager
from .staff_manager import StaffManager
from .case_manager import CaseManager
from .audit_manager import AuditLogManager

__all__ = [
    "BaseManager",
    "GuildEntityConfig",
    "GuildEntityManager",
    "StaffManager",
    "CaseManager",
    "AuditLogManager",
]

"""
caseledger models package
-------------------------

ORM models for the guild-scoped records and the audit log.

Usage:
    from caseledger.database.models import Base, Staff, Case, EntityType
"""
from .base import Base, GuildEntityMixin, utc_now
from .enums import (
    ApplicationStatus,
    CaseStatus,
    EntityType,
    RetainerStatus,
    StaffRole,
    StaffStatus,
)
from .entities import (
    Application,
    Case,
    Feedback,
    Job,
    Reminder,
    Retainer,
    Staff,
)
from .audit import AuditLog

__all__ = [
    "Base",
    "GuildEntityMixin",
    "utc_now",
    "ApplicationStatus",
    "CaseStatus",
    "EntityType",
    "RetainerStatus",
    "StaffRole",
    "StaffStatus",
    "Application",
    "Case",
    "Feedback",
    "Job",
    "Reminder",
    "Retainer",
    "Staff",
    "AuditLog",
]

"""
Enumeration Types
------------------

Enum classes for the caseledger database models.

Enums:
    - EntityType: The seven guild-scoped record kinds
    - StaffStatus: Employment status of a staff member
    - StaffRole: Firm hierarchy, most senior first
    - CaseStatus: Lifecycle of a case
    - ApplicationStatus: Lifecycle of a job application
    - RetainerStatus: Lifecycle of a retainer agreement

Status columns are stored as plain strings so that out-of-range values
written by older code can be detected; these enums define the valid sets.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from enum import Enum
from typing import List


class EntityType(str, Enum):
    """Kinds of guild-scoped records checked by the integrity engine."""

    STAFF = "staff"
    CASE = "case"
    APPLICATION = "application"
    JOB = "job"
    RETAINER = "retainer"
    FEEDBACK = "feedback"
    REMINDER = "reminder"

    @classmethod
    def choices(cls) -> List[str]:
        """Get all available entity type choices."""
        return [entity_type.value for entity_type in cls]


class StaffStatus(str, Enum):
    """
    Employment status of a staff member.
    - ACTIVE: Currently employed and assignable
    - INACTIVE: Temporarily inactive (leave, suspension)
    - TERMINATED: No longer employed
    """

    ACTIVE = "active"
    INACTIVE = "inactive"
    TERMINATED = "terminated"

    @classmethod
    def choices(cls) -> List[str]:
        """Get all available staff status choices."""
        return [status.value for status in cls]


class StaffRole(str, Enum):
    """Firm roles, most senior first."""

    MANAGING_PARTNER = "Managing Partner"
    SENIOR_PARTNER = "Senior Partner"
    JUNIOR_PARTNER = "Junior Partner"
    SENIOR_ASSOCIATE = "Senior Associate"
    JUNIOR_ASSOCIATE = "Junior Associate"
    PARALEGAL = "Paralegal"

    @classmethod
    def choices(cls) -> List[str]:
        """Get all available role choices."""
        return [role.value for role in cls]


class CaseStatus(str, Enum):
    """Lifecycle of a case."""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    CLOSED = "closed"


class ApplicationStatus(str, Enum):
    """
    Lifecycle of a job application.

    ACCEPTED, REJECTED and WITHDRAWN are terminal.
    """

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"


class RetainerStatus(str, Enum):
    """Lifecycle of a retainer agreement."""

    PENDING = "pending"
    SIGNED = "signed"
    CANCELLED = "cancelled"

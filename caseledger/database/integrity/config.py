#!/usr/bin/env python3
"""
config.py
---------
Integrity engine configuration.

Defaults reproduce the firm's standing policy. A YAML file may override
any of them:

    cache_ttl_seconds: 120
    default_staff_status: inactive
    workload_limits:
      managing partner: 25
      default: 10

Role names are matched case-insensitively.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from caseledger.core.exceptions import ConfigError
from caseledger.database.models.enums import ApplicationStatus, StaffRole, StaffStatus

_ROLE_WORKLOAD_LIMITS = {
    StaffRole.MANAGING_PARTNER: 20,
    StaffRole.SENIOR_PARTNER: 15,
    StaffRole.JUNIOR_PARTNER: 12,
    StaffRole.SENIOR_ASSOCIATE: 10,
    StaffRole.JUNIOR_ASSOCIATE: 8,
    StaffRole.PARALEGAL: 5,
}


def _default_workload_limits() -> Dict[str, int]:
    limits = {role.value.lower(): limit for role, limit in _ROLE_WORKLOAD_LIMITS.items()}
    limits["default"] = 10
    return limits


@dataclass
class IntegrityConfig:
    """
    Thresholds and defaults used by the engine and built-in rules.

    Attributes:
        cache_ttl_seconds: Lifetime of cached evaluation results; 0 disables
            the cache
        valid_staff_statuses: Statuses a staff record may carry
        default_staff_status: Status an invalid one is repaired to
        workload_limits: Maximum in-progress cases per role, with a
            'default' entry for unlisted roles
        lead_attorney_excluded_roles: Roles that may not lead a case
        closed_job_application_status: Status given to pending applications
            on a closed job
    """

    cache_ttl_seconds: float = 300
    valid_staff_statuses: List[str] = field(default_factory=StaffStatus.choices)
    default_staff_status: str = StaffStatus.INACTIVE.value
    workload_limits: Dict[str, int] = field(default_factory=_default_workload_limits)
    lead_attorney_excluded_roles: List[str] = field(
        default_factory=lambda: [
            StaffRole.PARALEGAL.value.lower(),
            StaffRole.JUNIOR_ASSOCIATE.value.lower(),
        ]
    )
    closed_job_application_status: str = ApplicationStatus.WITHDRAWN.value

    def __post_init__(self) -> None:
        if not isinstance(self.cache_ttl_seconds, (int, float)) or self.cache_ttl_seconds < 0:
            raise ConfigError(
                f"cache_ttl_seconds must be a non-negative number, got {self.cache_ttl_seconds!r}"
            )
        if self.default_staff_status not in self.valid_staff_statuses:
            raise ConfigError(
                f"default_staff_status '{self.default_staff_status}' "
                f"is not one of {self.valid_staff_statuses}"
            )
        self.workload_limits = {
            str(role).lower(): int(limit) for role, limit in self.workload_limits.items()
        }
        self.workload_limits.setdefault("default", 10)
        self.lead_attorney_excluded_roles = [
            str(role).lower() for role in self.lead_attorney_excluded_roles
        ]

    def workload_limit_for(self, role: Optional[str]) -> int:
        """In-progress case limit for a role."""
        key = (role or "").lower()
        return self.workload_limits.get(key, self.workload_limits["default"])

    def may_lead_cases(self, role: Optional[str]) -> bool:
        return (role or "").lower() not in self.lead_attorney_excluded_roles

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IntegrityConfig":
        """
        Build a config from a mapping, rejecting unknown keys.

        Raises:
            ConfigError: On unknown keys or invalid values
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown integrity config key(s): {', '.join(unknown)}")
        try:
            return cls(**data)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid integrity config: {e}") from e

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def load_integrity_config(path: Optional[Union[str, Path]]) -> IntegrityConfig:
    """
    Load configuration from a YAML file.

    Args:
        path: YAML file; None or a missing file yields the defaults

    Returns:
        IntegrityConfig

    Raises:
        ConfigError: If the file is unreadable, is not a mapping, or holds
            unknown keys
    """
    if path is None:
        return IntegrityConfig()
    path = Path(path)
    if not path.exists():
        return IntegrityConfig()

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read integrity config {path}: {e}") from e

    if data is None:
        return IntegrityConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"Integrity config {path} must be a mapping")
    return IntegrityConfig.from_dict(data)

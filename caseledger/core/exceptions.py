#!/usr/bin/env python3
"""
exceptions.py
--------------------
Custom exception classes for the caseledger project.

This module defines a hierarchy of exceptions used throughout the project
to handle specific error conditions in different subsystems.

Exception Hierarchy:
    Exception (built-in)
    ├── DatabaseError - Base for all database-related errors
    │   └── HealthCheckError - Integrity/health check failures
    │       └── IntegrityScanError - A guild scan could not complete its reads
    ├── ValidationError - Data validation failures
    │   └── RuleRegistrationError - Malformed validation rule
    ├── RepairError - A repair action could not be applied
    └── ConfigError - Unreadable or invalid integrity configuration

Usage:
    from caseledger.core.exceptions import DatabaseError, IntegrityScanError

    try:
        report = validator.scan_for_integrity_issues(guild_id)
    except IntegrityScanError as e:
        logger.error(f"Scan aborted: {e}")
"""


class DatabaseError(Exception):
    """
    Base exception for database-related errors.

    Raised when database operations fail due to connection issues,
    query errors, integrity violations, or other database problems.

    This is the parent class for all database-specific exceptions.
    Catch this to handle any database error, or catch specific
    subclasses for more granular error handling.

    Examples:
        >>> raise DatabaseError("Connection to database failed")
        >>> raise DatabaseError("Data integrity violation: duplicate user id")

    See Also:
        HealthCheckError, IntegrityScanError
    """

    pass


class HealthCheckError(DatabaseError):
    """
    Exception for integrity and health check failures.

    Raised when a health or integrity check cannot be carried out, as
    opposed to a check that ran and found problems (those are reported
    as issues, never raised).

    Examples:
        >>> raise HealthCheckError("Health check failed: database locked")
    """

    pass


class IntegrityScanError(HealthCheckError):
    """
    Exception for guild scans that could not complete their reads.

    A scan fetches every entity type of a guild before evaluating any of
    them. If one of those reads fails the whole scan is abandoned: a
    partial report would misrepresent the health of the guild.

    Attributes:
        guild_id: Guild whose scan failed
        entity_type: Entity type whose read failed (if known)

    Examples:
        >>> raise IntegrityScanError("Failed to load case records", guild_id="42")
    """

    def __init__(self, message: str, guild_id=None, entity_type=None) -> None:
        super().__init__(message)
        self.guild_id = guild_id
        self.entity_type = entity_type


class ValidationError(Exception):
    """
    Exception for data validation failures.

    Raised when input data fails validation checks:
    - Missing required fields
    - Unknown enumeration values
    - Type mismatches

    Examples:
        >>> raise ValidationError("Required field 'guild_id' missing or empty")
        >>> raise ValidationError("Unknown entity type: 'invoice'")
    """

    pass


class RuleRegistrationError(ValidationError):
    """
    Exception for malformed validation rules.

    Raised when a rule handed to the registry lacks a name, targets an
    unknown entity type, or has no callable validate function.

    Examples:
        >>> raise RuleRegistrationError("Rule name must be a non-empty string")
    """

    pass


class RepairError(Exception):
    """
    Exception for repair actions that cannot be applied.

    Raised by the repair executor when the record to repair no longer
    exists or the action is not applicable to it. The repair orchestrator
    catches it per issue and records it as a failed repair.

    Examples:
        >>> raise RepairError("case 17 not found")
    """

    pass


class ConfigError(Exception):
    """
    Exception for integrity configuration problems.

    Raised when the YAML configuration file cannot be read or contains
    unknown keys or values of the wrong type.

    Examples:
        >>> raise ConfigError("Unknown integrity config key: 'cache_tll'")
    """

    pass

#!/usr/bin/env python3
"""
guild_manager.py
-----------------
Config-driven manager for guild-scoped entities.

Every guild-scoped record supports the same small contract used by the
integrity engine and the CLI:

    find_by_id(id)            -> record or None
    find_by_guild_id(guild)   -> records of that guild, in id order
    update(id, changes)       -> updated record or None when missing
    create(metadata)          -> new record
    delete(id)                -> bool

Each entity type is described by a GuildEntityConfig naming the model, the
required creation fields and the fields an update may touch. Staff and
Case extend this manager with lookups of their own.

Usage:
    jobs = GuildEntityManager.for_jobs(session, logger)
    job = jobs.create({"guild_id": "1", "title": "Paralegal", "staff_role": "Paralegal"})
    jobs.update(job.id, {"is_open": False})
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Type

from sqlalchemy.orm import Session

from caseledger.core.exceptions import ValidationError
from caseledger.core.logging_manager import LedgerLogger, safe_logger
from caseledger.core.validators import DataValidator
from caseledger.database.decorators import handle_db_errors, log_database_operation
from caseledger.database.models import (
    Application,
    EntityType,
    Feedback,
    GuildEntityMixin,
    Job,
    Reminder,
    Retainer,
)
from .base_manager import BaseManager


@dataclass
class GuildEntityConfig:
    """
    Configuration for a guild-scoped entity manager.

    Attributes:
        model_class: SQLAlchemy model class
        entity_type: EntityType tag of the model
        required_fields: Fields that must be present on create
        datetime_fields: Fields normalized to aware datetimes on write
        bool_fields: Fields normalized to booleans on write
        immutable_fields: Fields update() refuses to change
    """

    model_class: Type[GuildEntityMixin]
    entity_type: EntityType
    required_fields: List[str] = field(default_factory=list)
    datetime_fields: List[str] = field(default_factory=list)
    bool_fields: List[str] = field(default_factory=list)
    immutable_fields: List[str] = field(default_factory=lambda: ["id", "guild_id", "created_at"])


JOB_CONFIG = GuildEntityConfig(
    model_class=Job,
    entity_type=EntityType.JOB,
    required_fields=["guild_id", "title", "staff_role"],
    datetime_fields=["closed_at"],
    bool_fields=["is_open"],
)

APPLICATION_CONFIG = GuildEntityConfig(
    model_class=Application,
    entity_type=EntityType.APPLICATION,
    required_fields=["guild_id", "job_id", "applicant_id"],
    datetime_fields=["reviewed_at"],
)

RETAINER_CONFIG = GuildEntityConfig(
    model_class=Retainer,
    entity_type=EntityType.RETAINER,
    required_fields=["guild_id", "client_id"],
)

FEEDBACK_CONFIG = GuildEntityConfig(
    model_class=Feedback,
    entity_type=EntityType.FEEDBACK,
    required_fields=["guild_id", "submitter_id"],
    bool_fields=["is_for_firm"],
)

REMINDER_CONFIG = GuildEntityConfig(
    model_class=Reminder,
    entity_type=EntityType.REMINDER,
    required_fields=["guild_id", "user_id"],
    datetime_fields=["scheduled_for"],
    bool_fields=["is_active"],
)


class GuildEntityManager(BaseManager):
    """
    Generic manager for guild-scoped entities.

    Uses configuration to provide consistent lookups and updates across
    the entity types.
    """

    def __init__(
        self,
        session: Session,
        logger: Optional[LedgerLogger],
        config: GuildEntityConfig,
    ):
        """
        Initialize the guild entity manager.

        Args:
            session: SQLAlchemy session
            logger: Optional logger for operation tracking
            config: Entity-specific configuration
        """
        super().__init__(session, logger)
        self.config = config

    # -------------------------------------------------------------------------
    # Factory Methods
    # -------------------------------------------------------------------------

    @classmethod
    def for_jobs(
        cls, session: Session, logger: Optional[LedgerLogger] = None
    ) -> "GuildEntityManager":
        """Create a manager for Job entities."""
        return cls(session, logger, JOB_CONFIG)

    @classmethod
    def for_applications(
        cls, session: Session, logger: Optional[LedgerLogger] = None
    ) -> "GuildEntityManager":
        """Create a manager for Application entities."""
        return cls(session, logger, APPLICATION_CONFIG)

    @classmethod
    def for_retainers(
        cls, session: Session, logger: Optional[LedgerLogger] = None
    ) -> "GuildEntityManager":
        """Create a manager for Retainer entities."""
        return cls(session, logger, RETAINER_CONFIG)

    @classmethod
    def for_feedback(
        cls, session: Session, logger: Optional[LedgerLogger] = None
    ) -> "GuildEntityManager":
        """Create a manager for Feedback entities."""
        return cls(session, logger, FEEDBACK_CONFIG)

    @classmethod
    def for_reminders(
        cls, session: Session, logger: Optional[LedgerLogger] = None
    ) -> "GuildEntityManager":
        """Create a manager for Reminder entities."""
        return cls(session, logger, REMINDER_CONFIG)

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    @property
    def model_class(self) -> Type[GuildEntityMixin]:
        return self.config.model_class

    @handle_db_errors
    def find_by_id(self, entity_id: Any) -> Optional[Any]:
        """
        Retrieve a record by id.

        Args:
            entity_id: Integer id (numeric strings are accepted)

        Returns:
            The record, or None if it does not exist
        """
        resolved = self._resolve_id(entity_id, self.model_class)
        if resolved is None:
            return None
        return self.session.get(self.model_class, resolved)

    @handle_db_errors
    def find_by_guild_id(self, guild_id: str) -> List[Any]:
        """
        Retrieve all records of a guild in id order.

        Args:
            guild_id: Guild to load

        Returns:
            List of records (possibly empty)
        """
        return (
            self.session.query(self.model_class)
            .filter(self.model_class.guild_id == str(guild_id))
            .order_by(self.model_class.id)
            .all()
        )

    @handle_db_errors
    def count_by_guild_id(self, guild_id: str) -> int:
        """Count records of a guild."""
        return (
            self.session.query(self.model_class)
            .filter(self.model_class.guild_id == str(guild_id))
            .count()
        )

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def _normalize_values(self, values: Dict[str, Any]) -> Dict[str, Any]:
        """Apply datetime and boolean normalization and reject unknown columns."""
        columns = set(self.model_class.__table__.columns.keys())
        normalized: Dict[str, Any] = {}
        for key, value in values.items():
            if key not in columns:
                raise ValidationError(
                    f"Unknown {self.config.entity_type.value} field: '{key}'"
                )
            if key in self.config.datetime_fields:
                value = DataValidator.normalize_datetime(value)
            elif key in self.config.bool_fields:
                value = DataValidator.normalize_bool(value)
            normalized[key] = value
        return normalized

    @handle_db_errors
    @log_database_operation("create_entity")
    def create(self, metadata: Dict[str, Any]) -> Any:
        """
        Create a new record.

        Args:
            metadata: Column values; must include the configured
                required fields

        Returns:
            The new, flushed record

        Raises:
            ValidationError: If required fields are missing or unknown
                fields are given
        """
        DataValidator.validate_required_fields(metadata, self.config.required_fields)
        values = self._normalize_values(metadata)
        values["guild_id"] = str(values["guild_id"])

        def _do_create():
            record = self.model_class(**values)
            self.session.add(record)
            self.session.flush()
            return record

        record = self._execute_with_retry(_do_create)
        safe_logger(self.logger).log_debug(
            f"Created {self.config.entity_type.value}",
            {"id": record.id, "guild_id": record.guild_id},
        )
        return record

    @handle_db_errors
    @log_database_operation("update_entity")
    def update(self, entity_id: Any, changes: Dict[str, Any]) -> Optional[Any]:
        """
        Update fields of an existing record.

        Setting a field to None clears it. List-valued columns must be
        given a new list.

        Args:
            entity_id: Id of the record
            changes: Mapping of field name to new value

        Returns:
            The updated record, or None if it does not exist

        Raises:
            ValidationError: If a field is unknown or immutable
        """
        for key in changes:
            if key in self.config.immutable_fields:
                raise ValidationError(
                    f"Field '{key}' of {self.config.entity_type.value} cannot be updated"
                )
        values = self._normalize_values(changes)

        record = self.find_by_id(entity_id)
        if record is None:
            return None

        def _do_update():
            for key, value in values.items():
                setattr(record, key, list(value) if isinstance(value, list) else value)
            self.session.flush()
            return record

        return self._execute_with_retry(_do_update)

    @handle_db_errors
    @log_database_operation("delete_entity")
    def delete(self, entity_id: Any) -> bool:
        """
        Hard-delete a record. References to it elsewhere are left dangling.

        Returns:
            True if a record was deleted
        """
        record = self.find_by_id(entity_id)
        if record is None:
            return False
        self.session.delete(record)
        self.session.flush()
        return True

#!/usr/bin/env python3
"""
manager.py
--------------------
Database manager for the caseledger record store.

Provides the CaseLedgerDB class for interacting with the SQLite database.
Handles:
    - Initialization of the database engine and sessionmaker
    - Schema creation
    - Transactional session scopes with per-session entity managers
    - The integrity engine, bound to the managers of the active session
    - Structured logging with rotation

Core Operations:
    Entity Management (inside session_scope):
        - db.staff, db.cases: Staff and Case managers
        - db.jobs, db.applications, db.retainers, db.feedback, db.reminders
        - db.audit_log: Audit entries, including integrity repairs

    Integrity (inside session_scope):
        - db.integrity.scan_for_integrity_issues(guild_id)
        - db.integrity.repair_integrity_issues(issues)
        - db.integrity.validate_before_operation(entity, type, "update")

    Statistics:
        - guild_statistics: Record counts per entity type

Notes
==============
- All datetime fields are UTC-aware on write; SQLite hands back naive values
- Retry logic handles SQLite lock contention
- The integrity engine, its rule set and its cache outlive sessions; only
  its accessors are swapped per session
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, Union

# --- Third party ---
from sqlalchemy import create_engine, Engine
from sqlalchemy.orm import Session, sessionmaker

# --- Local imports ---
from caseledger.core.exceptions import DatabaseError
from caseledger.core.logging_manager import LedgerLogger, LogScope
from .integrity import CrossEntityValidator, EntityAccessors, IntegrityConfig
from .integrity.accessors import SCAN_ORDER
from .models import Base
from .managers import (
    AuditLogManager,
    CaseManager,
    GuildEntityManager,
    StaffManager,
)


# ----- Main Database Manager -----
class CaseLedgerDB:
    """
    Main database manager for the caseledger store.

    Attributes:
        - db_path (Path): Filesystem path to the SQLite database file.
        - engine (Engine): SQLAlchemy engine instance.
        - SessionLocal (sessionmaker): SQLAlchemy session factory.
        - config (IntegrityConfig): Integrity engine configuration.

    Usage:
        db = CaseLedgerDB("~/path/to/caseledger.db")
        with db.session_scope():
            staff = db.staff.find_by_user_id("1234", "987")
            report = db.integrity.scan_for_integrity_issues("1234")
    """

    # ---- Initialization ----
    def __init__(
        self,
        db_path: Union[str, Path],
        log_dir: Optional[Union[str, Path]] = None,
        config: Optional[IntegrityConfig] = None,
    ) -> None:
        """
        Initialize database engine and session factory.

        Args:
            db_path (str | Path): Path to the SQLite file.
            log_dir (str | Path): Directory for log files (optional)
            config (IntegrityConfig): Integrity configuration (optional)
        """
        self.db_path = Path(db_path).expanduser().resolve()
        self.config = config or IntegrityConfig()

        # --- Logging ---
        if log_dir:
            self.log_dir = Path(log_dir).expanduser().resolve() / "system"
            self.logger: Optional[LedgerLogger] = LedgerLogger(
                self.log_dir,
                component_name="database",
            )
        else:
            self.logger = None

        # Managers are bound per session in session_scope
        self._accessors: Optional[EntityAccessors] = None
        self._validator: Optional[CrossEntityValidator] = None

        self._setup_engine()

    def _setup_engine(self) -> None:
        """Initialize database engine and session factory."""
        try:
            if self.logger:
                self.logger.log_operation(
                    "database_init_start", {"db_path": str(self.db_path)}
                )

            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            is_new = not self.db_path.exists()

            self.engine: Engine = create_engine(
                f"sqlite:///{self.db_path}",
                echo=False,
                future=True,
                pool_pre_ping=True,
            )

            self.SessionLocal: sessionmaker = sessionmaker(
                bind=self.engine,
                autoflush=True,
                expire_on_commit=False,
                future=True,
            )

            if is_new:
                self.initialize_schema()

            if self.logger:
                self.logger.log_operation("database_init_complete", {"success": True})

        except Exception as e:
            if self.logger:
                self.logger.log_error(
                    e, {"db_path": str(self.db_path)}, LogScope("database_init")
                )
            raise DatabaseError(f"Database initialization failed: {e}") from e

    def initialize_schema(self) -> None:
        """Create all tables that do not exist yet."""
        Base.metadata.create_all(self.engine)
        if self.logger:
            self.logger.log_operation(
                "schema_initialized", {"tables": sorted(Base.metadata.tables)}
            )

    # ---- Session Management ----
    def _build_accessors(self, session: Session) -> EntityAccessors:
        return EntityAccessors(
            staff=StaffManager(session, self.logger),
            cases=CaseManager(session, self.logger),
            jobs=GuildEntityManager.for_jobs(session, self.logger),
            applications=GuildEntityManager.for_applications(session, self.logger),
            retainers=GuildEntityManager.for_retainers(session, self.logger),
            feedback=GuildEntityManager.for_feedback(session, self.logger),
            reminders=GuildEntityManager.for_reminders(session, self.logger),
            audit_log=AuditLogManager(session, self.logger),
        )

    @contextmanager
    def session_scope(self):
        """
        Provide a transactional scope around operations with logging.

        Also binds the entity managers and the integrity engine to the new
        session. They are available via properties (db.staff, db.integrity,
        etc.) until the scope exits.

        Usage:
            with db.session_scope() as session:
                case = db.cases.create({"guild_id": "1", "case_number": "C-1",
                                        "client_id": "55"})
                issues = db.integrity.validate_before_operation(
                    case, "case", "create"
                )
        """
        session = self.SessionLocal()
        session_id = datetime.now().strftime("%Y%m%d_%H%M%S_%f")

        self._accessors = self._build_accessors(session)
        if self._validator is None:
            self._validator = CrossEntityValidator(
                self._accessors, config=self.config, logger=self.logger
            )
        else:
            self._validator.accessors = self._accessors

        if self.logger:
            self.logger.log_debug("session_start", {"session_id": session_id})

        try:
            yield session
            session.commit()
            if self.logger:
                self.logger.log_debug("session_commit", {"session_id": session_id})

        except Exception as e:
            session.rollback()
            if self.logger:
                self.logger.log_error(
                    e, {"session_id": session_id}, LogScope("session_rollback")
                )
            raise
        finally:
            self._accessors = None
            session.close()
            if self.logger:
                self.logger.log_debug("session_close", {"session_id": session_id})

    # -------------------------------------------------------------------------
    # Entity Manager Properties
    # -------------------------------------------------------------------------

    @property
    def accessors(self) -> EntityAccessors:
        """
        All managers of the active session as an EntityAccessors bundle.

        Raises:
            DatabaseError: If accessed outside of session_scope context
        """
        if self._accessors is None:
            raise DatabaseError(
                "Entity managers require an active session. "
                "Use within session_scope: "
                "with db.session_scope() as session: db.staff.find_by_id(...)"
            )
        return self._accessors

    @property
    def staff(self) -> StaffManager:
        return self.accessors.staff

    @property
    def cases(self) -> CaseManager:
        return self.accessors.cases

    @property
    def jobs(self) -> GuildEntityManager:
        return self.accessors.jobs

    @property
    def applications(self) -> GuildEntityManager:
        return self.accessors.applications

    @property
    def retainers(self) -> GuildEntityManager:
        return self.accessors.retainers

    @property
    def feedback(self) -> GuildEntityManager:
        return self.accessors.feedback

    @property
    def reminders(self) -> GuildEntityManager:
        return self.accessors.reminders

    @property
    def audit_log(self) -> AuditLogManager:
        return self.accessors.audit_log

    @property
    def integrity(self) -> CrossEntityValidator:
        """
        The integrity engine, bound to the active session.

        Raises:
            DatabaseError: If accessed outside of session_scope context
        """
        if self._accessors is None or self._validator is None:
            raise DatabaseError(
                "Integrity engine requires an active session. "
                "Use within session_scope: "
                "with db.session_scope() as session: db.integrity.scan_for_integrity_issues(...)"
            )
        return self._validator

    # -------------------------------------------------------------------------
    # Statistics
    # -------------------------------------------------------------------------

    def guild_statistics(self, guild_id: str) -> Dict[str, int]:
        """
        Record counts per entity type for a guild.

        Must be called inside session_scope.
        """
        return {
            entity_type.value: self.accessors.for_type(entity_type).count_by_guild_id(guild_id)
            for entity_type in SCAN_ORDER
        }

    def close(self) -> None:
        """Dispose of the engine's connection pool."""
        self.engine.dispose()
        if self.logger:
            self.logger.log_debug("database_closed", {"db_path": str(self.db_path)})

    def __enter__(self) -> "CaseLedgerDB":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

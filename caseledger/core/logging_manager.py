#!/usr/bin/env python3
"""
logging_manager.py
--------------------
Logging for caseledger operations.

Every log line can carry a LogScope: the operation, guild, record and
rule it concerns. The scope is rendered the same way everywhere so a
failing rule or repair can be traced back to the record it touched:

    OPERATION - integrity_scan [guild=7001]: {"status": "critical", ...}
    ERROR - [evaluate_rule guild=7001 case#3 rule=case-staff-assignments] KeyError: 'x'

Two rotating files per log directory: <component>.log for everything and
errors.log for errors with their tracebacks. Warnings are echoed to
stderr.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import json
import logging
import sys
import traceback
from dataclasses import asdict, dataclass
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, Optional

# --- Third party imports ---
import click


@dataclass(frozen=True)
class LogScope:
    """
    Where in the ledger something happened.

    Attributes:
        operation: Operation name (e.g. 'evaluate_rule', 'repair_issue')
        guild_id: Guild of the record
        entity_type: Record kind value (e.g. 'case')
        entity_id: Record id
        rule: Validation rule name
    """

    operation: Optional[str] = None
    guild_id: Optional[str] = None
    entity_type: Optional[str] = None
    entity_id: Any = None
    rule: Optional[str] = None

    @classmethod
    def of(
        cls,
        operation: Optional[str] = None,
        guild_id: Any = None,
        entity_type: Any = None,
        entity_id: Any = None,
        rule: Optional[str] = None,
    ) -> LogScope:
        """Build a scope, accepting enum entity types and numeric guild ids."""
        return cls(
            operation=operation,
            guild_id=None if guild_id in (None, "") else str(guild_id),
            entity_type=None if entity_type is None else str(getattr(entity_type, "value", entity_type)),
            entity_id=entity_id,
            rule=rule,
        )

    @classmethod
    def for_issue(cls, operation: str, issue: Any) -> LogScope:
        """Scope of an integrity issue (anything with the issue attributes)."""
        return cls.of(
            operation,
            guild_id=getattr(issue, "guild_id", None),
            entity_type=getattr(issue, "entity_type", None),
            entity_id=getattr(issue, "entity_id", None),
            rule=getattr(issue, "rule_name", None),
        )

    def label(self) -> str:
        parts: List[str] = []
        if self.operation:
            parts.append(self.operation)
        if self.guild_id is not None:
            parts.append(f"guild={self.guild_id}")
        if self.entity_type is not None:
            record = self.entity_type
            if self.entity_id is not None:
                record += f"#{self.entity_id}"
            parts.append(record)
        elif self.entity_id is not None:
            parts.append(f"#{self.entity_id}")
        if self.rule:
            parts.append(f"rule={self.rule}")
        return " ".join(parts)

    def as_dict(self) -> Dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}


def _render(tag: str, message: str, details: Optional[Dict[str, Any]], scope: Optional[LogScope]) -> str:
    line = f"{tag} - {message}"
    label = scope.label() if scope else ""
    if label:
        line += f" [{label}]"
    if details:
        line += f": {json.dumps(details, default=str)}"
    return line


class LedgerLogger:
    """
    Scoped logger for database, integrity and CLI operations.

    Attributes:
        log_dir: Directory for log files
        component_name: Name of the component using this logger
        main_logger: Logger for all operations
        error_logger: Logger for errors only
    """

    def __init__(
        self,
        log_dir: Path,
        component_name: str = "caseledger",
        max_bytes: int = 10 * 1024 * 1024,
        backup_count: int = 5,
    ) -> None:
        """
        Initialize logging system.

        Args:
            log_dir: Directory for log files
            component_name: Name for the component logger
                (e.g. 'database', 'integrity', 'cli')
            max_bytes: Maximum log file size before rotation (default: 10MB)
            backup_count: Number of backup files to keep (default: 5)
        """
        self.log_dir = Path(log_dir)
        self.component_name = component_name
        self.max_bytes = max_bytes
        self.backup_count = backup_count
        self._setup_loggers()

    def _setup_loggers(self) -> None:
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.main_logger = self._reset(f"{self.component_name}.operations", logging.DEBUG)
        self.error_logger = self._reset(f"{self.component_name}.errors", logging.ERROR)

        self.main_logger.addHandler(
            self._file_handler(self.log_dir / f"{self.component_name}.log", logging.DEBUG)
        )
        self.error_logger.addHandler(
            self._file_handler(self.log_dir / "errors.log", logging.ERROR)
        )

        console = logging.StreamHandler()
        console.setLevel(logging.WARNING)
        console.setFormatter(
            logging.Formatter("%(asctime)s - %(levelname)s - %(message)s", datefmt="%H:%M:%S")
        )
        self.main_logger.addHandler(console)

    @staticmethod
    def _reset(name: str, level: int) -> logging.Logger:
        # Only this logger's handlers; global logging state is left alone
        logger = logging.getLogger(name)
        logger.setLevel(level)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        logger.propagate = False
        return logger

    def _file_handler(self, file_path: Path, level: int) -> RotatingFileHandler:
        handler = RotatingFileHandler(
            file_path,
            maxBytes=self.max_bytes,
            backupCount=self.backup_count,
            encoding="utf-8",
        )
        handler.setLevel(level)
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        return handler

    # ---- Output ----
    def _emit(self, level: int, line: str) -> None:
        self.main_logger.log(level, line)

    def _emit_error(self, lines: List[str]) -> None:
        for line in lines:
            self.error_logger.error(line)

    # ---- Public API ----
    def log_operation(
        self,
        operation: str,
        details: Optional[Dict[str, Any]] = None,
        scope: Optional[LogScope] = None,
    ) -> None:
        """
        Log a completed operation to the component log.

        Args:
            operation: Name of the operation
            details: Optional result details
            scope: Guild/record the operation concerned
        """
        self._emit(logging.INFO, _render("OPERATION", operation, details, scope))

    def log_error(
        self,
        error: Exception,
        context: Optional[Dict[str, Any]] = None,
        scope: Optional[LogScope] = None,
    ) -> None:
        """
        Log an error to errors.log with its scope, context and traceback.

        Args:
            error: Exception that occurred
            context: Extra key/value information
            scope: Operation, guild, record and rule the error concerns
        """
        label = scope.label() if scope else ""
        head = f"[{label}] " if label else ""
        lines = [f"ERROR - {head}{type(error).__name__}: {error}"]
        if context:
            lines.append("Context: " + ", ".join(f"{k}={v}" for k, v in context.items()))
        if error.__traceback__ is not None:
            formatted = traceback.format_exception(type(error), error, error.__traceback__)
            lines.append("Traceback:\n" + "".join(formatted).rstrip())
        self._emit_error(lines)

    def log_debug(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        scope: Optional[LogScope] = None,
    ) -> None:
        self._emit(logging.DEBUG, _render("DEBUG", message, details, scope))

    def log_info(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        scope: Optional[LogScope] = None,
    ) -> None:
        self._emit(logging.INFO, _render("INFO", message, details, scope))

    def log_warning(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        scope: Optional[LogScope] = None,
    ) -> None:
        self._emit(logging.WARNING, _render("WARNING", message, details, scope))

    def log_cli_error(
        self,
        error: Exception,
        context: Optional[Dict[str, Any]] = None,
        show_traceback: bool = False,
        scope: Optional[LogScope] = None,
    ) -> str:
        """
        Log full error details and return a message for the terminal.

        Args:
            error: Exception to log
            context: Extra key/value information
            show_traceback: Append the traceback to the returned message
            scope: Command and guild/record the command was run against

        Returns:
            Formatted error message suitable for CLI display

        Examples:
            >>> logger.log_cli_error(DatabaseError("Connection failed"))
            '❌ DatabaseError: Connection failed'
        """
        self.log_error(error, context, scope or LogScope(operation="cli"))

        message = f"❌ {type(error).__name__}: {error}"
        if show_traceback and error.__traceback__ is not None:
            formatted = traceback.format_exception(type(error), error, error.__traceback__)
            message += "\n\n" + "".join(formatted)
        return message


class NullLogger(LedgerLogger):
    """
    A LedgerLogger that writes nothing.

    Lets code call the logger unconditionally; see safe_logger().
    """

    def __init__(self) -> None:
        self.log_dir = None
        self.component_name = "null"

    def _emit(self, level: int, line: str) -> None:
        pass

    def _emit_error(self, lines: List[str]) -> None:
        pass


_null_logger = NullLogger()


def safe_logger(logger: Optional[LedgerLogger]) -> LedgerLogger:
    """
    Return the provided logger or a shared NullLogger if None.

    Instead of:
        if logger:
            logger.log_info("message")

    Use:
        safe_logger(logger).log_info("message")
    """
    return logger if logger is not None else _null_logger


def handle_cli_error(
    ctx: "click.Context",
    error: Exception,
    operation: str,
    additional_context: Optional[Dict[str, Any]] = None,
    exit_code: int = 1,
    guild_id: Any = None,
    entity_type: Any = None,
    entity_id: Any = None,
) -> None:
    """
    Standardized error handling for all CLI commands.

    Logs the error scoped to the command and the guild/record it was run
    against, prints a clean message to stderr and exits.

    Args:
        ctx: Click context object containing logger and verbose flag
        error: Exception that occurred
        operation: Command that failed (e.g. 'scan', 'repair')
        additional_context: Extra options worth logging (e.g. dry_run)
        exit_code: Exit code for sys.exit() (default: 1)
        guild_id: Guild the command targeted
        entity_type: Record kind the command targeted
        entity_id: Record id the command targeted

    Note:
        This function never returns - it always calls sys.exit()
    """
    logger: Optional[LedgerLogger] = ctx.obj.get("logger")
    verbose: bool = ctx.obj.get("verbose", False)

    scope = LogScope.of(
        operation, guild_id=guild_id, entity_type=entity_type, entity_id=entity_id
    )
    error_msg = safe_logger(logger).log_cli_error(
        error, additional_context, show_traceback=verbose, scope=scope
    )

    click.echo(error_msg, err=True)
    sys.exit(exit_code)

"""
Tests for logging_manager module.

Tests LedgerLogger file output, the NullLogger/safe_logger pair that make
the logger optional, and CLI error handling.
"""
import click
import pytest
from unittest.mock import MagicMock

from caseledger.core.exceptions import DatabaseError
from caseledger.database.integrity import IntegrityIssue, Severity
from caseledger.database.models import EntityType
from caseledger.core.logging_manager import (
    LedgerLogger,
    LogScope,
    NullLogger,
    handle_cli_error,
    safe_logger,
)


class TestLogScope:
    """Tests for LogScope rendering."""

    def test_of_normalizes_values(self):
        scope = LogScope.of("scan", guild_id=7001, entity_type=EntityType.CASE, entity_id=3)
        assert scope.guild_id == "7001"
        assert scope.entity_type == "case"

    def test_label(self):
        scope = LogScope.of(
            "evaluate_rule", guild_id="7001", entity_type="case", entity_id=3, rule="r1"
        )
        assert scope.label() == "evaluate_rule guild=7001 case#3 rule=r1"

    def test_empty_scope(self):
        assert LogScope().label() == ""
        assert LogScope.of(guild_id="").as_dict() == {}

    def test_for_issue(self):
        issue = IntegrityIssue(
            Severity.WARNING, EntityType.REMINDER, 9, "dangling case",
            rule_name="reminder-case-reference", guild_id="7001",
        )
        assert LogScope.for_issue("repair_issue", issue).as_dict() == {
            "operation": "repair_issue",
            "guild_id": "7001",
            "entity_type": "reminder",
            "entity_id": 9,
            "rule": "reminder-case-reference",
        }


class TestLedgerLogger:
    """Tests for LedgerLogger file output."""

    def test_creates_log_directory(self, tmp_path):
        """LedgerLogger should create its log directory."""
        log_dir = tmp_path / "logs" / "nested"
        LedgerLogger(log_dir, "integrity")
        assert log_dir.is_dir()

    def test_operation_written_to_component_log(self, tmp_path):
        """log_operation should write to <component>.log."""
        logger = LedgerLogger(tmp_path, "integrity")
        logger.log_operation("integrity_scan", {"issues": 3}, LogScope.of(guild_id=1001))

        for handler in logger.main_logger.handlers:
            handler.flush()
        content = (tmp_path / "integrity.log").read_text()
        assert 'OPERATION - integrity_scan [guild=1001]: {"issues": 3}' in content

    def test_error_written_to_errors_log(self, tmp_path):
        """log_error should write type, message and context to errors.log."""
        logger = LedgerLogger(tmp_path, "integrity")
        scope = LogScope.of("evaluate_rule", guild_id="1001", entity_type="case", entity_id=4,
                            rule="custom-rule")
        try:
            raise ValueError("rule exploded")
        except ValueError as e:
            logger.log_error(e, {"attempt": 1}, scope)

        for handler in logger.error_logger.handlers:
            handler.flush()
        content = (tmp_path / "errors.log").read_text()
        assert "[evaluate_rule guild=1001 case#4 rule=custom-rule] ValueError: rule exploded" in content
        assert "attempt=1" in content
        assert "Traceback" in content

    def test_unraised_error_has_no_traceback(self, tmp_path):
        logger = LedgerLogger(tmp_path, "integrity")
        logger.log_error(ValueError("never raised"))

        for handler in logger.error_logger.handlers:
            handler.flush()
        content = (tmp_path / "errors.log").read_text()
        assert "ERROR - ValueError: never raised" in content
        assert "Traceback" not in content

    def test_log_cli_error_formats_message(self, tmp_path):
        """log_cli_error should return a one-line message without traceback."""
        logger = LedgerLogger(tmp_path, "cli")
        message = logger.log_cli_error(DatabaseError("Connection failed"))
        assert message == "❌ DatabaseError: Connection failed"


class TestNullLogger:
    """Tests for NullLogger class."""

    def test_null_logger_methods_are_no_ops(self):
        """NullLogger methods should accept the LedgerLogger arguments."""
        logger = NullLogger()
        logger.log_operation("test_op", {"key": "value"})
        logger.log_error(ValueError("test error"), {"context": "test"})
        logger.log_debug("debug message", {"key": "value"})
        logger.log_info("info message")
        logger.log_warning("warning message", {"key": "value"})

    def test_null_logger_log_cli_error_returns_formatted(self):
        """NullLogger.log_cli_error should return formatted error string."""
        result = NullLogger().log_cli_error(ValueError("test error"))
        assert "ValueError" in result
        assert "test error" in result


class TestSafeLogger:
    """Tests for safe_logger function."""

    def test_returns_logger_when_provided(self):
        mock_logger = MagicMock(spec=LedgerLogger)
        assert safe_logger(mock_logger) is mock_logger

    def test_returns_null_logger_when_none(self):
        assert isinstance(safe_logger(None), NullLogger)

    def test_null_logger_is_singleton(self):
        assert safe_logger(None) is safe_logger(None)

    def test_forwards_calls(self):
        """safe_logger should pass calls through to a real logger."""
        mock_logger = MagicMock(spec=LedgerLogger)
        details = {"guild_id": "1001"}

        safe_logger(mock_logger).log_operation("scan", details)
        mock_logger.log_operation.assert_called_once_with("scan", details)


class TestHandleCliError:
    """Tests for handle_cli_error."""

    def test_exits_with_code_and_logs(self):
        """handle_cli_error should log the error and exit non-zero."""
        mock_logger = MagicMock(spec=LedgerLogger)
        mock_logger.log_cli_error.return_value = "❌ DatabaseError: boom"
        ctx = click.Context(click.Command("scan"), obj={"logger": mock_logger})

        with pytest.raises(SystemExit) as exc_info:
            handle_cli_error(
                ctx, DatabaseError("boom"), "repair", {"dry_run": True}, guild_id=1001
            )

        assert exc_info.value.code == 1
        context = mock_logger.log_cli_error.call_args[0][1]
        scope = mock_logger.log_cli_error.call_args.kwargs["scope"]
        assert context == {"dry_run": True}
        assert scope == LogScope(operation="repair", guild_id="1001")

    def test_works_without_logger(self):
        """handle_cli_error should fall back to NullLogger."""
        ctx = click.Context(click.Command("scan"), obj={})

        with pytest.raises(SystemExit) as exc_info:
            handle_cli_error(ctx, DatabaseError("boom"), "scan", exit_code=2)

        assert exc_info.value.code == 2

import pytest
from unittest.mock import MagicMock

from caseledger.core.exceptions import DatabaseError
from caseledger.core.logging_manager import LedgerLogger
from caseledger.database.integrity import CrossEntityValidator, IntegrityConfig
from caseledger.database.manager import CaseLedgerDB
from caseledger.database.managers import CaseManager, StaffManager


class TestCaseLedgerDBSetup:
    def test_creates_schema_on_new_file(self, test_db_path):
        db = CaseLedgerDB(test_db_path)
        try:
            assert test_db_path.exists()
            with db.session_scope():
                assert db.cases.find_by_guild_id("1") == []
        finally:
            db.close()

    def test_logger_only_with_log_dir(self, tmp_dir):
        plain = CaseLedgerDB(tmp_dir / "plain.db")
        logged = CaseLedgerDB(tmp_dir / "logged.db", log_dir=tmp_dir / "logs")
        try:
            assert plain.logger is None
            assert isinstance(logged.logger, LedgerLogger)
            assert (tmp_dir / "logs" / "system").is_dir()
        finally:
            plain.close()
            logged.close()

    def test_config_reaches_engine(self, tmp_dir):
        config = IntegrityConfig(cache_ttl_seconds=0)
        db = CaseLedgerDB(tmp_dir / "configured.db", config=config)
        try:
            with db.session_scope():
                assert db.integrity.config is config
                assert not db.integrity.cache.enabled
        finally:
            db.close()

    def test_context_manager_closes(self, test_db_path):
        with CaseLedgerDB(test_db_path) as db:
            assert db.db_path == test_db_path.resolve()


class TestSessionScope:
    def test_managers_bound_inside_scope(self, test_db):
        with test_db.session_scope():
            assert isinstance(test_db.staff, StaffManager)
            assert isinstance(test_db.cases, CaseManager)
            assert isinstance(test_db.integrity, CrossEntityValidator)
            assert test_db.integrity.accessors is test_db.accessors

    @pytest.mark.parametrize("name", ["staff", "cases", "jobs", "audit_log", "integrity"])
    def test_properties_raise_outside_scope(self, test_db, name):
        with pytest.raises(DatabaseError, match="session_scope"):
            getattr(test_db, name)

    def test_engine_survives_sessions(self, test_db):
        with test_db.session_scope():
            first = test_db.integrity
        with test_db.session_scope():
            assert test_db.integrity is first

    def test_commit_on_success(self, test_db):
        mock_session = MagicMock()
        test_db.SessionLocal = MagicMock(return_value=mock_session)

        with test_db.session_scope():
            pass

        mock_session.commit.assert_called_once()
        mock_session.rollback.assert_not_called()
        mock_session.close.assert_called_once()

    def test_rollback_on_error(self, test_db):
        mock_session = MagicMock()
        test_db.SessionLocal = MagicMock(return_value=mock_session)

        with pytest.raises(ValueError):
            with test_db.session_scope():
                raise ValueError("boom")

        mock_session.rollback.assert_called_once()
        mock_session.commit.assert_not_called()
        with pytest.raises(DatabaseError):
            test_db.accessors

    def test_writes_persist_across_scopes(self, test_db):
        with test_db.session_scope():
            test_db.staff.create(
                {"guild_id": "1", "user_id": "42", "username": "ada", "role": "Paralegal"}
            )
        with test_db.session_scope():
            staff = test_db.staff.find_by_user_id("1", "42")
            assert staff.username == "ada"
            assert staff.status == "active"


class TestGuildStatistics:
    def test_counts_per_type(self, test_db, make, make_other_guild):
        make.staff()
        make.staff()
        job = make.job()
        make.application(job_id=job.id)
        make_other_guild.case()

        stats = test_db.guild_statistics("1001")

        assert list(stats) == [
            "staff", "case", "application", "job", "retainer", "feedback", "reminder",
        ]
        assert stats["staff"] == 2
        assert stats["job"] == 1
        assert stats["application"] == 1
        assert stats["case"] == 0

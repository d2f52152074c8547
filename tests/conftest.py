"""
conftest.py
-----------
Shared pytest fixtures for caseledger tests.

Provides fixtures for:
- Database setup and teardown
- Entity managers bound to a test session
- The integrity engine
- Record factories for each entity type
"""
import pytest
from pathlib import Path
from datetime import datetime, timedelta, timezone
from tempfile import TemporaryDirectory


GUILD_ID = "1001"
OTHER_GUILD_ID = "2002"

# Hire date well before any record a test creates
LONG_AGO = datetime(2024, 1, 1, tzinfo=timezone.utc)


# ----- Constants -----

@pytest.fixture
def guild_id():
    """Guild the record factory writes to."""
    return GUILD_ID


@pytest.fixture
def other_guild_id():
    return OTHER_GUILD_ID


# ----- Path Fixtures -----

@pytest.fixture
def tmp_dir():
    """Create a temporary directory for test file operations."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# ----- Database Fixtures -----

@pytest.fixture
def test_db_path(tmp_dir):
    """Create temporary test database path."""
    return tmp_dir / "test.db"


@pytest.fixture
def test_db(test_db_path):
    """
    Create test database instance with schema.

    Returns a CaseLedgerDB instance with an initialized schema.
    Database is torn down after the test.
    """
    from caseledger.database.manager import CaseLedgerDB

    db = CaseLedgerDB(db_path=test_db_path)

    yield db

    db.close()
    if test_db_path.exists():
        test_db_path.unlink()


@pytest.fixture
def db_session(test_db):
    """
    Create a database session for tests.

    Managers and the integrity engine are bound to it for the whole test.
    """
    with test_db.session_scope() as session:
        yield session
        session.rollback()


@pytest.fixture
def accessors(test_db, db_session):
    """EntityAccessors bundle of the test session."""
    return test_db.accessors


@pytest.fixture
def validator(test_db, db_session):
    """Integrity engine bound to the test session."""
    return test_db.integrity


# ----- Record Factories -----

class RecordFactory:
    """Creates records through the managers with sensible defaults."""

    def __init__(self, accessors, guild_id=GUILD_ID):
        self.accessors = accessors
        self.guild_id = guild_id
        self._counter = 0

    def _next(self) -> int:
        self._counter += 1
        return self._counter

    def staff(self, user_id=None, **overrides):
        n = self._next()
        values = {
            "guild_id": self.guild_id,
            "user_id": user_id or f"user-{n}",
            "username": f"staffer{n}",
            "role": "Senior Associate",
            "hired_at": LONG_AGO,
        }
        values.update(overrides)
        return self.accessors.staff.create(values)

    def case(self, **overrides):
        n = self._next()
        values = {
            "guild_id": self.guild_id,
            "case_number": f"C-{n:04d}",
            "client_id": f"client-{n}",
            "title": f"Matter {n}",
        }
        values.update(overrides)
        return self.accessors.cases.create(values)

    def job(self, **overrides):
        n = self._next()
        values = {
            "guild_id": self.guild_id,
            "title": f"Opening {n}",
            "staff_role": "Paralegal",
        }
        values.update(overrides)
        return self.accessors.jobs.create(values)

    def application(self, job_id, **overrides):
        n = self._next()
        values = {
            "guild_id": self.guild_id,
            "job_id": job_id,
            "applicant_id": f"applicant-{n}",
        }
        values.update(overrides)
        return self.accessors.applications.create(values)

    def retainer(self, lawyer_id, **overrides):
        n = self._next()
        values = {
            "guild_id": self.guild_id,
            "client_id": f"client-{n}",
            "lawyer_id": lawyer_id,
        }
        values.update(overrides)
        return self.accessors.retainers.create(values)

    def feedback(self, **overrides):
        n = self._next()
        values = {
            "guild_id": self.guild_id,
            "submitter_id": f"client-{n}",
            "rating": 4,
            "comment": "Helpful",
        }
        values.update(overrides)
        return self.accessors.feedback.create(values)

    def reminder(self, **overrides):
        n = self._next()
        values = {
            "guild_id": self.guild_id,
            "user_id": f"user-{n}",
            "message": "Follow up",
            "scheduled_for": datetime.now(timezone.utc) + timedelta(days=1),
        }
        values.update(overrides)
        return self.accessors.reminders.create(values)


@pytest.fixture
def make(accessors):
    """Record factory for the default test guild."""
    return RecordFactory(accessors)


@pytest.fixture
def make_other_guild(accessors):
    """Record factory for a second guild."""
    return RecordFactory(accessors, guild_id=OTHER_GUILD_ID)

#!/usr/bin/env python3
"""
conftest.py
-----------
Shared fixtures for integrity integration tests.

Provides an on-disk database populated with a guild whose records break
most of the built-in rules, plus a CLI runner wired to temporary paths.

Fixtures:
    cli_paths: Temporary database, log and config paths
    seeded_ids: Populates the database with a broken guild and a clean one
    seeded_db: CaseLedgerDB opened on the populated database
    runner: Click test runner
    invoke: Helper running the CLI against cli_paths
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from datetime import datetime, timezone

# --- Third-party imports ---
import pytest
from click.testing import CliRunner

# --- Local imports ---
from caseledger.database.cli import cli
from caseledger.database.manager import CaseLedgerDB


GUILD = "7001"
CLEAN_GUILD = "7002"

HIRED = datetime(2024, 1, 1, tzinfo=timezone.utc)


# ==================== Paths ====================

@pytest.fixture
def cli_paths(tmp_path):
    """Database, log directory and (absent) config file for one test."""
    return {
        "db_path": tmp_path / "caseledger.db",
        "log_dir": tmp_path / "logs",
        "config": tmp_path / "integrity.yaml",
    }


# ==================== Populated Database ====================

def populate_broken_guild(db: CaseLedgerDB, guild_id: str = GUILD) -> dict:
    """
    Write a guild with one problem per common rule.

    Returns the ids of the records created, keyed by a short label.
    """
    ids = {}
    with db.session_scope():
        partner = db.staff.create({
            "guild_id": guild_id, "user_id": "100", "username": "partner",
            "role": "Senior Partner", "hired_at": HIRED,
        })
        db.staff.create({
            "guild_id": guild_id, "user_id": "101", "username": "ghost",
            "role": "Senior Associate", "hired_at": HIRED, "status": "on-leave",
        })
        dangling = db.cases.create({
            "guild_id": guild_id, "case_number": "C-1", "client_id": "500",
            "lead_attorney_id": "999", "assigned_lawyer_ids": ["100", "998"],
        })
        unassigned_lead = db.cases.create({
            "guild_id": guild_id, "case_number": "C-2", "client_id": "501",
            "lead_attorney_id": "100", "assigned_lawyer_ids": [],
        })
        orphan = db.applications.create({
            "guild_id": guild_id, "job_id": 4242, "applicant_id": "600",
        })
        retainer = db.retainers.create({
            "guild_id": guild_id, "client_id": "502", "lawyer_id": "997",
        })
        feedback = db.feedback.create({
            "guild_id": guild_id, "submitter_id": "503", "target_staff_id": "996",
        })
        reminder = db.reminders.create({
            "guild_id": guild_id, "user_id": "100", "case_id": 4343,
            "scheduled_for": datetime(2030, 1, 1, tzinfo=timezone.utc),
        })
        ids.update(
            partner=partner.id,
            dangling_case=dangling.id,
            unassigned_lead_case=unassigned_lead.id,
            orphan_application=orphan.id,
            retainer=retainer.id,
            feedback=feedback.id,
            reminder=reminder.id,
        )
    return ids


def populate_clean_guild(db: CaseLedgerDB, guild_id: str = CLEAN_GUILD) -> None:
    with db.session_scope():
        db.staff.create({
            "guild_id": guild_id, "user_id": "200", "username": "lead",
            "role": "Managing Partner", "hired_at": HIRED,
        })
        case = db.cases.create({
            "guild_id": guild_id, "case_number": "C-9", "client_id": "700",
            "lead_attorney_id": "200", "assigned_lawyer_ids": ["200"],
        })
        db.reminders.create({
            "guild_id": guild_id, "user_id": "200", "case_id": case.id,
            "scheduled_for": datetime(2030, 1, 1, tzinfo=timezone.utc),
        })


@pytest.fixture
def seeded_ids(cli_paths):
    """Populate cli_paths' database and return the broken guild's record ids."""
    db = CaseLedgerDB(cli_paths["db_path"])
    try:
        ids = populate_broken_guild(db)
        populate_clean_guild(db)
    finally:
        db.close()
    return ids


@pytest.fixture
def seeded_db(cli_paths, seeded_ids):
    """Open CaseLedgerDB on the populated database."""
    db = CaseLedgerDB(cli_paths["db_path"])
    yield db
    db.close()


# ==================== CLI ====================

@pytest.fixture
def runner():
    """Create Click test runner."""
    return CliRunner()


@pytest.fixture
def invoke(runner, cli_paths):
    """Run the CLI with the temporary paths prepended."""

    def _invoke(args, **kwargs):
        base_args = [
            "--db-path", str(cli_paths["db_path"]),
            "--log-dir", str(cli_paths["log_dir"]),
            "--config", str(cli_paths["config"]),
        ]
        return runner.invoke(cli, base_args + list(args), obj={}, **kwargs)

    return _invoke

"""
Tests for integrity value types: issues, repair actions, reports, results.
"""
import dataclasses
import pytest
from datetime import datetime, timedelta, timezone

from caseledger.database.integrity import (
    IntegrityIssue,
    IntegrityReport,
    RepairAction,
    RepairKind,
    RepairResult,
    Severity,
)
from caseledger.database.models import EntityType


def _issue(severity, entity_type=EntityType.CASE, repairable=False):
    action = RepairAction.set_fields(entity_type, 1, closed_at=None) if repairable else None
    return IntegrityIssue(
        severity=severity,
        entity_type=entity_type,
        entity_id=1,
        message="something is off",
        can_auto_repair=repairable,
        repair_action=action,
    )


def _report(issues):
    started = datetime(2024, 5, 1, tzinfo=timezone.utc)
    return IntegrityReport(
        guild_id="1001",
        issues=tuple(issues),
        scan_started_at=started,
        scan_completed_at=started + timedelta(seconds=2),
        total_entities_scanned=10,
    )


class TestSeverity:
    def test_rank_orders_most_severe_first(self):
        ordered = sorted([Severity.INFO, Severity.CRITICAL, Severity.WARNING], key=lambda s: s.rank)
        assert ordered == [Severity.CRITICAL, Severity.WARNING, Severity.INFO]


class TestRepairAction:
    def test_set_fields(self):
        action = RepairAction.set_fields(EntityType.CASE, 7, lead_attorney_id=None)
        assert action.kind is RepairKind.SET_FIELDS
        assert action.changes == {"lead_attorney_id": None}
        assert action.describe() == "set lead_attorney_id=None on case 7"

    def test_list_actions(self):
        remove = RepairAction.remove_from_list(EntityType.CASE, 7, "assigned_lawyer_ids", "42")
        append = RepairAction.append_to_list(EntityType.CASE, 7, "assigned_lawyer_ids", "42")
        assert remove.describe() == "remove '42' from assigned_lawyer_ids on case 7"
        assert append.describe() == "append '42' to assigned_lawyer_ids on case 7"

    def test_to_dict_is_plain_data(self):
        action = RepairAction.set_fields(EntityType.RETAINER, 3, lawyer_id=None)
        assert action.to_dict() == {
            "kind": "set_fields",
            "entity_type": "retainer",
            "entity_id": 3,
            "changes": {"lawyer_id": None},
            "list_field": None,
            "value": None,
        }

    def test_is_immutable(self):
        action = RepairAction.set_fields(EntityType.CASE, 7, closed_at=None)
        with pytest.raises(dataclasses.FrozenInstanceError):
            action.entity_id = 8


class TestIntegrityIssue:
    def test_is_repairable_needs_flag_and_action(self):
        assert _issue(Severity.CRITICAL, repairable=True).is_repairable
        assert not _issue(Severity.CRITICAL).is_repairable
        flagged_only = dataclasses.replace(_issue(Severity.CRITICAL), can_auto_repair=True)
        assert not flagged_only.is_repairable

    def test_to_dict(self):
        data = _issue(Severity.WARNING, repairable=True).to_dict()
        assert data["severity"] == "warning"
        assert data["entity_type"] == "case"
        assert data["repair_action"]["kind"] == "set_fields"


class TestIntegrityReport:
    def test_empty_report_is_healthy(self):
        report = _report([])
        assert report.status == "healthy"
        assert report.issues_by_severity == {"critical": 0, "warning": 0, "info": 0}
        assert report.issues_by_entity_type == {}
        assert report.repairable_issues == 0

    def test_counts(self):
        report = _report([
            _issue(Severity.CRITICAL, repairable=True),
            _issue(Severity.WARNING, EntityType.STAFF),
            _issue(Severity.WARNING, EntityType.STAFF, repairable=True),
            _issue(Severity.INFO, EntityType.JOB),
        ])
        assert report.issues_by_severity == {"critical": 1, "warning": 2, "info": 1}
        assert report.issues_by_entity_type == {"case": 1, "staff": 2, "job": 1}
        assert report.repairable_issues == 2
        assert report.status == "critical"
        assert report.duration_seconds == 2

    def test_flag_without_action_is_not_repairable(self):
        flagged_only = dataclasses.replace(_issue(Severity.CRITICAL), can_auto_repair=True)
        report = _report([flagged_only, _issue(Severity.WARNING, repairable=True)])
        assert report.repairable_issues == 1

    def test_warning_status_without_critical(self):
        assert _report([_issue(Severity.INFO)]).status == "warning"

    def test_report_is_immutable(self):
        report = _report([])
        with pytest.raises(dataclasses.FrozenInstanceError):
            report.guild_id = "2002"
        assert isinstance(report.issues, tuple)

    def test_to_dict(self):
        data = _report([_issue(Severity.CRITICAL)]).to_dict()
        assert data["status"] == "critical"
        assert data["total_entities_scanned"] == 10
        assert len(data["issues"]) == 1
        assert data["scan_started_at"].startswith("2024-05-01")


class TestRepairResult:
    def test_empty_result(self):
        result = RepairResult()
        assert (result.total_issues_found, result.issues_repaired, result.issues_failed) == (0, 0, 0)
        assert result.failed_repairs == []
        assert result.issues_skipped == 0

    def test_skipped_is_remainder(self):
        result = RepairResult(total_issues_found=5, issues_repaired=2, issues_failed=1)
        assert result.issues_skipped == 2

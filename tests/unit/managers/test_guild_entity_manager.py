"""
test_guild_entity_manager.py
----------------------------
Unit tests for the config-driven guild entity manager and its Staff and
Case specializations.
"""
import pytest
from datetime import datetime, timezone

from caseledger.core.exceptions import ValidationError
from caseledger.database.managers import GuildEntityManager
from caseledger.database.models import Job


class TestFactoryMethods:
    """Test the for_* factory classmethods."""

    @pytest.mark.parametrize("factory,model_name", [
        ("for_jobs", "Job"),
        ("for_applications", "Application"),
        ("for_retainers", "Retainer"),
        ("for_feedback", "Feedback"),
        ("for_reminders", "Reminder"),
    ])
    def test_factory_binds_model(self, db_session, factory, model_name):
        manager = getattr(GuildEntityManager, factory)(db_session)
        assert manager.model_class.__name__ == model_name


class TestGuildEntityManagerCreate:
    def test_create_requires_fields(self, accessors):
        with pytest.raises(ValidationError, match="staff_role"):
            accessors.jobs.create({"guild_id": "1001", "title": "Clerk"})

    def test_create_rejects_unknown_fields(self, accessors):
        with pytest.raises(ValidationError, match="salary"):
            accessors.jobs.create(
                {"guild_id": "1001", "title": "Clerk", "staff_role": "Paralegal", "salary": 1}
            )

    def test_create_normalizes_datetimes(self, accessors):
        job = accessors.jobs.create(
            {
                "guild_id": 1001,
                "title": "Clerk",
                "staff_role": "Paralegal",
                "closed_at": "2024-06-01T00:00:00",
            }
        )
        assert job.id is not None
        assert job.guild_id == "1001"
        assert job.closed_at == datetime(2024, 6, 1, tzinfo=timezone.utc)

    def test_create_normalizes_booleans(self, make, accessors):
        job = make.job(is_open="no")
        feedback = make.feedback(is_for_firm=1)
        assert job.is_open is False
        assert feedback.is_for_firm is True

    def test_update_rejects_unparseable_boolean(self, make, accessors):
        reminder = make.reminder()
        with pytest.raises(ValidationError):
            accessors.reminders.update(reminder.id, {"is_active": "maybe"})


class TestGuildEntityManagerLookups:
    def test_find_by_id_missing_returns_none(self, accessors):
        assert accessors.jobs.find_by_id(999) is None

    def test_find_by_id_accepts_numeric_string(self, make, accessors):
        job = make.job()
        assert accessors.jobs.find_by_id(str(job.id)) is job

    def test_find_by_id_rejects_non_numeric(self, accessors):
        assert accessors.jobs.find_by_id("abc") is None

    def test_find_by_guild_id_is_scoped_and_ordered(self, make, make_other_guild, accessors):
        first = make.job()
        second = make.job()
        make_other_guild.job()

        assert accessors.jobs.find_by_guild_id("1001") == [first, second]
        assert accessors.jobs.count_by_guild_id("2002") == 1


class TestGuildEntityManagerUpdate:
    def test_update_sets_and_clears_fields(self, make, accessors):
        job = make.job(posted_by="user-9")
        updated = accessors.jobs.update(job.id, {"is_open": False, "posted_by": None})
        assert updated is job
        assert job.is_open is False
        assert job.posted_by is None

    def test_update_missing_returns_none(self, accessors):
        assert accessors.jobs.update(4242, {"is_open": False}) is None

    def test_update_immutable_field_raises(self, make, accessors):
        job = make.job()
        with pytest.raises(ValidationError, match="guild_id"):
            accessors.jobs.update(job.id, {"guild_id": "2002"})

    def test_update_list_field_copies_value(self, make, accessors):
        case = make.case()
        lawyers = ["user-1"]
        accessors.cases.update(case.id, {"assigned_lawyer_ids": lawyers})
        lawyers.append("user-2")
        assert case.assigned_lawyer_ids == ["user-1"]

    def test_delete(self, make, accessors, db_session):
        job = make.job()
        job_id = job.id
        assert accessors.jobs.delete(job_id) is True
        assert db_session.get(Job, job_id) is None
        assert accessors.jobs.delete(job_id) is False


class TestStaffManager:
    def test_create_defaults(self, make):
        staff = make.staff()
        assert staff.status == "active"
        assert staff.promotion_history == []

    def test_find_by_user_id_is_guild_scoped(self, make, make_other_guild, accessors):
        mine = make.staff(user_id="42")
        make_other_guild.staff(user_id="43")

        assert accessors.staff.find_by_user_id("1001", "42") is mine
        assert accessors.staff.find_by_user_id("1001", "43") is None
        assert accessors.staff.find_by_user_id("2002", "42") is None

    def test_find_by_user_id_empty_returns_none(self, accessors):
        assert accessors.staff.find_by_user_id("1001", "") is None


class TestCaseManager:
    def test_create_defaults(self, make):
        case = make.case()
        assert case.status == "pending"
        assert case.assigned_lawyer_ids == []

    def test_find_by_lead_attorney(self, make, accessors):
        led = make.case(lead_attorney_id="42")
        make.case(lead_attorney_id="43")
        assert accessors.cases.find_by_lead_attorney("1001", "42") == [led]

    def test_find_assigned_to_lawyer(self, make, accessors):
        first = make.case(assigned_lawyer_ids=["42", "43"])
        make.case(assigned_lawyer_ids=["43"])
        third = make.case(assigned_lawyer_ids=["42"])
        assert accessors.cases.find_assigned_to_lawyer("1001", "42") == [first, third]

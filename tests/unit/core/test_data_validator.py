"""
Tests for DataValidator normalization helpers.
"""
import pytest
from datetime import date, datetime, timezone

from caseledger.core.exceptions import ValidationError
from caseledger.core.validators import DataValidator
from caseledger.database.models import EntityType, StaffStatus


class TestNormalizeDatetime:
    def test_none_stays_none(self):
        assert DataValidator.normalize_datetime(None) is None

    def test_naive_datetime_becomes_utc(self):
        result = DataValidator.normalize_datetime(datetime(2024, 5, 1, 12, 30))
        assert result.tzinfo == timezone.utc
        assert result.hour == 12

    def test_date_becomes_midnight(self):
        result = DataValidator.normalize_datetime(date(2024, 5, 1))
        assert result == datetime(2024, 5, 1, tzinfo=timezone.utc)

    def test_iso_string(self):
        result = DataValidator.normalize_datetime("2024-05-01T08:00:00+00:00")
        assert result == datetime(2024, 5, 1, 8, tzinfo=timezone.utc)

    def test_invalid_string_raises(self):
        with pytest.raises(ValidationError, match="Invalid datetime format"):
            DataValidator.normalize_datetime("yesterday")

    def test_invalid_type_raises(self):
        with pytest.raises(ValidationError):
            DataValidator.normalize_datetime(12345)


class TestNormalizeEnum:
    def test_member_passes_through(self):
        assert DataValidator.normalize_enum(EntityType.CASE, EntityType) is EntityType.CASE

    def test_value_is_converted(self):
        assert DataValidator.normalize_enum("staff", EntityType) is EntityType.STAFF

    def test_unknown_value_lists_choices(self):
        with pytest.raises(ValidationError) as exc_info:
            DataValidator.normalize_enum("on-vacation", StaffStatus)
        assert "active, inactive, terminated" in str(exc_info.value)


class TestNormalizeScalars:
    @pytest.mark.parametrize("value,expected", [
        ("yes", True), ("0", False), (1, True), (False, False), (None, None),
    ])
    def test_normalize_bool(self, value, expected):
        assert DataValidator.normalize_bool(value) is expected

    def test_normalize_bool_rejects_garbage(self):
        with pytest.raises(ValidationError):
            DataValidator.normalize_bool("maybe")

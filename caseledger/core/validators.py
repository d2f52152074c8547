#!/usr/bin/env python3
"""
validators.py
--------------------
Data validation and normalization utilities for caseledger operations.

Provides type-safe conversion and validation used by the entity managers
and by the integrity engine when it accepts caller input.
"""
from __future__ import annotations

from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Type, TypeVar

from .exceptions import ValidationError

E = TypeVar("E", bound=Enum)


class DataValidator:
    """Centralized data validation for database operations."""

    @staticmethod
    def validate_required_fields(
        data: Dict[str, Any], required_fields: List[str]
    ) -> None:
        """
        Validate that required fields are present and non-empty.

        Args:
            data: Data dictionary to validate
            required_fields: List of required field names

        Raises:
            ValidationError: If validation fails
        """
        for field in required_fields:
            if field not in data or data[field] is None or data[field] == "":
                raise ValidationError(f"Required field '{field}' missing or empty")

    @staticmethod
    def normalize_bool(value: Any) -> Optional[bool]:
        """
        Convert various inputs to boolean.

        Args:
            value: Value to convert

        Returns:
            Boolean value or None

        Raises:
            ValidationError: If conversion fails
        """
        if isinstance(value, bool):
            return value
        elif isinstance(value, (int, float)):
            if value == 0:
                return False
            elif value == 1:
                return True
            else:
                raise ValidationError(f"Cannot convert numeric '{value}' to boolean")
        elif isinstance(value, str):
            if value.lower() in ("true", "1", "yes", "on"):
                return True
            elif value.lower() in ("false", "0", "no", "off"):
                return False
            else:
                raise ValidationError(f"Cannot convert '{value}' to boolean")
        elif value is not None:
            return bool(value)
        return None

    @staticmethod
    def normalize_datetime(value: Any) -> Optional[datetime]:
        """
        Normalize datetime input to a timezone-aware UTC datetime.

        Naive datetimes are assumed to be UTC. Plain dates become midnight.

        Args:
            value: datetime, date or ISO-8601 string

        Returns:
            Aware datetime or None

        Raises:
            ValidationError: If the string is not ISO-8601
        """
        if value is None:
            return None
        if isinstance(value, datetime):
            dt = value
        elif isinstance(value, date):
            dt = datetime(value.year, value.month, value.day)
        elif isinstance(value, str):
            try:
                dt = datetime.fromisoformat(value)
            except ValueError as e:
                raise ValidationError(f"Invalid datetime format: {value}") from e
        else:
            raise ValidationError(f"Invalid datetime type: {type(value)}")

        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt

    @staticmethod
    def normalize_enum(value: Any, enum_class: Type[E]) -> E:
        """
        Convert a value to a member of the given enum.

        Args:
            value: Enum member or its value
            enum_class: Target enum class

        Returns:
            Enum member

        Raises:
            ValidationError: If the value is not a member
        """
        if isinstance(value, enum_class):
            return value
        try:
            return enum_class(value)
        except ValueError as e:
            choices = ", ".join(str(m.value) for m in enum_class)
            raise ValidationError(
                f"Invalid {enum_class.__name__}: {value!r} (expected one of: {choices})"
            ) from e

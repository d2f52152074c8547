#!/usr/bin/env python3
"""
base_manager.py
--------------------
Base manager providing common utilities for entity managers.
All entity managers inherit from this class.

Key Features:
    - Session and logger ownership
    - Retry logic for SQLite lock handling
    - Object resolution helpers

Usage:
    class AuditLogManager(BaseManager):
        def add(self, entry: Dict[str, Any]) -> AuditLog:
            ...
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import time
from abc import ABC
from typing import Any, Callable, Optional, Protocol, Type, TypeVar, Union

# --- Third party imports ---
from sqlalchemy.orm import Session, Mapped
from sqlalchemy.exc import OperationalError

# --- Local imports ---
from caseledger.core.exceptions import DatabaseError
from caseledger.core.logging_manager import LedgerLogger, safe_logger


class HasId(Protocol):
    """Protocol for objects that have an id attribute."""

    id: Mapped[int]


T = TypeVar("T", bound=HasId)


class BaseManager(ABC):
    """
    Abstract base manager providing common utilities.

    Attributes:
        session: SQLAlchemy session for database operations
        logger: Optional logger for operation tracking
    """

    def __init__(self, session: Session, logger: Optional[LedgerLogger] = None):
        """
        Initialize the base manager.

        Args:
            session: SQLAlchemy session
            logger: Optional logger for operation tracking
        """
        self.session = session
        self.logger = logger

    def _execute_with_retry(
        self,
        operation: Callable,
        max_retries: int = 3,
        retry_delay: float = 0.1,
    ) -> Any:
        """
        Execute database operation with retry on lock.

        Args:
            operation: Callable that performs the operation
            max_retries: Maximum number of retry attempts
            retry_delay: Base delay between retries (exponential backoff)

        Returns:
            Result of the operation

        Raises:
            OperationalError: If all retries exhausted
            DatabaseError: If retry loop completes without success
        """
        for attempt in range(max_retries):
            try:
                return operation()
            except OperationalError as e:
                error_msg = str(e).lower()

                if (
                    "locked" in error_msg or "busy" in error_msg
                ) and attempt < max_retries - 1:
                    wait_time = retry_delay * (2**attempt)

                    safe_logger(self.logger).log_debug(
                        f"Database locked, retrying in {wait_time}s",
                        {"attempt": attempt + 1, "max_retries": max_retries},
                    )

                    time.sleep(wait_time)
                    continue

                raise

        raise DatabaseError("Retry loop completed without success")

    def _resolve_id(self, item: Union[T, int, str], model_class: Type[T]) -> Optional[int]:
        """
        Resolve an ORM instance or id-like value to an integer id.

        Args:
            item: Object instance, integer id, or numeric string
            model_class: Expected model class

        Returns:
            Integer id, or None if the value cannot name a record
        """
        if isinstance(item, model_class):
            return item.id
        if isinstance(item, bool):
            return None
        if isinstance(item, int):
            return item
        if isinstance(item, str) and item.strip().isdigit():
            return int(item.strip())
        return None

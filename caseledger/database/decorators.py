#!/usr/bin/env python3
"""
decorators.py
--------------------
Shared decorators for database and integrity operations.
"""
from functools import wraps
from typing import Callable, List
from datetime import datetime

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from caseledger.core.exceptions import DatabaseError
from caseledger.core.logging_manager import LogScope
from caseledger.core.validators import DataValidator


def log_database_operation(operation_name: str):
    """
    Decorator to log operations with timing and context.

    Works on methods of any object exposing a ``logger`` attribute
    (LedgerLogger or None).

    Args:
        operation_name: Name of the operation being logged

    Returns:
        Decorator function
    """

    def decorator(function: Callable) -> Callable:
        @wraps(function)
        def wrapper(self, *args, **kwargs):
            start_time = datetime.now()
            operation_id = f"{operation_name}_{start_time.strftime('%Y%m%d_%H%M%S_%f')}"
            logger = getattr(self, "logger", None)

            if logger:
                logger.log_debug(
                    f"Starting {operation_name}",
                    {
                        "operation_id": operation_id,
                        "args_count": len(args),
                        "kwargs_keys": list(kwargs.keys()),
                    },
                )

            try:
                result = function(self, *args, **kwargs)

                duration = (datetime.now() - start_time).total_seconds()
                if logger:
                    logger.log_operation(
                        f"{operation_name}_completed",
                        {
                            "operation_id": operation_id,
                            "duration_seconds": duration,
                            "success": True,
                        },
                    )

                return result

            except Exception as e:
                duration = (datetime.now() - start_time).total_seconds()
                if logger:
                    logger.log_error(
                        e,
                        {"operation_id": operation_id, "duration_seconds": duration},
                        scope=LogScope(operation=operation_name),
                    )
                raise

        return wrapper

    return decorator


def validate_metadata(required_fields: List[str]):
    """
    Decorator to validate metadata dictionaries before processing.

    The metadata dict is the last positional argument or the
    ``metadata`` keyword argument.

    Args:
        required_fields: List of required field names

    Returns:
        Decorator function
    """

    def decorator(function: Callable) -> Callable:
        @wraps(function)
        def wrapper(self, *args, **kwargs):
            metadata = args[-1] if args else kwargs.get("metadata", {})

            DataValidator.validate_required_fields(metadata, required_fields)

            return function(self, *args, **kwargs)

        return wrapper

    return decorator


def handle_db_errors(function: Callable) -> Callable:
    """
    Decorator to convert SQLAlchemy errors into DatabaseError.

    Args:
        function: Function to wrap

    Returns:
        Wrapped function with error handling
    """

    @wraps(function)
    def wrapper(*args, **kwargs):
        try:
            return function(*args, **kwargs)
        except IntegrityError as e:
            raise DatabaseError(f"Data integrity violation: {e}") from e
        except SQLAlchemyError as e:
            raise DatabaseError(f"Database operation failed: {e}") from e

    return wrapper

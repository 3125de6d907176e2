"""
Database error handling utilities.

This module provides a reusable context manager for handling database
errors consistently in API routes. It centralizes the pattern of:
1. Rolling back the database session on error
2. Logging the error with context
3. Raising an opaque HTTPException (store failures never leak driver text)

Expected failures (HTTPException and AssessmentError subclasses) pass
through untouched so their own handlers can report them.

Usage:
    from app.core.db_error_handling import handle_db_error

    with handle_db_error(db, "submit section answers"):
        submit_section(db, principal, attempt_id, section_type, answers)
"""

import logging
from contextlib import contextmanager
from typing import Generator, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.core.error_responses import ErrorMessages
from app.core.exceptions import AssessmentError


logger = logging.getLogger(__name__)


class DatabaseOperationError(Exception):
    """Exception raised when a database operation fails outside a request.

    Used where HTTPException is not appropriate (CLI commands such as the
    role seeder).

    Attributes:
        operation_name: Human-readable name of the operation that failed
        original_error: The underlying exception that caused the failure
        message: The formatted error message
    """

    def __init__(
        self,
        operation_name: str,
        original_error: Exception,
        message: Optional[str] = None,
    ):
        self.operation_name = operation_name
        self.original_error = original_error
        self.message = message or f"Failed to {operation_name}: {str(original_error)}"
        super().__init__(self.message)


@contextmanager
def handle_db_error(
    db: Session,
    operation_name: str,
    *,
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
    log_level: int = logging.ERROR,
) -> Generator[None, None, None]:
    """Context manager for handling database errors consistently.

    Args:
        db: The SQLAlchemy database session to rollback on error.
        operation_name: Human-readable name of the operation for error messages
            and logging (e.g., "finish test attempt").
        status_code: HTTP status code to use in the raised HTTPException.
            Defaults to 500 Internal Server Error.
        log_level: Logging level for error messages. Defaults to logging.ERROR.

    Raises:
        HTTPException: On any unexpected exception, with the session rolled back.

    Example:
        >>> with handle_db_error(db, "create test template"):
        ...     template = create_template(db, title, description)
        ...     return TestTemplateResponse.model_validate(template)

    The return statement belongs inside the block so that response
    construction failures are logged with the same operation context.
    """
    try:
        yield
    except (HTTPException, AssessmentError):
        db.rollback()
        raise
    except Exception as e:
        db.rollback()

        logger.log(
            log_level,
            f"Database error during {operation_name}: {e}",
            exc_info=True,
        )

        raise HTTPException(
            status_code=status_code,
            detail=ErrorMessages.database_operation_failed(operation_name),
        )

"""
Domain exceptions raised by the attempt lifecycle and admin services.

These are used in code that does not know about HTTP. Each carries the
status code the API reports for it; main.py registers one exception handler
that converts them into JSON error responses, and handle_db_error lets them
pass through untouched.
"""

from fastapi import status


class AssessmentError(Exception):
    """Base class for expected, user-facing failures."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(AssessmentError):
    """Resource missing, or owned by someone else (the two are not distinguished)."""

    status_code = status.HTTP_404_NOT_FOUND


class PermissionDeniedError(AssessmentError):
    """Caller is authenticated but lacks the role or right for the operation."""

    status_code = status.HTTP_403_FORBIDDEN


class ValidationFailureError(AssessmentError):
    """Required identifiers missing or inconsistent."""

    status_code = status.HTTP_400_BAD_REQUEST


class InvalidStateError(AssessmentError):
    """Operation not allowed in the attempt's current state."""

    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(AssessmentError):
    """Uniqueness violation that cannot be recovered locally."""

    status_code = status.HTTP_409_CONFLICT

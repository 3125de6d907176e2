"""
Standardized error response messages and builders.

This module provides consistent error messages and HTTPException builders
for the entire API.

Error Message Format Guidelines:
- Use sentence case (capitalize first letter only)
- End with a period for complete sentences
- Use "Please try again later." for transient server errors
- Never reveal whether another user's attempt exists

Usage:
    from app.core.error_responses import ErrorMessages, raise_unauthorized

    raise_unauthorized(ErrorMessages.INVALID_TOKEN)
"""

from typing import NoReturn

from fastapi import HTTPException, status


class ErrorMessages:
    """Centralized error message constants and templates.

    Naming Convention:
    - Constants: SCREAMING_SNAKE_CASE for static messages
    - Methods: snake_case for templates that accept parameters
    """

    # ==========================================================================
    # Authentication Errors (401)
    # ==========================================================================
    INVALID_CREDENTIALS = "Invalid credentials."
    INVALID_TOKEN = "Invalid authentication token."
    INVALID_TOKEN_TYPE = "Invalid token type."
    INVALID_TOKEN_PAYLOAD = "Invalid token payload."

    # ==========================================================================
    # Authorization Errors (403)
    # ==========================================================================
    TEST_TAKERS_ONLY = "Access denied. This action is for assigned test-takers only."
    ADMINS_ONLY = "Access denied. Admins only."
    CANNOT_DELETE_SELF = "Action forbidden: You cannot delete your own account."

    # ==========================================================================
    # Not Found Errors (404)
    # ==========================================================================
    # Ownership failures use the same message as absence on purpose
    ATTEMPT_NOT_FOUND = "Test attempt not found or you do not have permission."
    SECTION_NOT_FOUND = "Section not found."
    TEMPLATE_NOT_FOUND = "Test template not found."
    TEMPLATE_SECTION_NOT_FOUND = "Section not found for this template."
    SCHEDULED_TEST_NOT_FOUND = "Scheduled test not found."
    USER_NOT_FOUND = "User not found."

    # ==========================================================================
    # Conflict Errors (409)
    # ==========================================================================
    USER_ALREADY_EXISTS = "Email or username or personal ID already exists."

    # ==========================================================================
    # Bad Request Errors (400)
    # ==========================================================================
    SCHEDULE_FIELDS_REQUIRED = (
        "A test template ID, start time, and end time are required."
    )
    SCHEDULE_WINDOW_INVALID = "End time must not be earlier than start time."
    TITLE_REQUIRED = "Title is required."

    # ==========================================================================
    # Template Methods for Dynamic Messages
    # ==========================================================================
    @staticmethod
    def attempt_already_completed(status: str) -> str:
        """Message for when trying to modify a completed attempt."""
        return (
            f"Test attempt is already {status}. "
            "Only in-progress attempts can be modified."
        )

    @staticmethod
    def role_not_found(role_name: str) -> str:
        """Message when a role name does not exist."""
        return f"Role '{role_name}' not found."

    @staticmethod
    def role_already_assigned(role_name: str) -> str:
        """Message when a user already holds a role."""
        return f"User already has the '{role_name}' role."

    @staticmethod
    def role_not_assigned(role_name: str) -> str:
        """Message when revoking a role the user does not hold."""
        return f"The user does not have the '{role_name}' role to begin with."

    @staticmethod
    def database_operation_failed(operation: str) -> str:
        """Generic message for database operation failures."""
        return f"Failed to {operation}. Please try again later."


# ==============================================================================
# HTTPException Builder Functions
# ==============================================================================


def raise_unauthorized(
    detail: str,
    include_www_authenticate: bool = True,
) -> NoReturn:
    """Raise a 401 Unauthorized exception.

    Use for authentication failures (invalid/missing credentials).

    Args:
        detail: User-facing error message
        include_www_authenticate: Whether to include WWW-Authenticate header

    Raises:
        HTTPException: 401 Unauthorized
    """
    headers = {"WWW-Authenticate": "Bearer"} if include_www_authenticate else None
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers=headers,
    )


def raise_forbidden(detail: str) -> NoReturn:
    """Raise a 403 Forbidden exception.

    Use for authorization failures (valid credentials but insufficient permissions).

    Raises:
        HTTPException: 403 Forbidden
    """
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail=detail,
    )

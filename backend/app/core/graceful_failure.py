"""
Graceful failure utilities.

Context manager for operations whose failure must never reach the caller,
such as answer saves delivered from a page-unload beacon. It centralizes
the pattern of:
1. Attempting an operation
2. Logging any exception with context
3. Continuing execution without raising

This is distinct from `db_error_handling.py`, which handles errors that
require an HTTP error response.

Usage:
    from app.core.graceful_failure import graceful_failure

    with graceful_failure("save beacon answers", logger, context={"attempt_id": 7}):
        submit_section_answers(db, attempt_id, section_type, answers)
"""

import logging
from contextlib import contextmanager
from typing import Any, Generator, Optional

from app.observability import capture_error


@contextmanager
def graceful_failure(
    operation_name: str,
    logger: logging.Logger,
    *,
    log_level: int = logging.WARNING,
    exc_info: bool = False,
    context: Optional[dict[str, Any]] = None,
) -> Generator[None, None, None]:
    """Context manager for operations that should not block execution.

    Unlike `handle_db_error`, this does NOT raise and does NOT rollback a
    session; callers that hold a session roll it back themselves.

    Args:
        operation_name: Human-readable name of the operation for logging.
        logger: The logger instance to use for logging errors.
        log_level: Logging level for error messages. Defaults to WARNING.
        exc_info: Whether to include exception traceback in log.
        context: Optional additional context for the log message
            (e.g., {"attempt_id": 123}).

    Example:
        >>> with graceful_failure("save beacon answers", logger, log_level=logging.ERROR):
        ...     submit_section_answers(db, attempt_id, section_type, answers)
    """
    try:
        yield
    except Exception as e:
        if context:
            context_str = ", ".join(f"{k}={v}" for k, v in context.items())
            message = f"Failed to {operation_name} ({context_str}): {e}"
        else:
            message = f"Failed to {operation_name}: {e}"

        logger.log(log_level, message, exc_info=exc_info)

        # Reporting must not break graceful failure handling
        try:
            capture_error(e, context={"operation": operation_name, **(context or {})})
        except Exception:
            pass

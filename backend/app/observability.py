"""
Error tracking via Sentry.

Sentry is optional: when SENTRY_DSN is empty every function here is a
no-op, so tests and local development never talk to an external service.

Usage:
    from app.observability import capture_error

    capture_error(exc, context={"path": "/v1/tests/available"})
"""
import logging
from datetime import date, datetime
from typing import Any, Optional

import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration

from app.core.config import settings

logger = logging.getLogger(__name__)

_initialized = False


def _serialize_value(value: Any) -> Any:
    """Serialize a context value to a JSON-compatible type."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): _serialize_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_serialize_value(item) for item in value]
    return str(value)


def init_error_tracking() -> bool:
    """Initialize the Sentry SDK.

    Returns:
        True if Sentry was initialized, False if skipped (no DSN) or failed.

    Note:
        Does not raise - failures are logged and return False.
    """
    global _initialized

    if not settings.SENTRY_DSN:
        logger.debug("Sentry initialization skipped (DSN not configured)")
        return False

    try:
        sentry_sdk.init(
            dsn=settings.SENTRY_DSN,
            environment=settings.ENV,
            release=settings.APP_VERSION,
            traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
            send_default_pii=False,
            integrations=[
                LoggingIntegration(
                    level=None,  # Don't capture breadcrumbs from logs
                    event_level=None,  # Don't send log events
                ),
            ],
        )
    except Exception as e:
        logger.warning(f"Failed to initialize Sentry: {e}")
        return False

    _initialized = True
    logger.info("Sentry error tracking initialized")
    return True


def capture_error(
    exc: BaseException,
    context: Optional[dict[str, Any]] = None,
) -> None:
    """Report an exception to Sentry with optional context."""
    if not _initialized:
        return

    with sentry_sdk.new_scope() as scope:
        if context:
            scope.set_context("request", _serialize_value(context))
        sentry_sdk.capture_exception(exc)


def shutdown_error_tracking() -> None:
    """Flush pending Sentry events."""
    if _initialized:
        sentry_sdk.flush(timeout=2.0)

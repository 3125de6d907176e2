"""
Request size enforcement for answer submissions.
"""
import logging

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
from typing import Callable

logger = logging.getLogger(__name__)


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """
    Middleware to enforce maximum request body size limits.

    Section submissions carry whole answer mappings; anything above the
    configured limit is rejected before it reaches a route.

    Page-unload beacons are exempt: they must always be acknowledged, so
    the beacon route applies the limit itself and drops oversized bodies.
    """

    # Paths that enforce their own limit and never answer with an error
    EXEMPT_PATH_SUFFIXES = ("/submit-section/beacon",)

    def __init__(self, app: ASGIApp, max_body_size: int = 1024 * 1024):
        """
        Initialize request size limit middleware.

        Args:
            app: ASGI application
            max_body_size: Maximum request body size in bytes (default: 1MB)
        """
        super().__init__(app)
        self.max_body_size = max_body_size

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Check the declared Content-Length before processing.

        Args:
            request: HTTP request
            call_next: Next middleware in chain

        Returns:
            HTTP response, or 413 if the body is too large
        """
        if request.url.path.endswith(self.EXEMPT_PATH_SUFFIXES):
            return await call_next(request)

        content_length = request.headers.get("content-length")
        if content_length:
            try:
                declared_size = int(content_length)
            except ValueError:
                return Response(
                    content='{"detail": "Invalid Content-Length header"}',
                    status_code=400,
                    media_type="application/json",
                )
            if declared_size > self.max_body_size:
                logger.warning(
                    f"Rejected {declared_size}-byte request body",
                    extra={"method": request.method, "path": request.url.path},
                )
                return Response(
                    content='{"detail": "Request body too large"}',
                    status_code=413,
                    media_type="application/json",
                )

        return await call_next(request)

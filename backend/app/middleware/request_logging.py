"""
Request/response logging middleware for tracking API interactions.
"""
import logging
import time
import uuid
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from typing import Callable

from app.core.auth.security import decode_token
from app.core.logging_config import request_id_context

logger = logging.getLogger(__name__)


def _user_identifier(request: Request) -> str:
    """
    Describe the caller for log lines without logging the token.

    The token is decoded only to read its user id; authorization still
    happens in the route dependencies.
    """
    auth_header = request.headers.get("Authorization", "")
    # Beacons and login carry no token
    if not auth_header.startswith("Bearer "):
        return "anonymous"

    payload = decode_token(auth_header[7:])
    if payload is None or payload.get("user_id") is None:
        return "invalid-token"
    return f"user:{payload['user_id']}"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to log incoming requests and outgoing responses.

    Logs:
    - Request method and path
    - Response status code and duration
    - User identifier (from the bearer token, if present)

    Request bodies are never logged: they carry passwords or test answers.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Process request and log details.

        Args:
            request: Incoming request
            call_next: Next middleware/endpoint in chain

        Returns:
            Response from the endpoint
        """
        # Generate or extract request ID for correlation
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request_id_context.set(request_id)

        start_time = time.time()

        # Identify the caller by user id only, never by token text
        user_identifier = _user_identifier(request)
        method = request.method
        path = str(request.url.path)
        client_host = request.client.host if request.client else "unknown"

        # Log incoming request with structured fields
        logger.info(
            "Incoming request",
            extra={
                "method": method,
                "path": path,
                "client_host": client_host,
                "user_identifier": user_identifier,
            },
        )

        # Process request
        response = await call_next(request)

        # Calculate duration in milliseconds
        duration_ms = round((time.time() - start_time) * 1000, 2)
        status_code = response.status_code

        # Add request_id header to response for client-side correlation
        response.headers["X-Request-ID"] = request_id

        # Log response with structured fields
        extra_fields = {
            "method": method,
            "path": path,
            "status_code": status_code,
            "duration_ms": duration_ms,
            "client_host": client_host,
            "user_identifier": user_identifier,
        }

        if status_code >= 500:
            logger.error("Server error response", extra=extra_fields)
        elif status_code >= 400:
            logger.warning("Client error response", extra=extra_fields)
        else:
            logger.info("Request completed", extra=extra_fields)

        return response

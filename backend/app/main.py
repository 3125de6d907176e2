"""
Main FastAPI application.
"""
import logging
import uuid
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.v1.api import api_router
from app.core.config import settings
from app.core.exceptions import AssessmentError
from app.core.logging_config import setup_logging
from app.middleware import RequestLoggingMiddleware, RequestSizeLimitMiddleware
from app.observability import (
    capture_error,
    init_error_tracking,
    shutdown_error_tracking,
)

# Initialize logging configuration at startup
setup_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan event handler.

    - On startup: Initializes error tracking
    - On shutdown: Flushes pending error reports
    """
    init_error_tracking()
    logger.info(f"{settings.APP_NAME} {settings.APP_VERSION} starting ({settings.ENV})")

    yield

    shutdown_error_tracking()
    logger.info("Application shutting down")


# OpenAPI tags metadata
tags_metadata = [
    {
        "name": "health",
        "description": "Health check endpoints for monitoring application status",
    },
    {
        "name": "auth",
        "description": "Registration and login by personal ID",
    },
    {
        "name": "tests",
        "description": "Available tests and the test attempt lifecycle for test-takers",
    },
    {
        "name": "Admin - Users",
        "description": "User listing, role assignment and account deletion",
    },
    {
        "name": "Admin - Tests",
        "description": "Template builder and scheduling",
    },
    {
        "name": "Admin - Attempts",
        "description": "Completed attempt review",
    },
]


def _validation_errors(exc: RequestValidationError) -> list:
    """Convert validation errors to a JSON-serializable list."""
    errors = []
    for error in exc.errors():
        errors.append(
            {
                "loc": list(error.get("loc", [])),
                "msg": str(error.get("msg", "")),
                "type": str(error.get("type", "")),
            }
        )
    return errors


def create_application() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        lifespan=lifespan,
        description=(
            "**Exam Room API** - Scheduled listening, reading and writing tests.\n\n"
            "This API provides:\n"
            "* Registration and login with role-based access\n"
            "* A template builder and scheduling for administrators\n"
            "* Test attempts with per-section answer saving\n"
            "* Automatic grading of listening and reading sections\n\n"
            "## Authentication\n\n"
            "Endpoints require a JWT Bearer token from `/v1/auth/login`, except "
            "the unload beacon, which cannot send headers."
        ),
        docs_url=f"{settings.API_V1_PREFIX}/docs",
        redoc_url=f"{settings.API_V1_PREFIX}/redoc",
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        openapi_tags=tags_metadata,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
    )

    # Configure Request Logging
    app.add_middleware(RequestLoggingMiddleware)

    # Configure Request Size Limits
    app.add_middleware(
        RequestSizeLimitMiddleware, max_body_size=settings.MAX_REQUEST_BODY_BYTES
    )

    # Include API router
    app.include_router(api_router, prefix=settings.API_V1_PREFIX)

    @app.exception_handler(AssessmentError)
    async def assessment_error_handler(request: Request, exc: AssessmentError):
        """
        Convert domain errors raised by the services into JSON responses.
        """
        logger.info(
            f"{exc.__class__.__name__}: {exc.message}",
            extra={
                "method": request.method,
                "path": str(request.url.path),
                "status_code": exc.status_code,
            },
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """
        Handle HTTP exceptions; server errors are reported to error tracking.
        """
        if exc.status_code >= 500:
            capture_error(
                exc,
                context={
                    "path": str(request.url.path),
                    "method": request.method,
                    "status_code": exc.status_code,
                },
            )

        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ):
        """
        Handle request validation errors.
        """
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": _validation_errors(exc)},
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        """
        Handle unexpected exceptions.

        Generates a unique error_id (UUID) for each exception so a reported
        failure can be traced in logs. The error_id is included in the
        response body and logged with the full exception.
        """
        error_id = str(uuid.uuid4())

        logger.exception(
            f"Unhandled exception [error_id={error_id}]: {exc}",
            extra={"error_id": error_id},
        )

        capture_error(
            exc,
            context={
                "path": str(request.url.path),
                "method": request.method,
                "error_id": error_id,
            },
        )

        # Don't leak internal details
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "Internal server error",
                "error_id": error_id,
            },
        )

    return app


app = create_application()


@app.get("/")
async def root():
    """
    Root endpoint.
    """
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": f"{settings.API_V1_PREFIX}/docs",
    }

"""
Admin API endpoints.

All endpoints require a bearer token whose roles include ADMIN.

Submodules:
    - users: User listing, role assignment and revocation, account deletion
    - templates: Test template builder (shells, section content, deletion)
    - schedules: Scheduling templates for time windows and the kill-switch
    - attempts: Completed attempt review with answer keys
"""
from fastapi import APIRouter

from . import attempts, schedules, templates, users

# Create the main admin router
router = APIRouter()

router.include_router(
    users.router,
    tags=["Admin - Users"],
)

router.include_router(
    attempts.router,
    tags=["Admin - Attempts"],
)

router.include_router(
    templates.router,
    prefix="/tests",
    tags=["Admin - Tests"],
)

router.include_router(
    schedules.router,
    prefix="/tests",
    tags=["Admin - Tests"],
)

__all__ = ["router"]

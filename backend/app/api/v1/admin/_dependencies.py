"""
Shared dependencies for admin endpoints.

Every admin route requires a bearer token whose roles include ADMIN.
"""
import logging

from app.core.auth import Principal, require_admin

# Configure logger for admin operations
logger = logging.getLogger(__name__)

__all__ = ["Principal", "logger", "require_admin"]

"""
Models package for the test administration backend.
"""
from .base import Base, engine, SessionLocal, get_db
from .models import (
    User,
    Role,
    UserRole,
    TestTemplate,
    Section,
    ScheduledTest,
    TestAttempt,
    SectionType,
    AttemptStatus,
    RoleName,
)

__all__ = [
    "Base",
    "engine",
    "SessionLocal",
    "get_db",
    "User",
    "Role",
    "UserRole",
    "TestTemplate",
    "Section",
    "ScheduledTest",
    "TestAttempt",
    "SectionType",
    "AttemptStatus",
    "RoleName",
]

"""
Database models for the test administration backend.

Templates own exactly one Section per SectionType. Schedules expose a
template for a time window, and a TestAttempt records one user's answers
and results for one schedule.
"""
from sqlalchemy import (
    Column,
    Integer,
    String,
    Boolean,
    DateTime,
    ForeignKey,
    Text,
    Enum,
    UniqueConstraint,
    Index,
    JSON,
)
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
import enum

from .base import Base


class SectionType(str, enum.Enum):
    """Fixed section types of a test template."""

    LISTENING = "LISTENING"
    READING = "READING"
    WRITING = "WRITING"


class AttemptStatus(str, enum.Enum):
    """Test attempt status enumeration.

    IN_PROGRESS -> COMPLETED is the only transition.
    """

    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class RoleName(str, enum.Enum):
    """Role names assignable to users."""

    USER = "USER"
    ADMIN = "ADMIN"


class User(Base):
    """User model for authentication and profile."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    username = Column(String(100), unique=True, nullable=False)
    personal_id = Column(String(50), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    phone_number = Column(String(30), nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    # Relationships
    roles = relationship(
        "UserRole", back_populates="user", cascade="all, delete-orphan"
    )
    test_attempts = relationship(
        "TestAttempt", back_populates="user", cascade="all, delete-orphan"
    )

    @property
    def role_names(self) -> list[str]:
        """Names of all roles assigned to this user."""
        return sorted(user_role.role.name for user_role in self.roles)


class Role(Base):
    """Named role (USER, ADMIN)."""

    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), unique=True, nullable=False)
    description = Column(String(255))

    users = relationship("UserRole", back_populates="role", cascade="all, delete-orphan")


class UserRole(Base):
    """Junction table assigning roles to users."""

    __tablename__ = "user_roles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    role_id = Column(
        Integer, ForeignKey("roles.id", ondelete="CASCADE"), nullable=False
    )
    assigned_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    user = relationship("User", back_populates="roles")
    role = relationship("Role", back_populates="users")

    __table_args__ = (UniqueConstraint("user_id", "role_id", name="uq_user_role"),)


class TestTemplate(Base):
    """Authored test made of one section per SectionType."""

    __tablename__ = "test_templates"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )

    # Relationships
    sections = relationship(
        "Section",
        back_populates="test_template",
        cascade="all, delete-orphan",
        order_by="Section.id",
    )
    scheduled_tests = relationship("ScheduledTest", back_populates="test_template")


class Section(Base):
    """One section of a template.

    `content` is shown to test-takers; `answers` is the answer key and must
    never leave the server while an attempt is in progress.
    """

    __tablename__ = "sections"

    id = Column(Integer, primary_key=True, index=True)
    test_template_id = Column(
        Integer,
        ForeignKey("test_templates.id", ondelete="CASCADE"),
        nullable=False,
    )
    type = Column(Enum(SectionType), nullable=False)
    content = Column(JSON, nullable=False, default=dict)
    # Format: {"q1": "A", "q2": ["x", "y"]} - lists are order-irrelevant sets
    answers = Column(JSON, nullable=False, default=dict)

    test_template = relationship("TestTemplate", back_populates="sections")

    __table_args__ = (
        UniqueConstraint("test_template_id", "type", name="uq_section_template_type"),
    )


class ScheduledTest(Base):
    """A template made attemptable for a time window."""

    __tablename__ = "scheduled_tests"

    id = Column(Integer, primary_key=True, index=True)
    test_template_id = Column(
        Integer,
        ForeignKey("test_templates.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    test_template = relationship("TestTemplate", back_populates="scheduled_tests")
    test_attempts = relationship(
        "TestAttempt", back_populates="scheduled_test", cascade="all, delete-orphan"
    )

    # Availability lookups filter on all three columns
    __table_args__ = (
        Index("ix_scheduled_tests_window", "is_active", "start_time", "end_time"),
    )


class TestAttempt(Base):
    """One user's attempt at one scheduled test."""

    __tablename__ = "test_attempts"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    scheduled_test_id = Column(
        Integer,
        ForeignKey("scheduled_tests.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    status = Column(
        Enum(AttemptStatus),
        default=AttemptStatus.IN_PROGRESS,
        nullable=False,
        index=True,
    )
    # Format: {"LISTENING": {"q1": "A"}, "READING": {"q3": ["b", "a"]}}
    user_answers = Column(JSON, nullable=True)
    # Format: {"LISTENING": 7, "READING": 9} - WRITING is never scored
    results = Column(JSON, nullable=True)
    started_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    completed_at = Column(DateTime(timezone=True), index=True)

    user = relationship("User", back_populates="test_attempts")
    scheduled_test = relationship("ScheduledTest", back_populates="test_attempts")

    # At most one attempt per (user, schedule); start() relies on this to
    # resolve concurrent creation.
    __table_args__ = (
        UniqueConstraint(
            "user_id", "scheduled_test_id", name="uq_test_attempt_user_schedule"
        ),
        Index("ix_test_attempts_status_completed", "status", "completed_at"),
    )

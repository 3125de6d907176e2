"""
Pydantic schemas for admin endpoints.
"""
from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, List, Optional
from datetime import datetime

from app.core.validators import StringSanitizer, TextValidator
from app.models import SectionType
from app.schemas.tests import TemplateSummary, TestAttemptResponse


class MessageResponse(BaseModel):
    """Schema for a plain confirmation message."""

    message: str = Field(..., description="Confirmation message")


# =============================================================================
# Users and roles
# =============================================================================


class AssignRoleRequest(BaseModel):
    """Schema for granting a role to a user."""

    user_id: int = Field(..., gt=0, description="User ID")
    role_name: str = Field(..., min_length=1, max_length=50, description="Role name")

    @field_validator("role_name")
    @classmethod
    def normalize_role_name(cls, v: str) -> str:
        """Role names are stored upper-case."""
        return TextValidator.validate_non_empty_text(v, "Role name").upper()


# =============================================================================
# Templates
# =============================================================================


class TemplateCreateRequest(BaseModel):
    """Schema for creating a template shell."""

    title: str = Field(..., min_length=1, max_length=255, description="Template title")
    description: Optional[str] = Field(
        None, max_length=5000, description="Template description"
    )

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Reject blank titles and strip unsafe markup."""
        v = TextValidator.validate_non_empty_text(v, "Title")
        return StringSanitizer.sanitize_string(v)

    @field_validator("description")
    @classmethod
    def sanitize_description(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return StringSanitizer.sanitize_string(v)


class SectionUpdateRequest(BaseModel):
    """Schema for replacing a section's content and/or answer key."""

    content: Optional[Dict[str, Any]] = Field(
        None, description="Section material shown to test-takers"
    )
    answers: Optional[Dict[str, Any]] = Field(
        None,
        description="Answer key: question key -> value, or list of values (order-irrelevant)",
    )


class SectionAdminResponse(BaseModel):
    """Schema for a section including its answer key."""

    id: int = Field(..., description="Section ID")
    test_template_id: int = Field(..., description="Owning template ID")
    type: SectionType = Field(..., description="Section type")
    content: Dict[str, Any] = Field(..., description="Section material")
    answers: Dict[str, Any] = Field(..., description="Answer key")

    class Config:
        """Pydantic configuration."""

        from_attributes = True


class TemplateResponse(BaseModel):
    """Schema for a template without sections."""

    id: int = Field(..., description="Test template ID")
    title: str = Field(..., description="Template title")
    description: Optional[str] = Field(None, description="Template description")
    created_at: datetime = Field(..., description="Creation timestamp")

    class Config:
        """Pydantic configuration."""

        from_attributes = True


class TemplateDetailResponse(TemplateResponse):
    """Schema for a template with all sections and answer keys."""

    sections: List[SectionAdminResponse] = Field(..., description="Template sections")


# =============================================================================
# Schedules
# =============================================================================


class ScheduleCreateRequest(BaseModel):
    """Schema for scheduling a template.

    Missing fields are accepted here and rejected by the scheduling service
    with a single message.
    """

    test_template_id: Optional[int] = Field(None, description="Template to schedule")
    start_time: Optional[datetime] = Field(None, description="Window start (inclusive)")
    end_time: Optional[datetime] = Field(None, description="Window end (inclusive)")
    is_active: bool = Field(True, description="Whether the schedule is enabled")


class ScheduleUpdateRequest(BaseModel):
    """Schema for the schedule kill-switch."""

    is_active: bool = Field(..., description="Enable or disable the schedule")


class ScheduledTestResponse(BaseModel):
    """Schema for a scheduled test."""

    id: int = Field(..., description="Scheduled test ID")
    test_template_id: int = Field(..., description="Template ID")
    start_time: datetime = Field(..., description="Window start")
    end_time: datetime = Field(..., description="Window end")
    is_active: bool = Field(..., description="Whether the schedule is enabled")
    created_at: datetime = Field(..., description="Creation timestamp")

    class Config:
        """Pydantic configuration."""

        from_attributes = True


class ScheduledTestListItem(ScheduledTestResponse):
    """Schema for a scheduled test with its template."""

    test_template: TemplateSummary = Field(..., description="Scheduled template")


# =============================================================================
# Attempt review
# =============================================================================


class AttemptUserSummary(BaseModel):
    """Contact details of an attempt's owner."""

    first_name: str = Field(..., description="User first name")
    last_name: str = Field(..., description="User last name")
    email: str = Field(..., description="User email address")
    phone_number: str = Field(..., description="Contact phone number")

    class Config:
        """Pydantic configuration."""

        from_attributes = True


class AttemptScheduleSummary(BaseModel):
    """Schedule of a reviewed attempt."""

    id: int = Field(..., description="Scheduled test ID")
    start_time: datetime = Field(..., description="Window start")
    end_time: datetime = Field(..., description="Window end")
    test_template: TemplateSummary = Field(..., description="Scheduled template")

    class Config:
        """Pydantic configuration."""

        from_attributes = True


class CompletedAttemptResponse(TestAttemptResponse):
    """Schema for a completed attempt in the admin list."""

    user: AttemptUserSummary = Field(..., description="Attempt owner")
    scheduled_test: AttemptScheduleSummary = Field(..., description="Schedule taken")

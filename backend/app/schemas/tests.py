"""
Pydantic schemas for the test-taker endpoints.
"""
from pydantic import BaseModel, Field, RootModel, field_validator
from typing import Any, Dict, List, Optional
from datetime import datetime

from app.core.answers import parse_section_type
from app.models import AttemptStatus, SectionType


class TemplateSummary(BaseModel):
    """Template fields safe to show before an attempt starts."""

    id: int = Field(..., description="Test template ID")
    title: str = Field(..., description="Template title")
    description: Optional[str] = Field(None, description="Template description")

    class Config:
        """Pydantic configuration."""

        from_attributes = True


class ScheduledTestSummary(BaseModel):
    """Schema for an available scheduled test."""

    id: int = Field(..., description="Scheduled test ID")
    start_time: datetime = Field(..., description="Window start (inclusive)")
    end_time: datetime = Field(..., description="Window end (inclusive)")
    test_template: TemplateSummary = Field(..., description="Template being scheduled")

    class Config:
        """Pydantic configuration."""

        from_attributes = True


class TestAttemptResponse(BaseModel):
    """Schema for a test attempt."""

    id: int = Field(..., description="Test attempt ID")
    user_id: int = Field(..., description="Owner user ID")
    scheduled_test_id: int = Field(..., description="Scheduled test ID")
    status: AttemptStatus = Field(..., description="IN_PROGRESS or COMPLETED")
    user_answers: Optional[Dict[str, Any]] = Field(
        None, description="Saved answers keyed by section type"
    )
    results: Optional[Dict[str, int]] = Field(
        None, description="Per-section scores (only once completed)"
    )
    started_at: datetime = Field(..., description="Attempt start timestamp")
    completed_at: Optional[datetime] = Field(
        None, description="Attempt completion timestamp"
    )

    class Config:
        """Pydantic configuration."""

        from_attributes = True


class SectionContentResponse(BaseModel):
    """Schema for one section as shown to a test-taker (never the answer key)."""

    id: int = Field(..., description="Section ID")
    type: SectionType = Field(..., description="Section type")
    content: Dict[str, Any] = Field(..., description="Section material")


def _coerce_section_type(value: Any) -> SectionType:
    try:
        return parse_section_type(value)
    except (TypeError, ValueError):
        raise ValueError(
            "Section type must be one of "
            + ", ".join(t.value for t in SectionType)
        ) from None


class SubmitSectionRequest(BaseModel):
    """Schema for saving one section's answers."""

    section_type: SectionType = Field(
        ..., description="Section type (case-insensitive)"
    )
    answers: Dict[str, Any] = Field(
        ..., description="Answers keyed by question key (whole section)"
    )

    @field_validator("section_type", mode="before")
    @classmethod
    def validate_section_type(cls, v: Any) -> SectionType:
        """Accept any letter case for the section type."""
        return _coerce_section_type(v)


class SubmitAllRequest(RootModel[Dict[SectionType, Dict[str, Any]]]):
    """Schema for replacing every saved answer at once.

    The body is the full answers mapping itself, e.g.
    {"LISTENING": {"q1": "A"}, "READING": {"q3": ["b", "a"]}}.
    """

    @field_validator("root", mode="before")
    @classmethod
    def validate_section_keys(cls, v: Any) -> Any:
        """Accept any letter case for section type keys."""
        if not isinstance(v, dict):
            return v
        return {_coerce_section_type(key): value for key, value in v.items()}


class SubmissionAck(BaseModel):
    """Schema for an answer-save acknowledgement."""

    message: str = Field(..., description="Acknowledgement message")


class FinishResponse(BaseModel):
    """Schema for finishing a test attempt."""

    message: str = Field(..., description="Success message")
    results: Dict[str, int] = Field(
        ..., description="Scores for LISTENING and READING"
    )


class SectionDetail(BaseModel):
    """Section as shown in attempt review."""

    id: int = Field(..., description="Section ID")
    type: SectionType = Field(..., description="Section type")
    content: Dict[str, Any] = Field(..., description="Section material")
    answers: Optional[Dict[str, Any]] = Field(
        None, description="Answer key (only once the attempt is completed)"
    )

    class Config:
        """Pydantic configuration."""

        from_attributes = True


class TemplateDetail(BaseModel):
    """Template with its sections."""

    id: int = Field(..., description="Test template ID")
    title: str = Field(..., description="Template title")
    description: Optional[str] = Field(None, description="Template description")
    sections: List[SectionDetail] = Field(..., description="Template sections")

    class Config:
        """Pydantic configuration."""

        from_attributes = True


class AttemptOwner(BaseModel):
    """Name of the user who owns an attempt."""

    first_name: str = Field(..., description="User first name")
    last_name: str = Field(..., description="User last name")

    class Config:
        """Pydantic configuration."""

        from_attributes = True


class AttemptSchedule(BaseModel):
    """Schedule window of an attempt."""

    id: int = Field(..., description="Scheduled test ID")
    start_time: datetime = Field(..., description="Window start")
    end_time: datetime = Field(..., description="Window end")
    test_template: TemplateDetail = Field(..., description="Scheduled template")

    class Config:
        """Pydantic configuration."""

        from_attributes = True


class AttemptDetailResponse(TestAttemptResponse):
    """Schema for reviewing one attempt."""

    user: AttemptOwner = Field(..., description="Attempt owner")
    scheduled_test: AttemptSchedule = Field(..., description="Schedule and template")

    @classmethod
    def from_attempt(cls, attempt: Any, *, include_answer_key: bool) -> "AttemptDetailResponse":
        """
        Build the review payload for an attempt.

        Args:
            attempt: TestAttempt with user, schedule, template and sections loaded
            include_answer_key: Whether section answer keys are revealed

        Returns:
            AttemptDetailResponse
        """
        detail = cls.model_validate(attempt)
        if not include_answer_key:
            for section in detail.scheduled_test.test_template.sections:
                section.answers = None
        return detail

"""
Pydantic schemas for request/response validation.
"""
from .auth import (
    UserRegister,
    UserLogin,
    Token,
    UserResponse,
)
from .tests import (
    ScheduledTestSummary,
    TestAttemptResponse,
    SectionContentResponse,
    SubmitSectionRequest,
    SubmitAllRequest,
    SubmissionAck,
    FinishResponse,
    AttemptDetailResponse,
)
from .admin import (
    MessageResponse,
    AssignRoleRequest,
    TemplateCreateRequest,
    SectionUpdateRequest,
    SectionAdminResponse,
    TemplateResponse,
    TemplateDetailResponse,
    ScheduleCreateRequest,
    ScheduleUpdateRequest,
    ScheduledTestResponse,
    ScheduledTestListItem,
    CompletedAttemptResponse,
)

__all__ = [
    "UserRegister",
    "UserLogin",
    "Token",
    "UserResponse",
    "ScheduledTestSummary",
    "TestAttemptResponse",
    "SectionContentResponse",
    "SubmitSectionRequest",
    "SubmitAllRequest",
    "SubmissionAck",
    "FinishResponse",
    "AttemptDetailResponse",
    "MessageResponse",
    "AssignRoleRequest",
    "TemplateCreateRequest",
    "SectionUpdateRequest",
    "SectionAdminResponse",
    "TemplateResponse",
    "TemplateDetailResponse",
    "ScheduleCreateRequest",
    "ScheduleUpdateRequest",
    "ScheduledTestResponse",
    "ScheduledTestListItem",
    "CompletedAttemptResponse",
]

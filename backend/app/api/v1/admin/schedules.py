"""
Test scheduling endpoints.
"""
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core import authoring
from app.core.db_error_handling import handle_db_error
from app.models import get_db
from app.schemas.admin import (
    ScheduleCreateRequest,
    ScheduleUpdateRequest,
    ScheduledTestListItem,
    ScheduledTestResponse,
)

from ._dependencies import Principal, require_admin

router = APIRouter()


@router.post(
    "/schedule",
    response_model=ScheduledTestResponse,
    status_code=status.HTTP_201_CREATED,
)
def schedule_test(
    request: ScheduleCreateRequest,
    principal: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Schedule an existing template for a time window.

    Raises:
        HTTPException: 400 for missing fields or an inverted window,
            404 for an unknown template
    """
    with handle_db_error(db, "schedule test"):
        scheduled_test = authoring.create_schedule(
            db,
            request.test_template_id,
            request.start_time,
            request.end_time,
            is_active=request.is_active,
        )
        return ScheduledTestResponse.model_validate(scheduled_test)


@router.get("/scheduled", response_model=List[ScheduledTestListItem])
def list_scheduled_tests(
    principal: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """List all scheduled tests (past, present and future), latest start first."""
    with handle_db_error(db, "fetch scheduled tests"):
        return [
            ScheduledTestListItem.model_validate(scheduled_test)
            for scheduled_test in authoring.list_schedules(db)
        ]


@router.patch("/scheduled/{scheduled_test_id}", response_model=ScheduledTestResponse)
def update_scheduled_test(
    scheduled_test_id: int,
    request: ScheduleUpdateRequest,
    principal: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Enable or disable a scheduled test regardless of its window.
    """
    with handle_db_error(db, "update scheduled test"):
        scheduled_test = authoring.set_schedule_active(
            db, scheduled_test_id, request.is_active
        )
        return ScheduledTestResponse.model_validate(scheduled_test)

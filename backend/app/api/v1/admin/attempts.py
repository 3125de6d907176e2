"""
Attempt review endpoints for grading.
"""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core import authoring
from app.core.db_error_handling import handle_db_error
from app.models import get_db
from app.schemas.admin import CompletedAttemptResponse
from app.schemas.tests import AttemptDetailResponse

from ._dependencies import Principal, require_admin

router = APIRouter()


@router.get("/attempts", response_model=List[CompletedAttemptResponse])
def list_completed_attempts(
    principal: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """List completed attempts, most recently completed first."""
    with handle_db_error(db, "fetch test attempts"):
        return [
            CompletedAttemptResponse.model_validate(attempt)
            for attempt in authoring.list_completed_attempts(db)
        ]


@router.get("/attempts/{attempt_id}", response_model=AttemptDetailResponse)
def get_attempt_detail(
    attempt_id: int,
    principal: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Get any attempt with its sections and answer keys for review.
    """
    with handle_db_error(db, "fetch attempt details"):
        attempt = authoring.get_attempt_for_review(db, attempt_id)
        return AttemptDetailResponse.from_attempt(attempt, include_answer_key=True)

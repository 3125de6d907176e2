"""
Test-taker endpoints: available tests and the attempt lifecycle.
"""
import json
import logging
from typing import List

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from app.core import attempts
from app.core.auth import Principal, require_user
from app.core.config import settings
from app.core.availability import list_available
from app.core.datetime_utils import utc_now
from app.core.db_error_handling import handle_db_error
from app.models import AttemptStatus, get_db
from app.schemas.tests import (
    AttemptDetailResponse,
    FinishResponse,
    ScheduledTestSummary,
    SectionContentResponse,
    SubmissionAck,
    SubmitAllRequest,
    SubmitSectionRequest,
    TestAttemptResponse,
)

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/available", response_model=List[ScheduledTestSummary])
def get_available_tests(
    principal: Principal = Depends(require_user),
    db: Session = Depends(get_db),
):
    """
    List scheduled tests that are active and inside their window right now.
    """
    with handle_db_error(db, "fetch available tests"):
        return [
            ScheduledTestSummary.model_validate(scheduled_test)
            for scheduled_test in list_available(db, utc_now())
        ]


@router.post(
    "/{scheduled_test_id}/start",
    response_model=TestAttemptResponse,
    status_code=status.HTTP_201_CREATED,
    responses={200: {"model": TestAttemptResponse, "description": "Existing attempt"}},
)
def start_test(
    scheduled_test_id: int,
    response: Response,
    principal: Principal = Depends(require_user),
    db: Session = Depends(get_db),
):
    """
    Start a test attempt, or return the caller's existing attempt.

    Returns 201 when a new attempt is created and 200 when one already
    existed for this scheduled test.
    """
    with handle_db_error(db, "start test"):
        attempt, created = attempts.start(db, principal, scheduled_test_id)
        if not created:
            response.status_code = status.HTTP_200_OK
        return TestAttemptResponse.model_validate(attempt)


@router.get(
    "/attempts/{attempt_id}/section/{section_type}",
    response_model=SectionContentResponse,
)
def get_section(
    attempt_id: int,
    section_type: str,
    principal: Principal = Depends(require_user),
    db: Session = Depends(get_db),
):
    """
    Get the content of one section of the attempt's test.

    The section type is case-insensitive. The answer key is never included.
    """
    with handle_db_error(db, "retrieve section"):
        return SectionContentResponse(
            **attempts.get_section(db, principal, attempt_id, section_type)
        )


@router.post(
    "/attempts/{attempt_id}/submit-section/beacon",
    response_model=SubmissionAck,
)
async def submit_section_beacon(
    attempt_id: str,
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Save one section's answers sent from a page-unload beacon.

    Beacons cannot set headers, so there is no authentication and the body
    is parsed as JSON whatever its content type. The attempt id is taken
    as raw text so a malformed id is logged rather than rejected. The
    response is always an acknowledgement; failures are logged only.
    """
    raw_body = await request.body()
    if len(raw_body) > settings.MAX_REQUEST_BODY_BYTES:
        logger.warning(
            f"Discarding {len(raw_body)}-byte beacon body for attempt {attempt_id}",
            extra={"path": request.url.path},
        )
        return SubmissionAck(message="Beacon received.")

    try:
        payload = json.loads(raw_body or b"{}")
    except ValueError:
        logger.warning(
            f"Discarding unparseable beacon body for attempt {attempt_id}",
            extra={"attempt_id": attempt_id},
        )
        payload = {}
    if not isinstance(payload, dict):
        payload = {}

    await run_in_threadpool(
        attempts.submit_section_best_effort,
        db,
        attempt_id,
        payload.get("section_type") or payload.get("sectionType"),
        payload.get("answers"),
    )
    return SubmissionAck(message="Beacon received.")


@router.post("/attempts/{attempt_id}/submit-section", response_model=SubmissionAck)
def submit_section(
    attempt_id: int,
    submission: SubmitSectionRequest,
    principal: Principal = Depends(require_user),
    db: Session = Depends(get_db),
):
    """
    Save the answers of one section.

    Replaces everything previously saved for that section and leaves other
    sections untouched.
    """
    with handle_db_error(db, "submit section answers"):
        attempts.submit_section(
            db,
            principal,
            attempt_id,
            submission.section_type,
            submission.answers,
        )
        return SubmissionAck(
            message=f"{submission.section_type.value} answers submitted successfully."
        )


@router.post("/attempts/{attempt_id}/submit", response_model=SubmissionAck)
def submit_all_answers(
    attempt_id: int,
    submission: SubmitAllRequest,
    principal: Principal = Depends(require_user),
    db: Session = Depends(get_db),
):
    """
    Replace all saved answers of the attempt in one write.
    """
    with handle_db_error(db, "submit answers"):
        attempts.submit_all(db, principal, attempt_id, submission.root)
        return SubmissionAck(message="Test answers submitted successfully.")


@router.post("/attempts/{attempt_id}/finish", response_model=FinishResponse)
def finish_test(
    attempt_id: int,
    principal: Principal = Depends(require_user),
    db: Session = Depends(get_db),
):
    """
    Grade and complete the attempt.

    Calling this again on a completed attempt returns the stored results.
    """
    with handle_db_error(db, "finalize test"):
        outcome = attempts.finish(db, principal, attempt_id)
        message = (
            "Test was already completed."
            if outcome.already_completed
            else "Test completed and graded successfully!"
        )
        return FinishResponse(message=message, results=outcome.results)


@router.get("/attempts/{attempt_id}", response_model=AttemptDetailResponse)
def get_attempt(
    attempt_id: int,
    principal: Principal = Depends(require_user),
    db: Session = Depends(get_db),
):
    """
    Get the caller's attempt with its test content.

    Answer keys are included only once the attempt is completed.
    """
    with handle_db_error(db, "fetch attempt details"):
        attempt = attempts.get_attempt(db, principal, attempt_id)
        return AttemptDetailResponse.from_attempt(
            attempt,
            include_answer_key=attempt.status == AttemptStatus.COMPLETED,
        )

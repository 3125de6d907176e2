"""
Test attempt lifecycle.

An attempt moves IN_PROGRESS -> COMPLETED exactly once. While in progress
the owner saves answers one section at a time (or all at once); finishing
grades the saved answers against the template's answer key and freezes the
results.

Every mutation of an attempt row follows the same shape: lock the row with
SELECT ... FOR UPDATE, check ownership and state, write, and commit once.
Concurrent saves of different sections therefore both survive. Completion
is additionally guarded by a conditional UPDATE on status, so two finish
calls record one completion even where the backend ignores row locks.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from app.core.answers import (
    AnswerValue,
    merge_section_answers,
    normalize_user_answers,
    parse_section_type,
    serialize_user_answers,
)
from app.core.auth import Principal
from app.core.datetime_utils import utc_now
from app.core.error_responses import ErrorMessages
from app.core.exceptions import (
    InvalidStateError,
    NotFoundError,
    ValidationFailureError,
)
from app.core.graceful_failure import graceful_failure
from app.core.grading import build_answer_key, grade, serialize_results
from app.models import (
    AttemptStatus,
    ScheduledTest,
    Section,
    SectionType,
    TestAttempt,
    TestTemplate,
)

logger = logging.getLogger(__name__)


@dataclass
class FinishOutcome:
    """Result of finishing an attempt."""

    attempt: TestAttempt
    results: Dict[str, int]
    already_completed: bool


def _get_owned_attempt(
    db: Session,
    principal: Principal,
    attempt_id: int,
    *,
    lock: bool = False,
) -> TestAttempt:
    """
    Load an attempt the caller owns, optionally locking its row.

    A missing attempt and another user's attempt raise the same error so
    callers cannot probe for attempt ids.

    Raises:
        NotFoundError: If the attempt does not exist or is not owned
    """
    query = db.query(TestAttempt).filter(TestAttempt.id == attempt_id)
    if lock:
        # Overwrite any copy already in the identity map with the locked row
        query = query.with_for_update().populate_existing()
    attempt = query.first()

    if attempt is None or attempt.user_id != principal.user_id:
        raise NotFoundError(ErrorMessages.ATTEMPT_NOT_FOUND)
    return attempt


def _ensure_in_progress(attempt: TestAttempt) -> None:
    if attempt.status != AttemptStatus.IN_PROGRESS:
        raise InvalidStateError(
            ErrorMessages.attempt_already_completed(attempt.status.value)
        )


def start(
    db: Session, principal: Principal, scheduled_test_id: int
) -> Tuple[TestAttempt, bool]:
    """
    Start (or resume) the caller's attempt at a scheduled test.

    The insert is attempted first; if the unique (user, schedule) constraint
    rejects it, another request got there first and its row is returned.
    The schedule window is not checked here.

    Args:
        db: Database session
        principal: Caller identity
        scheduled_test_id: Schedule to attempt

    Returns:
        Tuple of (attempt, created) where created is False for an existing row

    Raises:
        NotFoundError: If the scheduled test does not exist
    """
    if db.get(ScheduledTest, scheduled_test_id) is None:
        raise NotFoundError(ErrorMessages.SCHEDULED_TEST_NOT_FOUND)

    attempt = TestAttempt(
        user_id=principal.user_id,
        scheduled_test_id=scheduled_test_id,
        status=AttemptStatus.IN_PROGRESS,
        started_at=utc_now(),
    )
    db.add(attempt)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        existing = (
            db.query(TestAttempt)
            .filter(
                TestAttempt.user_id == principal.user_id,
                TestAttempt.scheduled_test_id == scheduled_test_id,
            )
            .first()
        )
        if existing is None:
            # The violation was not the (user, schedule) constraint
            raise
        logger.info(
            f"Resuming existing attempt {existing.id} for user "
            f"{principal.user_id} on scheduled test {scheduled_test_id}"
        )
        return existing, False

    db.refresh(attempt)
    logger.info(
        f"Started attempt {attempt.id} for user {principal.user_id} "
        f"on scheduled test {scheduled_test_id}"
    )
    return attempt, True


def get_section(
    db: Session,
    principal: Principal,
    attempt_id: int,
    section_type: Any,
) -> Dict[str, Any]:
    """
    Return the test-taker view of one section of the attempt's template.

    Only id, type and content are returned; the answer key never leaves
    this function.

    Raises:
        NotFoundError: If the attempt is missing or not owned, or the
            template has no section of that type
    """
    try:
        section_type = parse_section_type(section_type)
    except ValueError:
        raise NotFoundError(ErrorMessages.SECTION_NOT_FOUND) from None
    attempt = _get_owned_attempt(db, principal, attempt_id)

    section = (
        db.query(Section)
        .join(ScheduledTest, ScheduledTest.test_template_id == Section.test_template_id)
        .filter(
            ScheduledTest.id == attempt.scheduled_test_id,
            Section.type == section_type,
        )
        .first()
    )
    if section is None:
        raise NotFoundError(ErrorMessages.SECTION_NOT_FOUND)

    return {"id": section.id, "type": section.type, "content": section.content}


def _save_section(
    db: Session,
    attempt: TestAttempt,
    section_type: SectionType,
    answers: Mapping[str, AnswerValue],
) -> None:
    _ensure_in_progress(attempt)
    attempt.user_answers = merge_section_answers(
        attempt.user_answers, section_type, answers
    )
    db.commit()


def submit_section(
    db: Session,
    principal: Principal,
    attempt_id: int,
    section_type: Any,
    answers: Mapping[str, AnswerValue],
) -> TestAttempt:
    """
    Replace the saved answers of one section.

    Answers saved earlier for other sections are left untouched. Within the
    section the new mapping replaces the old one entirely.

    Args:
        db: Database session
        principal: Caller identity
        attempt_id: Attempt to update
        section_type: Section the answers belong to (case-insensitive)
        answers: {question key: answer value}

    Returns:
        The updated attempt

    Raises:
        NotFoundError: If the attempt is missing or not owned
        InvalidStateError: If the attempt is already completed
    """
    try:
        section_type = parse_section_type(section_type)
    except ValueError as e:
        raise ValidationFailureError(str(e)) from None
    attempt = _get_owned_attempt(db, principal, attempt_id, lock=True)
    _save_section(db, attempt, section_type, answers)
    logger.info(
        f"Saved {section_type.value} answers for attempt {attempt_id} "
        f"({len(answers)} questions)"
    )
    return attempt


def submit_section_best_effort(
    db: Session,
    attempt_id: Any,
    section_type: Any,
    answers: Any,
) -> bool:
    """
    Save one section's answers from a page-unload beacon.

    There is no caller identity and nobody waiting for an error, so every
    failure (malformed or unknown attempt id, bad payload, completed
    attempt, store error) is logged and dropped. The attempt id arrives as
    raw path text and is parsed here.

    Returns:
        True if the answers were saved, False otherwise
    """
    saved = False
    with graceful_failure(
        "save beacon answers",
        logger,
        context={"attempt_id": attempt_id, "section_type": section_type},
    ):
        try:
            parsed_id = int(attempt_id)
            parsed_type = parse_section_type(section_type)
            if not isinstance(answers, Mapping):
                raise ValueError("answers must be an object")

            attempt = (
                db.query(TestAttempt)
                .filter(TestAttempt.id == parsed_id)
                .with_for_update()
                .populate_existing()
                .first()
            )
            if attempt is None:
                raise NotFoundError(ErrorMessages.ATTEMPT_NOT_FOUND)
            _save_section(db, attempt, parsed_type, answers)
        except Exception:
            db.rollback()
            raise
        saved = True
    return saved


def submit_all(
    db: Session,
    principal: Principal,
    attempt_id: int,
    full_answers: Mapping[Any, Mapping[str, AnswerValue]],
) -> TestAttempt:
    """
    Replace the attempt's saved answers wholesale in one write.

    Raises:
        NotFoundError: If the attempt is missing or not owned
        InvalidStateError: If the attempt is already completed
    """
    attempt = _get_owned_attempt(db, principal, attempt_id, lock=True)
    _ensure_in_progress(attempt)
    attempt.user_answers = serialize_user_answers(full_answers)
    db.commit()
    logger.info(f"Saved all answers for attempt {attempt_id}")
    return attempt


def _stored_outcome(db: Session, attempt: TestAttempt) -> FinishOutcome:
    stored_results = dict(attempt.results or {})
    # Release the row lock taken by the caller
    db.rollback()
    logger.info(f"Attempt {attempt.id} already completed; returning stored results")
    return FinishOutcome(attempt=attempt, results=stored_results, already_completed=True)


def finish(db: Session, principal: Principal, attempt_id: int) -> FinishOutcome:
    """
    Grade and complete an attempt.

    The attempt row is locked and re-read, so the grade reflects every save
    committed before this call. Status, completed_at and results are written
    by a single UPDATE guarded on status IN_PROGRESS and committed once; on
    backends that ignore row locks a concurrent finish that lost the race
    matches no row and falls back to the stored results.

    Finishing an already completed attempt returns the stored results
    without re-grading.

    Raises:
        NotFoundError: If the attempt is missing or not owned
    """
    attempt = _get_owned_attempt(db, principal, attempt_id, lock=True)

    if attempt.status == AttemptStatus.COMPLETED:
        return _stored_outcome(db, attempt)

    sections = (
        db.query(Section)
        .join(ScheduledTest, ScheduledTest.test_template_id == Section.test_template_id)
        .filter(ScheduledTest.id == attempt.scheduled_test_id)
        .all()
    )
    scores = grade(normalize_user_answers(attempt.user_answers), build_answer_key(sections))
    results = serialize_results(scores)

    updated = (
        db.query(TestAttempt)
        .filter(
            TestAttempt.id == attempt_id,
            TestAttempt.status == AttemptStatus.IN_PROGRESS,
        )
        .update(
            {
                TestAttempt.status: AttemptStatus.COMPLETED,
                TestAttempt.completed_at: utc_now(),
                TestAttempt.results: results,
            },
            synchronize_session=False,
        )
    )
    if updated == 0:
        db.rollback()
        db.refresh(attempt)
        return _stored_outcome(db, attempt)

    db.commit()
    db.refresh(attempt)

    logger.info(f"Completed attempt {attempt_id} with results {results}")
    return FinishOutcome(attempt=attempt, results=results, already_completed=False)


def load_attempt_detail(db: Session, attempt_id: int) -> Optional[TestAttempt]:
    """Load an attempt with its owner, schedule, template and sections."""
    return (
        db.query(TestAttempt)
        .options(
            joinedload(TestAttempt.user),
            joinedload(TestAttempt.scheduled_test)
            .joinedload(ScheduledTest.test_template)
            .joinedload(TestTemplate.sections),
        )
        .filter(TestAttempt.id == attempt_id)
        .first()
    )


def get_attempt(db: Session, principal: Principal, attempt_id: int) -> TestAttempt:
    """
    Load the caller's attempt for review.

    Raises:
        NotFoundError: If the attempt is missing or not owned
    """
    attempt = load_attempt_detail(db, attempt_id)
    if attempt is None or attempt.user_id != principal.user_id:
        raise NotFoundError(ErrorMessages.ATTEMPT_NOT_FOUND)
    return attempt

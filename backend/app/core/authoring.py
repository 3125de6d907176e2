"""
Test authoring, scheduling and attempt review for administrators.

A template is created as a shell with all three sections present and empty;
authors then fill each section's content and answer key separately.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session, joinedload

from app.core.answers import parse_section_type
from app.core.datetime_utils import ensure_timezone_aware
from app.core.error_responses import ErrorMessages
from app.core.exceptions import NotFoundError, ValidationFailureError
from app.core.attempts import load_attempt_detail
from app.models import (
    AttemptStatus,
    ScheduledTest,
    Section,
    SectionType,
    TestAttempt,
    TestTemplate,
)

logger = logging.getLogger(__name__)

SHELL_SECTION_CONTENT: Dict[SectionType, Dict[str, Any]] = {
    SectionType.LISTENING: {"audioUrl": "", "blocks": []},
    SectionType.READING: {"passageText": "", "blocks": []},
    SectionType.WRITING: {"blocks": []},
}


# =============================================================================
# Templates
# =============================================================================


def create_template(
    db: Session, title: Optional[str], description: Optional[str] = None
) -> TestTemplate:
    """
    Create a template shell with one empty section of every type.

    Raises:
        ValidationFailureError: If title is missing or blank
    """
    if not title or not title.strip():
        raise ValidationFailureError(ErrorMessages.TITLE_REQUIRED)

    template = TestTemplate(title=title.strip(), description=description)
    template.sections = [
        Section(type=section_type, content=dict(content), answers={})
        for section_type, content in SHELL_SECTION_CONTENT.items()
    ]
    db.add(template)
    db.commit()
    db.refresh(template)

    logger.info(f"Created test template {template.id}")
    return template


def update_section(
    db: Session,
    template_id: int,
    section_type: Any,
    content: Optional[Dict[str, Any]] = None,
    answers: Optional[Dict[str, Any]] = None,
) -> Section:
    """
    Replace a section's content and/or answer key.

    Fields passed as None are left unchanged.

    Raises:
        NotFoundError: If the template has no section of that type
    """
    try:
        parsed_type = parse_section_type(section_type)
    except ValueError:
        raise NotFoundError(ErrorMessages.TEMPLATE_SECTION_NOT_FOUND) from None

    section = (
        db.query(Section)
        .filter(Section.test_template_id == template_id, Section.type == parsed_type)
        .first()
    )
    if section is None:
        raise NotFoundError(ErrorMessages.TEMPLATE_SECTION_NOT_FOUND)

    if content is not None:
        section.content = content
    if answers is not None:
        section.answers = answers
    db.commit()
    db.refresh(section)

    logger.info(f"Updated {parsed_type.value} section of template {template_id}")
    return section


def list_templates(db: Session) -> List[TestTemplate]:
    """All templates, newest first."""
    return (
        db.query(TestTemplate)
        .order_by(TestTemplate.created_at.desc(), TestTemplate.id.desc())
        .all()
    )


def get_template(db: Session, template_id: int) -> TestTemplate:
    """
    Load a template with its sections (answer keys included).

    Raises:
        NotFoundError: If the template does not exist
    """
    template = (
        db.query(TestTemplate)
        .options(joinedload(TestTemplate.sections))
        .filter(TestTemplate.id == template_id)
        .first()
    )
    if template is None:
        raise NotFoundError(ErrorMessages.TEMPLATE_NOT_FOUND)
    return template


def delete_template(db: Session, template_id: int) -> None:
    """
    Delete a template and everything scheduled from it in one transaction.

    Schedules are deleted first (taking their attempts with them); sections
    go with the template.

    Raises:
        NotFoundError: If the template does not exist
    """
    template = db.get(TestTemplate, template_id)
    if template is None:
        raise NotFoundError(ErrorMessages.TEMPLATE_NOT_FOUND)

    for scheduled_test in list(template.scheduled_tests):
        db.delete(scheduled_test)
    db.flush()
    db.expire(template, ["scheduled_tests"])
    db.delete(template)
    db.commit()

    logger.info(f"Deleted test template {template_id} and its schedules")


# =============================================================================
# Schedules
# =============================================================================


def create_schedule(
    db: Session,
    test_template_id: Optional[int],
    start_time: Optional[datetime],
    end_time: Optional[datetime],
    is_active: bool = True,
) -> ScheduledTest:
    """
    Make a template attemptable for a time window.

    Raises:
        ValidationFailureError: If a field is missing or end precedes start
        NotFoundError: If the template does not exist
    """
    if not test_template_id or start_time is None or end_time is None:
        raise ValidationFailureError(ErrorMessages.SCHEDULE_FIELDS_REQUIRED)

    start_time = ensure_timezone_aware(start_time)
    end_time = ensure_timezone_aware(end_time)
    if end_time < start_time:
        raise ValidationFailureError(ErrorMessages.SCHEDULE_WINDOW_INVALID)

    if db.get(TestTemplate, test_template_id) is None:
        raise NotFoundError(ErrorMessages.TEMPLATE_NOT_FOUND)

    scheduled_test = ScheduledTest(
        test_template_id=test_template_id,
        start_time=start_time,
        end_time=end_time,
        is_active=is_active,
    )
    db.add(scheduled_test)
    db.commit()
    db.refresh(scheduled_test)

    logger.info(
        f"Scheduled template {test_template_id} as scheduled test {scheduled_test.id}"
    )
    return scheduled_test


def list_schedules(db: Session) -> List[ScheduledTest]:
    """All schedules with their template, latest start first."""
    return (
        db.query(ScheduledTest)
        .options(joinedload(ScheduledTest.test_template))
        .order_by(ScheduledTest.start_time.desc(), ScheduledTest.id.desc())
        .all()
    )


def set_schedule_active(
    db: Session, scheduled_test_id: int, is_active: bool
) -> ScheduledTest:
    """
    Turn a schedule on or off regardless of its window.

    Raises:
        NotFoundError: If the schedule does not exist
    """
    scheduled_test = db.get(ScheduledTest, scheduled_test_id)
    if scheduled_test is None:
        raise NotFoundError(ErrorMessages.SCHEDULED_TEST_NOT_FOUND)

    scheduled_test.is_active = is_active
    db.commit()
    db.refresh(scheduled_test)

    logger.info(f"Scheduled test {scheduled_test_id} is_active set to {is_active}")
    return scheduled_test


# =============================================================================
# Attempt review
# =============================================================================


def list_completed_attempts(db: Session) -> List[TestAttempt]:
    """Completed attempts with user and template, most recently completed first."""
    return (
        db.query(TestAttempt)
        .options(
            joinedload(TestAttempt.user),
            joinedload(TestAttempt.scheduled_test).joinedload(
                ScheduledTest.test_template
            ),
        )
        .filter(TestAttempt.status == AttemptStatus.COMPLETED)
        .order_by(TestAttempt.completed_at.desc(), TestAttempt.id.desc())
        .all()
    )


def get_attempt_for_review(db: Session, attempt_id: int) -> TestAttempt:
    """
    Load any attempt with its answer key for grading review.

    Raises:
        NotFoundError: If the attempt does not exist
    """
    attempt = load_attempt_detail(db, attempt_id)
    if attempt is None:
        raise NotFoundError(ErrorMessages.ATTEMPT_NOT_FOUND)
    return attempt

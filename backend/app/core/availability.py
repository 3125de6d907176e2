"""
Which scheduled tests can be attempted right now.
"""
from datetime import datetime
from typing import Iterable, List

from sqlalchemy.orm import Session, joinedload

from app.core.datetime_utils import ensure_timezone_aware
from app.models.models import ScheduledTest


def is_attemptable(scheduled_test: ScheduledTest, now: datetime) -> bool:
    """
    Check one schedule against the clock.

    Both window bounds are inclusive; `is_active` overrides the window.
    """
    if not scheduled_test.is_active:
        return False
    now = ensure_timezone_aware(now)
    start_time = ensure_timezone_aware(scheduled_test.start_time)
    end_time = ensure_timezone_aware(scheduled_test.end_time)
    return start_time <= now <= end_time


def filter_available(
    scheduled_tests: Iterable[ScheduledTest], now: datetime
) -> List[ScheduledTest]:
    """Return the schedules from `scheduled_tests` attemptable at `now`."""
    return [st for st in scheduled_tests if is_attemptable(st, now)]


def list_available(db: Session, now: datetime) -> List[ScheduledTest]:
    """
    Query the schedules attemptable at `now`, soonest-ending first.

    The template is eager-loaded for the summary projection; sections are
    not loaded at all.

    Args:
        db: Database session
        now: Current time

    Returns:
        List of ScheduledTest rows with test_template populated
    """
    candidates = (
        db.query(ScheduledTest)
        .options(joinedload(ScheduledTest.test_template))
        .filter(
            ScheduledTest.is_active.is_(True),
            ScheduledTest.start_time <= now,
            ScheduledTest.end_time >= now,
        )
        .order_by(ScheduledTest.end_time.asc(), ScheduledTest.id.asc())
        .all()
    )
    # SQLite compares stored datetimes as text; re-check in Python
    return filter_available(candidates, now)

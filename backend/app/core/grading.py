"""
Answer comparison and section grading.

Scoring Rules
=============
- Every question in a section's answer key is worth exactly one point;
  there is no partial credit.
- Scalar keys compare case-insensitively after rendering both sides as text.
- Set keys compare order-independently but exactly: elements are NOT
  case-normalized. This asymmetry with scalar keys is existing scoring
  behavior and is kept so historical results stay reproducible.
- Only LISTENING and READING are graded. WRITING answers are stored for
  human review and never appear in the results mapping, which keeps
  "not applicable" distinct from "scored zero".
"""

import logging
from typing import Any, Dict, Iterable, Mapping, TYPE_CHECKING

from app.core.answers import (
    Answer,
    AnswerValue,
    ScalarAnswer,
    SetAnswer,
    answer_text,
    parse_answer_key,
    set_element_key,
    to_answer,
)
from app.models.models import SectionType

if TYPE_CHECKING:
    from app.models.models import Section

logger = logging.getLogger(__name__)

GRADABLE_SECTIONS = (SectionType.LISTENING, SectionType.READING)

AnswerKey = Dict[SectionType, Dict[str, Answer]]


def matches(user_value: AnswerValue, correct: Any) -> bool:
    """
    Compare one submitted answer to one correct answer.

    Args:
        user_value: Raw value the user submitted (None when unanswered)
        correct: Answer from a parsed key; raw values are resolved first

    Returns:
        True if the answer earns the point. Never raises.

    Example:
        >>> matches("paris", ScalarAnswer("Paris"))
        True
        >>> matches(["b", "a"], SetAnswer(("a", "b")))
        True
        >>> matches(["A", "b"], SetAnswer(("a", "b")))
        False
    """
    if not isinstance(correct, (ScalarAnswer, SetAnswer)):
        correct = to_answer(correct)

    if isinstance(correct, SetAnswer):
        submitted = user_value if isinstance(user_value, (list, tuple)) else ()
        return sorted(map(set_element_key, submitted)) == sorted(
            map(set_element_key, correct.values)
        )

    if user_value is None:
        return False
    return answer_text(user_value).lower() == correct.text.lower()


def score_section(
    user_section: Mapping[str, AnswerValue],
    section_key: Mapping[str, Answer],
) -> int:
    """
    Count correct answers for one section.

    Only keys present in the answer key are scored; extra user keys are
    ignored.

    Args:
        user_section: {question key: submitted value}
        section_key: {question key: Answer}

    Returns:
        Number of questions answered correctly
    """
    return sum(
        1
        for question_key, correct in section_key.items()
        if matches(user_section.get(question_key), correct)
    )


def grade(
    user_answers: Mapping[SectionType, Mapping[str, AnswerValue]],
    answer_key: Mapping[SectionType, Mapping[str, Answer]],
) -> Dict[SectionType, int]:
    """
    Grade every gradable section of an attempt.

    A section missing from either side is treated as empty and scores 0.

    Args:
        user_answers: Typed user answers (see normalize_user_answers)
        answer_key: Typed answer key (see build_answer_key)

    Returns:
        {SectionType.LISTENING: int, SectionType.READING: int}
    """
    return {
        section_type: score_section(
            user_answers.get(section_type) or {},
            answer_key.get(section_type) or {},
        )
        for section_type in GRADABLE_SECTIONS
    }


def build_answer_key(sections: Iterable["Section"]) -> AnswerKey:
    """
    Resolve a template's sections into a typed answer key.

    Args:
        sections: Section rows of one template

    Returns:
        Mapping of SectionType to parsed answer key
    """
    answer_key: AnswerKey = {}
    for section in sections:
        answer_key[SectionType(section.type)] = parse_answer_key(section.answers)
    return answer_key


def serialize_results(results: Mapping[SectionType, int]) -> Dict[str, int]:
    """Convert graded results into their stored JSON form."""
    return {section_type.value: int(score) for section_type, score in results.items()}

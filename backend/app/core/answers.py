"""
Answer values and the per-section answer store.

Answer keys are resolved once, when loaded from a Section, into a tagged
variant:

    Answer = ScalarAnswer(text) | SetAnswer(values)

so the comparator never has to sniff shapes. User answers stay as the raw
JSON values the client submitted; they are persisted on the attempt as

    {"LISTENING": {"q1": "A"}, "READING": {"q4": ["b", "a"]}}

and merged one whole section at a time.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from app.models.models import SectionType

logger = logging.getLogger(__name__)

# Raw JSON value submitted for one question (scalar or list of scalars)
AnswerValue = Any
SectionAnswers = Dict[str, AnswerValue]
UserAnswers = Dict[SectionType, SectionAnswers]


@dataclass(frozen=True)
class ScalarAnswer:
    """Single correct value, compared case-insensitively."""

    text: str


@dataclass(frozen=True)
class SetAnswer:
    """Unordered collection of correct values, compared exactly.

    `values` holds the raw JSON elements sorted by `set_element_key` so
    equal sets have equal representations.
    """

    values: Tuple[AnswerValue, ...]


Answer = Union[ScalarAnswer, SetAnswer]


def answer_text(value: AnswerValue) -> str:
    """
    Render a JSON answer value as comparison text.

    Args:
        value: Scalar, list, or mapping decoded from JSON

    Returns:
        Text form: booleans as "true"/"false", integral floats without a
        trailing ".0", lists comma-joined, None as ""

    Example:
        >>> answer_text(3.0)
        '3'
        >>> answer_text(["a", 1])
        'a,1'
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ",".join(answer_text(item) for item in value)
    if isinstance(value, dict):
        return json.dumps(value, sort_keys=True)
    return str(value)


def set_element_key(value: AnswerValue) -> Tuple[str, str]:
    """
    Sort and comparison key for one element of a set answer.

    Elements compare by JSON kind and exact text, so 1 and "1" differ while
    1 and 1.0 do not.
    """
    if value is None:
        kind = "null"
    elif isinstance(value, bool):
        kind = "boolean"
    elif isinstance(value, (int, float)):
        kind = "number"
    elif isinstance(value, str):
        kind = "string"
    else:
        kind = "structured"
    return kind, answer_text(value)


def to_answer(value: AnswerValue) -> Answer:
    """Resolve one answer-key entry into its tagged form."""
    if isinstance(value, (list, tuple)):
        return SetAnswer(values=tuple(sorted(value, key=set_element_key)))
    return ScalarAnswer(text=answer_text(value))


def parse_answer_key(raw: Optional[Mapping[str, Any]]) -> Dict[str, Answer]:
    """
    Resolve a section's stored answer key.

    Args:
        raw: The Section.answers JSON document (None or non-mapping is empty)

    Returns:
        Mapping of question key to Answer
    """
    if not isinstance(raw, Mapping):
        return {}
    return {str(key): to_answer(value) for key, value in raw.items()}


def parse_section_type(value: Union[str, SectionType]) -> SectionType:
    """
    Parse a section type case-insensitively.

    Raises:
        ValueError: If value is not a known section type
    """
    if isinstance(value, SectionType):
        return value
    try:
        return SectionType(str(value).strip().upper())
    except ValueError:
        raise ValueError(f"Unknown section type: {value!r}") from None


def normalize_user_answers(raw: Optional[Mapping[str, Any]]) -> UserAnswers:
    """
    Build the typed view of an attempt's stored answers.

    Unknown section names and non-mapping section values are skipped; they
    stay in the stored document but take no part in grading.

    Args:
        raw: The TestAttempt.user_answers JSON document

    Returns:
        Mapping of SectionType to {question key: raw value}
    """
    typed: UserAnswers = {}
    if not isinstance(raw, Mapping):
        return typed

    for name, section_answers in raw.items():
        try:
            section_type = parse_section_type(name)
        except ValueError:
            logger.debug(f"Ignoring answers for unknown section {name!r}")
            continue
        if isinstance(section_answers, Mapping):
            typed[section_type] = dict(section_answers)
    return typed


def merge_section_answers(
    current: Optional[Mapping[str, Any]],
    section_type: SectionType,
    new_section_answers: Mapping[str, AnswerValue],
) -> Dict[str, Any]:
    """
    Replace one section's answers in a copy of the stored document.

    The whole section is replaced (a key submitted earlier but missing now is
    dropped); every other entry is carried over unchanged.

    Args:
        current: Stored user_answers document, or None for a fresh attempt
        section_type: Section being submitted
        new_section_answers: Complete answers for that section

    Returns:
        New document; `current` is not modified
    """
    merged: Dict[str, Any] = dict(current) if isinstance(current, Mapping) else {}
    merged[section_type.value] = dict(new_section_answers)
    return merged


def serialize_user_answers(answers: Mapping[Any, Mapping[str, Any]]) -> Dict[str, Any]:
    """Convert a section-keyed mapping into its stored JSON form."""
    return {
        (key.value if isinstance(key, SectionType) else str(key)): dict(value)
        for key, value in answers.items()
    }

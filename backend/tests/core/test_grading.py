"""
Tests for answer comparison and section grading.
"""
import pytest

from app.core.answers import ScalarAnswer, SetAnswer
from app.core.grading import (
    GRADABLE_SECTIONS,
    build_answer_key,
    grade,
    matches,
    score_section,
    serialize_results,
)
from app.models.models import Section, SectionType


class TestMatchesScalar:
    """Tests for comparing against a single correct value."""

    def test_case_insensitive(self):
        """Test that letter case does not matter for scalar answers."""
        assert matches("paris", "Paris")
        assert matches("PARIS", ScalarAnswer("paris"))

    def test_empty_string_does_not_match(self):
        """Test that an empty answer is wrong."""
        assert not matches("", "Paris")

    def test_missing_answer_does_not_match(self):
        """Test that an unanswered question is wrong."""
        assert not matches(None, "Paris")

    def test_missing_answer_does_not_match_empty_key(self):
        """Test that None never matches, even an empty correct value."""
        assert not matches(None, "")

    def test_number_matches_its_text(self):
        """Test that numbers compare by their text form."""
        assert matches(3, "3")
        assert matches("3", 3.0)

    def test_boolean_matches_json_text(self):
        """Test that booleans compare as true/false."""
        assert matches(True, "True")
        assert not matches(False, "true")

    def test_whitespace_is_significant(self):
        """Test that surrounding whitespace is not trimmed."""
        assert not matches("Paris ", "Paris")


class TestMatchesSet:
    """Tests for comparing against an order-irrelevant set of values."""

    def test_order_independent(self):
        """Test that element order does not matter."""
        assert matches(["b", "a"], ["a", "b"])
        assert matches(["y", "x"], SetAnswer(("x", "y")))

    def test_subset_does_not_match(self):
        """Test that a partial set earns nothing."""
        assert not matches(["a"], ["a", "b"])

    def test_superset_does_not_match(self):
        """Test that extra elements earn nothing."""
        assert not matches(["a", "b", "c"], ["a", "b"])

    def test_elements_are_case_sensitive(self):
        """Test that set elements are compared exactly."""
        assert not matches(["A", "b"], ["a", "b"])

    def test_scalar_user_value_is_empty_set(self):
        """Test that a non-list answer to a set question is wrong."""
        assert not matches("a,b", ["a", "b"])

    def test_missing_answer_matches_only_empty_set(self):
        """Test that an unanswered set question equals the empty set."""
        assert not matches(None, ["a"])
        assert matches(None, [])

    def test_joined_text_is_not_confused_with_elements(self):
        """Test that one element containing a comma differs from two elements."""
        assert not matches(["a,b"], ["a", "b"])

    def test_element_kinds_are_distinct(self):
        """Test that a number never matches its text form inside a set."""
        assert not matches([1], ["1"])
        assert not matches([True], ["true"])

    def test_numbers_match_by_value(self):
        """Test that numeric elements match regardless of order or float form."""
        assert matches([2, 1], [1, 2])
        assert matches([1.0], [1])


class TestScoreSection:
    """Tests for score_section."""

    def test_counts_correct_answers(self):
        """Test one point per correct answer."""
        key = {"q1": ScalarAnswer("A"), "q2": SetAnswer(("x", "y"))}

        assert score_section({"q1": "a", "q2": ["y", "x"]}, key) == 2
        assert score_section({"q1": "b", "q2": ["y", "x"]}, key) == 1

    def test_extra_user_keys_ignored(self):
        """Test that answers to questions not in the key are not scored."""
        key = {"q1": ScalarAnswer("A")}

        assert score_section({"q1": "A", "q9": "A"}, key) == 1

    def test_empty_key_scores_zero(self):
        """Test a section without an answer key."""
        assert score_section({"q1": "A"}, {}) == 0


class TestGrade:
    """Tests for grading a whole attempt."""

    def test_listening_example(self):
        """Test scalar and set answers in one section."""
        answer_key = {
            SectionType.LISTENING: {
                "q1": ScalarAnswer("A"),
                "q2": SetAnswer(("x", "y")),
            }
        }
        user_answers = {SectionType.LISTENING: {"q1": "a", "q2": ["y", "x"]}}

        results = grade(user_answers, answer_key)

        assert results[SectionType.LISTENING] == 2
        assert results[SectionType.READING] == 0

    def test_writing_never_graded(self):
        """Test that WRITING is absent from results even with a key."""
        answer_key = {SectionType.WRITING: {"essay": ScalarAnswer("text")}}
        user_answers = {SectionType.WRITING: {"essay": "text"}}

        results = grade(user_answers, answer_key)

        assert SectionType.WRITING not in results
        assert set(results) == set(GRADABLE_SECTIONS)

    def test_missing_sections_score_zero(self):
        """Test that nothing submitted scores zero everywhere."""
        answer_key = {SectionType.READING: {"q1": ScalarAnswer("Paris")}}

        assert grade({}, answer_key) == {
            SectionType.LISTENING: 0,
            SectionType.READING: 0,
        }


class TestBuildAnswerKey:
    """Tests for resolving Section rows into a typed key."""

    def test_from_sections(self):
        """Test building a key from unsaved Section objects."""
        sections = [
            Section(type=SectionType.LISTENING, content={}, answers={"q1": ["b", "a"]}),
            Section(type=SectionType.READING, content={}, answers=None),
        ]

        answer_key = build_answer_key(sections)

        assert answer_key == {
            SectionType.LISTENING: {"q1": SetAnswer(("a", "b"))},
            SectionType.READING: {},
        }


def test_serialize_results_uses_section_names():
    """Test that stored results are keyed by section name."""
    assert serialize_results(
        {SectionType.LISTENING: 2, SectionType.READING: 1}
    ) == {"LISTENING": 2, "READING": 1}


@pytest.mark.parametrize("user_value", [object(), {"a": 1}, 1.5, ""])
def test_matches_never_raises(user_value):
    """Test that odd user values compare without raising."""
    assert matches(user_value, "A") in (True, False)
    assert matches(user_value, ["A"]) in (True, False)

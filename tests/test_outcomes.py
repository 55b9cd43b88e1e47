import pytest

from journalbot.ledger.outcomes import (
    LESSON_ACCURATE,
    LESSON_OVERESTIMATED,
    LESSON_UNDERESTIMATED,
    compare_equality,
    compare_lexicographic,
    compare_numeric,
    get_comparator,
    implemented_lesson,
    rejected_lesson,
)


def test_lexicographic_orders_as_strings():
    assert compare_lexicographic("b", "a") == 1
    assert compare_lexicographic("a", "b") == -1
    assert compare_lexicographic("same", "same") == 0
    assert compare_lexicographic("10", "9") == -1


def test_lexicographic_none_is_incomparable_unless_both_none():
    assert compare_lexicographic(None, "x") is None
    assert compare_lexicographic("x", None) is None
    assert compare_lexicographic(None, None) == 0


def test_numeric_when_both_parse_else_lexicographic():
    assert compare_numeric("10", "9") == 1
    assert compare_numeric("10.0", "10") == 0
    assert compare_numeric(" 2.5 ", "3") == -1
    assert compare_numeric("nan", "1") == compare_lexicographic("nan", "1")
    assert compare_numeric("more", "less") == 1


def test_equality_only_defines_equal():
    assert compare_equality("a", "a") == 0
    assert compare_equality("b", "a") is None


def test_get_comparator_unknown_name():
    assert get_comparator("numeric") is compare_numeric
    with pytest.raises(ValueError):
        get_comparator("fuzzy")


@pytest.mark.parametrize(
    "actual,expected,compare,lesson",
    [
        ("same", "same", compare_lexicographic, LESSON_ACCURATE),
        ("b", "a", compare_lexicographic, LESSON_UNDERESTIMATED),
        ("a", "b", compare_lexicographic, LESSON_OVERESTIMATED),
        (None, "a", compare_lexicographic, LESSON_OVERESTIMATED),
        ("b", "a", compare_equality, LESSON_OVERESTIMATED),
        ("12", "3", compare_numeric, LESSON_UNDERESTIMATED),
    ],
)
def test_implemented_lesson(actual, expected, compare, lesson):
    assert implemented_lesson(actual, expected, compare) == lesson


def test_rejected_lesson_text():
    assert "not now" in rejected_lesson("not now")
    assert "no feedback given" in rejected_lesson(None)
    assert "no feedback given" in rejected_lesson("")

"""
Outcome comparison strategies and lesson derivation.

Expected and actual outcomes are free text, so "actual exceeded expected" has no
single meaning. The ordering is a named strategy chosen in configuration:

- `lexicographic`: plain string ordering (the historical behaviour).
- `numeric`: numeric when both sides parse as numbers, lexicographic otherwise.
- `equality`: only equality is defined; unequal outcomes are incomparable.

A comparator returns -1/0/1, or None when the pair cannot be ordered. None
falls through to the "overestimated" lesson.
"""

from __future__ import annotations

import math
from typing import Callable, Dict, Optional

OutcomeComparator = Callable[[Optional[str], Optional[str]], Optional[int]]

LESSON_ACCURATE = "Accurate prediction: the read on the situation was correct."
LESSON_UNDERESTIMATED = "Underestimated the impact: the outcome beat expectations."
LESSON_OVERESTIMATED = "Overestimated the impact: expectations need calibration."
NO_FEEDBACK = "no feedback given"


def compare_lexicographic(actual: Optional[str], expected: Optional[str]) -> Optional[int]:
    if actual == expected:
        return 0
    if actual is None or expected is None:
        return None
    return 1 if actual > expected else -1


def _as_number(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    try:
        num = float(str(value).strip())
    except ValueError:
        return None
    return None if math.isnan(num) else num


def compare_numeric(actual: Optional[str], expected: Optional[str]) -> Optional[int]:
    a, e = _as_number(actual), _as_number(expected)
    if a is not None and e is not None:
        return (a > e) - (a < e)
    return compare_lexicographic(actual, expected)


def compare_equality(actual: Optional[str], expected: Optional[str]) -> Optional[int]:
    return 0 if actual == expected else None


COMPARATORS: Dict[str, OutcomeComparator] = {
    "lexicographic": compare_lexicographic,
    "numeric": compare_numeric,
    "equality": compare_equality,
}


def get_comparator(name: str) -> OutcomeComparator:
    try:
        return COMPARATORS[name]
    except KeyError:
        raise ValueError(f"unknown outcome comparison {name!r}; expected one of {sorted(COMPARATORS)}") from None


def implemented_lesson(
    actual: Optional[str],
    expected: Optional[str],
    compare: OutcomeComparator = compare_lexicographic,
) -> str:
    order = compare(actual, expected)
    if order == 0:
        return LESSON_ACCURATE
    if order is not None and order > 0:
        return LESSON_UNDERESTIMATED
    return LESSON_OVERESTIMATED


def rejected_lesson(feedback: Optional[str]) -> str:
    return f"Did not resonate: {feedback or NO_FEEDBACK}. Priorities need a closer look."

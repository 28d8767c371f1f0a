"""Exact, normalized string matching for learner answers."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Sequence

_TRAILING_NEWLINES = re.compile(r"\n+$")


def normalize_predict_output(text: str) -> str:
    """Trim surrounding whitespace and any trailing newlines."""

    return _TRAILING_NEWLINES.sub("", text.strip())


def normalize_fill_in(text: str) -> str:
    return text.strip()


def normalize_code(text: str) -> str:
    """Normalize a written answer for exact comparison.

    Line endings become ``\\n``, trailing whitespace is dropped from every
    line, and the whole answer is trimmed. Indentation is preserved.
    """

    lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    return "\n".join(line.rstrip() for line in lines).strip()


def check_predict_answer(
    user_answer: str, expected_answer: str, accepted_solutions: Sequence[str] = ()
) -> bool:
    """Return ``True`` when predicted output matches, case-sensitively.

    The expected answer is tried first, then each accepted alternative.
    """

    user = normalize_predict_output(user_answer)
    candidates = (expected_answer, *accepted_solutions)
    return any(user == normalize_predict_output(candidate) for candidate in candidates)


def check_fill_in_answer(
    user_answer: str, expected_answer: str, accepted_solutions: Sequence[str] = ()
) -> bool:
    """Return ``True`` when a fill-in blank matches the expected text or an alternative."""

    user = normalize_fill_in(user_answer)
    candidates = (expected_answer, *accepted_solutions)
    return any(user == normalize_fill_in(candidate) for candidate in candidates)


@dataclass(frozen=True)
class AnswerMatch:
    """Outcome of :func:`check_answer_with_alternatives`."""

    is_correct: bool
    normalized_user_answer: str
    normalized_expected_answer: str
    matched_alternative: str | None = None


def check_answer_with_alternatives(
    user_answer: str, expected_answer: str, accepted_solutions: Sequence[str] = ()
) -> AnswerMatch:
    """Compare a written answer with the expected code and its alternatives.

    ``matched_alternative`` holds the accepted solution (as authored) that
    matched, and stays ``None`` when the expected answer itself matched.
    """

    user = normalize_code(user_answer)
    expected = normalize_code(expected_answer)
    if user == expected:
        return AnswerMatch(True, user, expected)

    for solution in accepted_solutions:
        if user == normalize_code(solution):
            return AnswerMatch(True, user, expected, matched_alternative=solution)
    return AnswerMatch(False, user, expected)

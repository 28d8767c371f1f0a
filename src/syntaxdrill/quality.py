"""Recall quality inferred from an attempt, on the 0-5 review scale."""

from __future__ import annotations

FAST_THRESHOLD_MS = 10_000
SLOW_THRESHOLD_MS = 30_000
MIN_REPS_FOR_EASY = 2


def infer_quality(
    is_correct: bool,
    hint_used: bool,
    response_time_ms: int,
    used_ast_match: bool = False,
    current_reps: int | None = None,
) -> int:
    """Map an attempt to a recall quality between 2 and 5.

    Args:
        is_correct: Whether the answer was graded correct.
        hint_used: Whether a hint was shown first.
        response_time_ms: Time taken to answer.
        used_ast_match: Whether the verdict came from token or AST comparison
            rather than an exact match.
        current_reps: Successful reviews so far, when known.

    Returns:
        2 for a failure, 3 with a hint, 4 for a normalized match, otherwise
        5, 4, or 3 depending on speed. Fast answers on early reviews are
        held at 4 so one lucky answer does not count as mastery.
    """

    if not is_correct:
        return 2
    if hint_used:
        return 3
    if used_ast_match:
        return 4
    if response_time_ms < FAST_THRESHOLD_MS:
        if current_reps is not None and current_reps < MIN_REPS_FOR_EASY:
            return 4
        return 5
    if response_time_ms < SLOW_THRESHOLD_MS:
        return 4
    return 3

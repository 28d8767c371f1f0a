"""Tests for recall quality inference."""

from __future__ import annotations

import pytest

from syntaxdrill.quality import infer_quality


@pytest.mark.parametrize(
    ("kwargs", "expected"),
    [
        ({"is_correct": False, "hint_used": False, "response_time_ms": 1000}, 2),
        ({"is_correct": True, "hint_used": True, "response_time_ms": 1000}, 3),
        (
            {"is_correct": True, "hint_used": False, "response_time_ms": 1000, "used_ast_match": True},
            4,
        ),
        ({"is_correct": True, "hint_used": False, "response_time_ms": 5000}, 5),
        (
            {"is_correct": True, "hint_used": False, "response_time_ms": 5000, "current_reps": 1},
            4,
        ),
        (
            {"is_correct": True, "hint_used": False, "response_time_ms": 5000, "current_reps": 2},
            5,
        ),
        ({"is_correct": True, "hint_used": False, "response_time_ms": 20_000}, 4),
        ({"is_correct": True, "hint_used": False, "response_time_ms": 30_000}, 3),
    ],
)
def test_infer_quality(kwargs: dict, expected: int) -> None:
    assert infer_quality(**kwargs) == expected

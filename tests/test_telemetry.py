"""Tests for grading telemetry entries."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from syntaxdrill.config import EngineSettings
from syntaxdrill.interface import GradingMethod
from syntaxdrill.seed import hash_string
from syntaxdrill.telemetry import create_telemetry_entry, log_grading_telemetry


def test_entry_hashes_answer_and_records_fallback() -> None:
    now = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)

    entry = create_telemetry_entry(
        exercise_slug="first-three",
        strategy=GradingMethod.TOKEN,
        was_correct=True,
        fallback_used=True,
        user_answer="items[:3]",
        fallback_reason="infra_unavailable",
        now=now,
    )

    assert entry.user_answer_hash == hash_string("items[:3]")
    assert len(entry.user_answer_hash) == 64
    assert entry.fallback_reason == "infra_unavailable"
    assert entry.matched_alternative is None
    assert entry.timestamp == now


def test_entry_defaults_to_current_utc_time() -> None:
    entry = create_telemetry_entry("x", GradingMethod.EXACT, False, False, "answer")

    assert entry.timestamp.tzinfo is not None


def test_entry_is_frozen() -> None:
    entry = create_telemetry_entry("x", GradingMethod.EXACT, False, False, "answer")

    with pytest.raises(ValidationError):
        entry.was_correct = True  # type: ignore[misc]


def test_logging_is_a_no_op_outside_development(caplog: pytest.LogCaptureFixture) -> None:
    entry = create_telemetry_entry("x", GradingMethod.EXACT, True, False, "answer")

    with caplog.at_level(logging.DEBUG, logger="syntaxdrill.telemetry"):
        log_grading_telemetry(entry, EngineSettings(environment="production"))
        assert not caplog.records

        log_grading_telemetry(entry, EngineSettings(environment="development"))

    assert len(caplog.records) == 1
    assert entry.user_answer_hash in caplog.records[0].getMessage()

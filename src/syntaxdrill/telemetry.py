"""Grading telemetry with hashed answers."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from .config import EngineSettings
from .interface import GradingMethod
from .seed import hash_string

logger = logging.getLogger(__name__)


class GradingTelemetry(BaseModel):
    """One grading event. The raw answer is never stored, only its SHA-256."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    exercise_slug: str
    strategy: GradingMethod
    was_correct: bool
    fallback_used: bool
    fallback_reason: str | None = None
    matched_alternative: str | None = None
    user_answer_hash: str = Field(..., pattern=r"^[0-9a-f]{64}$")
    timestamp: datetime


def create_telemetry_entry(
    exercise_slug: str,
    strategy: GradingMethod,
    was_correct: bool,
    fallback_used: bool,
    user_answer: str,
    fallback_reason: str | None = None,
    matched_alternative: str | None = None,
    now: datetime | None = None,
) -> GradingTelemetry:
    return GradingTelemetry(
        exercise_slug=exercise_slug,
        strategy=strategy,
        was_correct=was_correct,
        fallback_used=fallback_used,
        fallback_reason=fallback_reason,
        matched_alternative=matched_alternative,
        user_answer_hash=hash_string(user_answer),
        timestamp=now or datetime.now(timezone.utc),
    )


def log_grading_telemetry(entry: GradingTelemetry, settings: EngineSettings | None = None) -> None:
    """Log ``entry`` at DEBUG level in development; do nothing elsewhere."""

    settings = settings or EngineSettings()
    if not settings.is_development:
        return
    logger.debug("Grading telemetry: %s", entry.model_dump_json())

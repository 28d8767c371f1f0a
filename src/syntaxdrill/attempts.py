"""Flat attempt records handed to external persistence."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from .interface import GeneratorParams, GradingMethod, GradingResult


class AttemptRecord(BaseModel):
    """Row describing one graded attempt.

    ``times_seen`` and ``times_correct`` describe this attempt alone; the
    store is expected to add them to any existing counters when it upserts.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    user_id: str
    exercise_slug: str
    language: str
    times_seen: int = Field(default=1, ge=1)
    times_correct: int = Field(..., ge=0, le=1)
    last_seen_at: str
    generated_params: GeneratorParams | None = None
    seed: str | None = None
    grading_method: GradingMethod
    used_target_construct: bool | None
    coaching_shown: bool
    response_time_ms: int = Field(..., ge=0)
    hint_used: bool
    quality_score: int = Field(..., ge=0, le=5)
    attempted_at: str
    is_correct: bool


def build_attempt_record(
    user_id: str,
    exercise_slug: str,
    grading_result: GradingResult,
    response_time_ms: int,
    hint_used: bool,
    quality_score: int,
    generated_params: GeneratorParams | None = None,
    seed: str | None = None,
    language: str = "python",
    now: datetime | None = None,
) -> AttemptRecord:
    """Shape an :class:`AttemptRecord` from a grading verdict.

    Args:
        user_id: Learner identifier.
        exercise_slug: Exercise that was attempted.
        grading_result: Verdict returned by the grading pipeline.
        response_time_ms: Time the learner took to answer.
        hint_used: Whether a hint was revealed before answering.
        quality_score: Recall quality, see :func:`syntaxdrill.quality.infer_quality`.
        generated_params: Parameters of a generated exercise, if any.
        seed: Seed of a generated exercise, if any.
        language: Language key of the exercise.
        now: Timestamp override; defaults to the current UTC time.

    Returns:
        The record. ``coaching_shown`` is ``True`` exactly when the verdict
        carries coaching feedback.
    """

    timestamp = (now or datetime.now(timezone.utc)).isoformat()
    return AttemptRecord(
        user_id=user_id,
        exercise_slug=exercise_slug,
        language=language,
        times_seen=1,
        times_correct=1 if grading_result.is_correct else 0,
        last_seen_at=timestamp,
        generated_params=dict(generated_params) if generated_params is not None else None,
        seed=seed,
        grading_method=grading_result.grading_method,
        used_target_construct=grading_result.used_target_construct,
        coaching_shown=grading_result.coaching_feedback is not None,
        response_time_ms=response_time_ms,
        hint_used=hint_used,
        quality_score=quality_score,
        attempted_at=timestamp,
        is_correct=grading_result.is_correct,
    )

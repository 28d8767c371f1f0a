"""Grading pipeline tying strategies, construct checks, and telemetry together."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .config import DEFAULT_COACHING_FEEDBACK, EngineSettings
from .constructs import check_construct
from .errors import RuntimeUnavailableError
from .interface import (
    Exercise,
    ExerciseKind,
    GradingMethod,
    GradingResult,
    LanguageRuntime,
)
from .matching import normalize_code, normalize_fill_in, normalize_predict_output
from .registry import RuntimeRegistry
from .strategy import StrategyOutcome, grade_exact, grade_with_strategy
from .telemetry import GradingTelemetry, create_telemetry_entry, log_grading_telemetry

logger = logging.getLogger(__name__)

_NORMALIZERS = {
    ExerciseKind.WRITE: normalize_code,
    ExerciseKind.FILL_IN: normalize_fill_in,
    ExerciseKind.PREDICT: normalize_predict_output,
}


def build_grading_result(
    user_answer: str,
    exercise: Exercise,
    *,
    is_correct: bool,
    method: GradingMethod,
    matched_alternative: str | None = None,
    default_feedback: str = DEFAULT_COACHING_FEEDBACK,
) -> GradingResult:
    """Attach normalization and target-construct coaching to a verdict.

    Construct detection only runs for correct answers to exercises that name
    a target construct; ``used_target_construct`` stays ``None`` otherwise.
    Coaching never changes ``is_correct``.
    """

    normalize = _NORMALIZERS[exercise.kind]
    used_target_construct: bool | None = None
    coaching_feedback: str | None = None

    target = exercise.target_construct
    if target is not None and is_correct:
        used_target_construct = check_construct(user_answer, target.type).detected
        if not used_target_construct:
            coaching_feedback = target.feedback or default_feedback

    return GradingResult(
        is_correct=is_correct,
        used_target_construct=used_target_construct,
        coaching_feedback=coaching_feedback,
        grading_method=method,
        normalized_user_answer=normalize(user_answer),
        normalized_expected_answer=normalize(exercise.expected_answer),
        matched_alternative=matched_alternative,
    )


def grade_answer(
    user_answer: str,
    exercise: Exercise,
    *,
    default_feedback: str = DEFAULT_COACHING_FEEDBACK,
) -> GradingResult:
    """Grade ``user_answer`` synchronously using exact matching only."""

    verdict = grade_exact(user_answer, exercise)
    return build_grading_result(
        user_answer,
        exercise,
        is_correct=verdict.is_correct,
        method=GradingMethod.EXACT,
        matched_alternative=verdict.matched_alternative,
        default_feedback=default_feedback,
    )


def should_show_coaching(result: GradingResult) -> bool:
    """Return ``True`` for a correct answer that avoided the target construct."""

    return result.is_correct and result.used_target_construct is False


@dataclass(frozen=True)
class GradingReport:
    """Everything produced while grading one submission."""

    result: GradingResult
    outcome: StrategyOutcome
    telemetry: GradingTelemetry


class GradingPipeline:
    """Grade submissions through each exercise's strategy chain.

    Args:
        runtimes: Sandboxed runtimes keyed by language. Without a runtime for
            an exercise's language, runtime-backed strategies fall back.
        settings: Engine settings; defaults are used when omitted.
    """

    def __init__(
        self,
        runtimes: RuntimeRegistry | None = None,
        settings: EngineSettings | None = None,
    ) -> None:
        self.runtimes = runtimes if runtimes is not None else RuntimeRegistry()
        self.settings = settings or EngineSettings()

    async def _runtime_for(self, language: str) -> LanguageRuntime | None:
        runtime = self.runtimes.get(language)
        if runtime is None or runtime.is_ready():
            return runtime
        try:
            await runtime.initialize()
        except RuntimeUnavailableError as exc:
            logger.warning("Runtime for %s failed to initialize: %s", language, exc)
        return runtime

    async def grade(self, user_answer: str, exercise: Exercise) -> GradingReport:
        """Grade ``user_answer`` against a rendered ``exercise``.

        Returns:
            The verdict, the strategies attempted, and the telemetry entry
            that was logged for it.
        """

        runtime = await self._runtime_for(exercise.language)
        outcome = await grade_with_strategy(
            user_answer,
            exercise,
            runtime,
            ast_options=self.settings.ast_options,
            timeout_ms=self.settings.execution_timeout_ms,
            overrides=self.settings.strategy_overrides,
        )
        result = build_grading_result(
            user_answer,
            exercise,
            is_correct=outcome.is_correct,
            method=outcome.method,
            matched_alternative=outcome.matched_alternative,
            default_feedback=self.settings.default_coaching_feedback,
        )
        telemetry = create_telemetry_entry(
            exercise_slug=exercise.slug,
            strategy=outcome.method,
            was_correct=result.is_correct,
            fallback_used=outcome.fallback_used,
            user_answer=user_answer,
            fallback_reason=outcome.fallback_reason,
            matched_alternative=result.matched_alternative,
        )
        log_grading_telemetry(telemetry, self.settings)
        return GradingReport(result=result, outcome=outcome, telemetry=telemetry)

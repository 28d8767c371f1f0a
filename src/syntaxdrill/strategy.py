"""Ordered grading strategies with explicit fallback.

Each strategy either resolves a submission as correct or incorrect, or
reports itself unavailable together with a reason. The chain for an exercise
is tried in order and the first strategy that resolves decides the verdict.
Exact matching closes every chain, so grading always resolves.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Sequence

from .ast_compare import compare_by_ast
from .errors import ExecutionError, ExecutionTimeout
from .execution import (
    DEFAULT_TIMEOUT_MS,
    DEFAULT_VERIFICATION_TEMPLATE,
    execute_code,
    fill_verification_template,
    is_infra_error,
    is_timeout_error,
    verify_predict_answer,
    verify_with_script,
    verify_write_answer,
)
from .interface import (
    AstCompareOptions,
    Exercise,
    ExerciseKind,
    GradingMethod,
    LanguageRuntime,
)
from .matching import (
    check_answer_with_alternatives,
    normalize_fill_in,
    normalize_predict_output,
)
from .token_compare import compare_by_tokens

logger = logging.getLogger(__name__)


class StrategyStatus(str, Enum):
    MATCH = "match"
    MISMATCH = "mismatch"
    UNAVAILABLE = "unavailable"


class FallbackReason(str, Enum):
    """Why a strategy could not decide a submission."""

    RUNTIME_UNAVAILABLE = "runtime_unavailable"
    INFRA_UNAVAILABLE = "infra_unavailable"
    TIMEOUT = "timeout"
    EXECUTION_ERROR = "execution_error"


@dataclass(frozen=True)
class StrategyResult:
    """Tri-state outcome of one strategy."""

    method: GradingMethod
    status: StrategyStatus
    matched_alternative: str | None = None
    reason: FallbackReason | None = None
    error: str | None = None

    @classmethod
    def resolved(
        cls, method: GradingMethod, is_correct: bool, matched_alternative: str | None = None
    ) -> "StrategyResult":
        status = StrategyStatus.MATCH if is_correct else StrategyStatus.MISMATCH
        return cls(method, status, matched_alternative=matched_alternative)

    @classmethod
    def unavailable(
        cls, method: GradingMethod, reason: FallbackReason, error: str | None = None
    ) -> "StrategyResult":
        return cls(method, StrategyStatus.UNAVAILABLE, reason=reason, error=error)

    @property
    def is_resolved(self) -> bool:
        return self.status is not StrategyStatus.UNAVAILABLE

    @property
    def is_correct(self) -> bool:
        return self.status is StrategyStatus.MATCH


@dataclass(frozen=True)
class StrategyOutcome:
    """Every strategy attempted for a submission, ending with the deciding one."""

    attempts: tuple[StrategyResult, ...]

    @property
    def result(self) -> StrategyResult:
        return self.attempts[-1]

    @property
    def method(self) -> GradingMethod:
        return self.result.method

    @property
    def is_correct(self) -> bool:
        return self.result.is_correct

    @property
    def matched_alternative(self) -> str | None:
        return self.result.matched_alternative

    @property
    def fallback_used(self) -> bool:
        return len(self.attempts) > 1

    @property
    def fallback_reason(self) -> str | None:
        """Reason the first strategy gave up, when a fallback happened."""

        if not self.fallback_used:
            return None
        reason = self.attempts[0].reason
        return reason.value if reason is not None else None


def strategy_chain(
    exercise: Exercise,
    overrides: Mapping[ExerciseKind, Sequence[GradingMethod]] | None = None,
) -> tuple[GradingMethod, ...]:
    """Return the strategies tried for ``exercise``, in order.

    Args:
        exercise: Exercise being graded.
        overrides: Replacement default chains keyed by exercise kind.

    Returns:
        The chain, always ending with exact matching. An explicit
        ``grading_strategy`` on the exercise is moved to the front.
    """

    if overrides and exercise.kind in overrides:
        chain = list(overrides[exercise.kind])
    elif exercise.kind is ExerciseKind.FILL_IN:
        chain = [GradingMethod.EXACT]
    elif exercise.kind is ExerciseKind.PREDICT:
        chain = [GradingMethod.EXECUTION, GradingMethod.EXACT]
    elif exercise.verification_script or exercise.verify_by_execution:
        chain = [
            GradingMethod.EXECUTION,
            GradingMethod.AST,
            GradingMethod.TOKEN,
            GradingMethod.EXACT,
        ]
    else:
        chain = [GradingMethod.AST, GradingMethod.TOKEN, GradingMethod.EXACT]

    if exercise.grading_strategy is not None:
        chain = [exercise.grading_strategy, *chain]
    if GradingMethod.EXACT not in chain:
        chain.append(GradingMethod.EXACT)
    return tuple(dict.fromkeys(chain))


def grade_exact(user_answer: str, exercise: Exercise) -> StrategyResult:
    """Normalized string comparison for the exercise's kind."""

    if exercise.kind is ExerciseKind.WRITE:
        match = check_answer_with_alternatives(
            user_answer, exercise.expected_answer, exercise.accepted_solutions
        )
        return StrategyResult.resolved(
            GradingMethod.EXACT, match.is_correct, match.matched_alternative
        )

    if exercise.kind is ExerciseKind.PREDICT:
        normalize = normalize_predict_output
    else:
        normalize = normalize_fill_in
    user = normalize(user_answer)
    if user == normalize(exercise.expected_answer):
        return StrategyResult.resolved(GradingMethod.EXACT, True)
    for solution in exercise.accepted_solutions:
        if user == normalize(solution):
            return StrategyResult.resolved(GradingMethod.EXACT, True, solution)
    return StrategyResult.resolved(GradingMethod.EXACT, False)


async def _grade_tokens(
    user_answer: str, exercise: Exercise, runtime: LanguageRuntime
) -> StrategyResult:
    result = await compare_by_tokens(
        runtime, user_answer, exercise.expected_answer, exercise.accepted_solutions
    )
    return StrategyResult.resolved(GradingMethod.TOKEN, result.match, result.matched_alternative)


async def _grade_ast(
    user_answer: str,
    exercise: Exercise,
    runtime: LanguageRuntime,
    options: AstCompareOptions | None,
) -> StrategyResult:
    result = await compare_by_ast(
        runtime, user_answer, exercise.expected_answer, exercise.accepted_solutions, options
    )
    if not result.infra_available:
        return StrategyResult.unavailable(
            GradingMethod.AST, FallbackReason.INFRA_UNAVAILABLE, result.error
        )
    return StrategyResult.resolved(GradingMethod.AST, result.match, result.matched_alternative)


def _execution_failure(exc: ExecutionError) -> StrategyResult:
    if isinstance(exc, ExecutionTimeout):
        reason = FallbackReason.TIMEOUT
    elif exc.infra:
        reason = FallbackReason.INFRA_UNAVAILABLE
    else:
        reason = FallbackReason.EXECUTION_ERROR
    return StrategyResult.unavailable(GradingMethod.EXECUTION, reason, str(exc))


async def _grade_predict_by_execution(
    user_answer: str, exercise: Exercise, runtime: LanguageRuntime, timeout_ms: int
) -> StrategyResult:
    if exercise.code is None:
        return StrategyResult.unavailable(
            GradingMethod.EXECUTION,
            FallbackReason.EXECUTION_ERROR,
            "Exercise has no code to execute",
        )
    try:
        matched = await verify_predict_answer(runtime, exercise.code, user_answer, timeout_ms)
    except ExecutionError as exc:
        return _execution_failure(exc)

    if matched:
        return StrategyResult.resolved(GradingMethod.EXECUTION, True)
    user = normalize_predict_output(user_answer)
    for solution in exercise.accepted_solutions:
        if user == normalize_predict_output(solution):
            return StrategyResult.resolved(GradingMethod.EXECUTION, True, solution)
    return StrategyResult.resolved(GradingMethod.EXECUTION, False)


async def _grade_write_by_execution(
    user_answer: str, exercise: Exercise, runtime: LanguageRuntime, timeout_ms: int
) -> StrategyResult:
    if exercise.verification_script:
        verdict = await verify_with_script(
            runtime, user_answer, exercise.verification_script, timeout_ms
        )
        if not verdict.infra_available:
            reason = (
                FallbackReason.TIMEOUT
                if is_timeout_error(verdict.error)
                else FallbackReason.INFRA_UNAVAILABLE
            )
            return StrategyResult.unavailable(GradingMethod.EXECUTION, reason, verdict.error)
        return StrategyResult.resolved(GradingMethod.EXECUTION, verdict.passed)

    template = exercise.verification_template or DEFAULT_VERIFICATION_TEMPLATE
    reference = await execute_code(
        runtime, fill_verification_template(template, exercise.expected_answer), timeout_ms
    )
    if not reference.success:
        if is_timeout_error(reference.error):
            reason = FallbackReason.TIMEOUT
        elif is_infra_error(reference.error):
            reason = FallbackReason.INFRA_UNAVAILABLE
        else:
            reason = FallbackReason.EXECUTION_ERROR
        return StrategyResult.unavailable(GradingMethod.EXECUTION, reason, reference.error)

    try:
        matched = await verify_write_answer(
            runtime, user_answer, reference.output or "", template, timeout_ms
        )
    except ExecutionTimeout as exc:
        return _execution_failure(exc)
    except ExecutionError as exc:
        if exc.infra:
            return _execution_failure(exc)
        # Learner code raised, so the answer is wrong.
        logger.debug("Submission for %s raised during execution: %s", exercise.slug, exc)
        return StrategyResult.resolved(GradingMethod.EXECUTION, False)
    return StrategyResult.resolved(GradingMethod.EXECUTION, matched)


async def run_strategy(
    method: GradingMethod,
    user_answer: str,
    exercise: Exercise,
    runtime: LanguageRuntime | None,
    *,
    ast_options: AstCompareOptions | None = None,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
) -> StrategyResult:
    """Run a single strategy against ``user_answer``."""

    if method is GradingMethod.EXACT:
        return grade_exact(user_answer, exercise)

    if runtime is None or not runtime.is_ready():
        return StrategyResult.unavailable(method, FallbackReason.RUNTIME_UNAVAILABLE)

    if method is GradingMethod.TOKEN:
        return await _grade_tokens(user_answer, exercise, runtime)
    if method is GradingMethod.AST:
        return await _grade_ast(user_answer, exercise, runtime, ast_options)
    if exercise.kind is ExerciseKind.PREDICT:
        return await _grade_predict_by_execution(user_answer, exercise, runtime, timeout_ms)
    if exercise.kind is ExerciseKind.WRITE:
        return await _grade_write_by_execution(user_answer, exercise, runtime, timeout_ms)
    return StrategyResult.unavailable(
        method,
        FallbackReason.EXECUTION_ERROR,
        f"Execution grading does not apply to {exercise.kind.value} exercises",
    )


async def grade_with_strategy(
    user_answer: str,
    exercise: Exercise,
    runtime: LanguageRuntime | None,
    *,
    ast_options: AstCompareOptions | None = None,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    overrides: Mapping[ExerciseKind, Sequence[GradingMethod]] | None = None,
) -> StrategyOutcome:
    """Try each strategy of the exercise's chain until one resolves.

    Args:
        user_answer: Raw submission.
        exercise: Rendered exercise being graded.
        runtime: Runtime for the exercise's language, or ``None`` when none
            is registered; runtime-backed strategies then fall through.
        ast_options: Normalizations for AST comparison.
        timeout_ms: Execution timeout.
        overrides: Replacement default chains keyed by exercise kind.

    Returns:
        The attempted strategies, the last of which decided the verdict.
    """

    attempts: list[StrategyResult] = []
    for method in strategy_chain(exercise, overrides):
        result = await run_strategy(
            method,
            user_answer,
            exercise,
            runtime,
            ast_options=ast_options,
            timeout_ms=timeout_ms,
        )
        attempts.append(result)
        if result.is_resolved:
            break
        logger.info(
            "%s grading unavailable for %s (%s), falling back",
            method.value,
            exercise.slug,
            result.reason.value if result.reason else "unknown",
        )
    return StrategyOutcome(tuple(attempts))

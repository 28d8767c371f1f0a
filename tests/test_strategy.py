"""Tests for the ordered strategy chain and its fallbacks."""

from __future__ import annotations

import asyncio

from syntaxdrill.interface import Exercise, ExecutionResult, ExerciseKind, GradingMethod
from syntaxdrill.strategy import grade_with_strategy, strategy_chain

E, T, A, X = (
    GradingMethod.EXACT,
    GradingMethod.TOKEN,
    GradingMethod.AST,
    GradingMethod.EXECUTION,
)


def _write(**fields) -> Exercise:
    data = {"slug": "first-three", "prompt": "p", "expected_answer": "items[:3]"}
    data.update(fields)
    return Exercise(kind=ExerciseKind.WRITE, **data)


def _predict(**fields) -> Exercise:
    data = {
        "slug": "predict",
        "prompt": "p",
        "code": "print('yth')",
        "expected_answer": "yth",
    }
    data.update(fields)
    return Exercise(kind=ExerciseKind.PREDICT, **data)


def test_default_chains_per_kind() -> None:
    fill_in = Exercise(slug="f", kind=ExerciseKind.FILL_IN, prompt="p", expected_answer="a")

    assert strategy_chain(fill_in) == (E,)
    assert strategy_chain(_predict()) == (X, E)
    assert strategy_chain(_write()) == (A, T, E)
    assert strategy_chain(_write(verify_by_execution=True)) == (X, A, T, E)
    assert strategy_chain(_write(verification_script="assert True")) == (X, A, T, E)


def test_explicit_strategy_moves_to_front() -> None:
    assert strategy_chain(_write(grading_strategy=T)) == (T, A, E)


def test_overrides_replace_defaults_and_keep_exact() -> None:
    overrides = {ExerciseKind.WRITE: (T,)}

    assert strategy_chain(_write(), overrides) == (T, E)


def test_write_falls_back_to_exact_without_runtime() -> None:
    outcome = asyncio.run(grade_with_strategy("items[:3]", _write(), None))

    assert outcome.is_correct
    assert outcome.method is E
    assert outcome.fallback_used
    assert outcome.fallback_reason == "runtime_unavailable"


def test_write_graded_by_ast_with_runtime(fake_runtime) -> None:
    outcome = asyncio.run(grade_with_strategy("items[0:3]", _write(), fake_runtime))

    assert outcome.is_correct
    assert outcome.method is A
    assert not outcome.fallback_used
    assert outcome.fallback_reason is None


def test_ast_mismatch_resolves_without_fallback(fake_runtime) -> None:
    outcome = asyncio.run(grade_with_strategy("items[:2]", _write(), fake_runtime))

    assert not outcome.is_correct
    assert outcome.method is A
    assert len(outcome.attempts) == 1


def test_ast_infra_failure_falls_back_to_tokens(make_runtime) -> None:
    runtime = make_runtime(ast_error=RuntimeError("Worker not ready"))

    outcome = asyncio.run(grade_with_strategy("items[:3]", _write(), runtime))

    assert outcome.is_correct
    assert outcome.method is T
    assert outcome.fallback_reason == "infra_unavailable"
    assert outcome.attempts[0].error == "Worker not ready"


def test_not_ready_runtime_counts_as_unavailable(make_runtime) -> None:
    runtime = make_runtime(ready=False)

    outcome = asyncio.run(grade_with_strategy("items[:3]", _write(), runtime))

    assert outcome.method is E
    assert outcome.fallback_reason == "runtime_unavailable"


def test_predict_graded_by_execution(make_runtime) -> None:
    runtime = make_runtime(outputs={"print('yth')": ExecutionResult.ok("yth\n")})

    outcome = asyncio.run(grade_with_strategy("yth", _predict(), runtime))

    assert outcome.is_correct
    assert outcome.method is X


def test_predict_execution_mismatch_still_checks_alternatives(make_runtime) -> None:
    runtime = make_runtime(outputs={"print('yth')": ExecutionResult.ok("yth\n")})
    exercise = _predict(accepted_solutions=("'yth'",))

    outcome = asyncio.run(grade_with_strategy("'yth'", exercise, runtime))

    assert outcome.is_correct
    assert outcome.method is X
    assert outcome.matched_alternative == "'yth'"


def test_predict_timeout_falls_back_to_exact(make_runtime) -> None:
    runtime = make_runtime(execute_delay=5.0)

    outcome = asyncio.run(grade_with_strategy("yth", _predict(), runtime, timeout_ms=20))

    assert outcome.is_correct
    assert outcome.method is E
    assert outcome.fallback_reason == "timeout"


def test_predict_without_code_falls_back(fake_runtime) -> None:
    exercise = _predict(code=None)

    outcome = asyncio.run(grade_with_strategy("yth", exercise, fake_runtime))

    assert outcome.method is E
    assert outcome.fallback_reason == "execution_error"


def test_write_execution_compares_against_reference_output(make_runtime) -> None:
    runtime = make_runtime(
        outputs={
            "print(items[:3])": ExecutionResult.ok("[1, 2, 3]\n"),
            "print(list(items)[:3])": ExecutionResult.ok("[1, 2, 3]\n"),
        }
    )
    exercise = _write(verify_by_execution=True)

    outcome = asyncio.run(grade_with_strategy("list(items)[:3]", exercise, runtime))

    assert outcome.is_correct
    assert outcome.method is X


def test_write_execution_user_error_is_incorrect(make_runtime) -> None:
    runtime = make_runtime(
        outputs={
            "print(items[:3])": ExecutionResult.ok("[1, 2, 3]\n"),
            "print(itms[:3])": ExecutionResult.failed("NameError: name 'itms' is not defined"),
        }
    )
    exercise = _write(verify_by_execution=True)

    outcome = asyncio.run(grade_with_strategy("itms[:3]", exercise, runtime))

    assert not outcome.is_correct
    assert outcome.method is X
    assert not outcome.fallback_used


def test_write_reference_timeout_is_reported_as_timeout(make_runtime) -> None:
    runtime = make_runtime(
        outputs={"print(items[:3])": ExecutionResult.failed("Execution timeout after 20 ms")}
    )
    exercise = _write(verify_by_execution=True)

    outcome = asyncio.run(grade_with_strategy("items[:3]", exercise, runtime))

    assert outcome.is_correct
    assert outcome.method is not X
    assert outcome.fallback_reason == "timeout"


def test_write_script_verification(make_runtime) -> None:
    exercise = _write(verification_script="assert first(items) == items[:3]")
    passing = make_runtime()
    failing = make_runtime(
        outputs={
            "bad\n\nassert first(items) == items[:3]": ExecutionResult.failed("AssertionError"),
        }
    )

    passed = asyncio.run(grade_with_strategy("good", exercise, passing))
    failed = asyncio.run(grade_with_strategy("bad", exercise, failing))

    assert passed.is_correct and passed.method is X
    assert not failed.is_correct and failed.method is X


def test_explicit_execution_on_fill_in_falls_back(fake_runtime) -> None:
    exercise = Exercise(
        slug="f",
        kind=ExerciseKind.FILL_IN,
        prompt="p",
        expected_answer="upper",
        grading_strategy=X,
    )

    outcome = asyncio.run(grade_with_strategy(" upper ", exercise, fake_runtime))

    assert outcome.is_correct
    assert outcome.method is E
    assert outcome.fallback_reason == "execution_error"

"""Tests for the subprocess-backed Python runtime."""

from __future__ import annotations

import asyncio

import pytest

from syntaxdrill.errors import RuntimeUnavailableError
from syntaxdrill.interface import LanguageRuntime
from syntaxdrill.runtime import PythonRuntime


def _ready_runtime() -> PythonRuntime:
    runtime = PythonRuntime()
    asyncio.run(runtime.initialize())
    return runtime


def test_runtime_satisfies_protocol() -> None:
    assert isinstance(PythonRuntime(), LanguageRuntime)


def test_initialize_is_idempotent() -> None:
    runtime = PythonRuntime()
    assert not runtime.is_ready()

    asyncio.run(runtime.initialize())
    asyncio.run(runtime.initialize())

    assert runtime.is_ready()


def test_execute_requires_initialization() -> None:
    with pytest.raises(RuntimeUnavailableError):
        asyncio.run(PythonRuntime().execute("print(1)"))


def test_execute_captures_stdout() -> None:
    result = asyncio.run(_ready_runtime().execute("s = 'python'\nprint(s[1:4])"))

    assert result.success
    assert result.output == "yth\n"
    assert result.error is None


def test_execute_reports_last_error_line() -> None:
    result = asyncio.run(_ready_runtime().execute("x = 1 / 0"))

    assert not result.success
    assert result.output is None
    assert result.error == "ZeroDivisionError: division by zero"


def test_execute_times_out() -> None:
    result = asyncio.run(_ready_runtime().execute("while True:\n    pass", timeout_ms=300))

    assert not result.success
    assert result.error == "Execution timeout after 300 ms"


def test_compare_by_tokens_ignores_spacing() -> None:
    result = asyncio.run(_ready_runtime().compare_by_tokens("x=[1,2]", "x = [1, 2]"))

    assert result.match
    assert result.matched_alternative is None


def test_compare_by_tokens_reports_alternative() -> None:
    result = asyncio.run(
        _ready_runtime().compare_by_tokens("items[0:3]", "items[:3]", ["items[0:3]"])
    )

    assert result.match
    assert result.matched_alternative == "items[0:3]"


def test_compare_by_ast_matches_renamed_comprehension() -> None:
    result = asyncio.run(
        _ready_runtime().compare_by_ast("[n ** 2 for n in nums]", "[x ** 2 for x in nums]")
    )

    assert result.match
    assert result.infra_available


def test_compare_by_ast_unparseable_answer_is_a_mismatch() -> None:
    result = asyncio.run(_ready_runtime().compare_by_ast("[x for x in", "[x for x in nums]"))

    assert not result.match
    assert result.infra_available


def test_terminate_marks_runtime_not_ready() -> None:
    runtime = _ready_runtime()

    runtime.terminate()

    assert not runtime.is_ready()


def test_compare_by_ast_rejects_wrong_variable_name() -> None:
    result = asyncio.run(_ready_runtime().compare_by_ast("banana = 30", "age = 30"))

    assert not result.match
    assert result.infra_available

"""Shared fixtures for engine tests."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Sequence

import pytest
import yaml

from syntaxdrill.errors import RuntimeUnavailableError
from syntaxdrill.interface import (
    AstCompareOptions,
    AstCompareResult,
    ExecutionResult,
    Token,
    TokenCompareResult,
)
from syntaxdrill.runtime.canonical import normalize_ast, tokenize_code


class FakeRuntime:
    """In-process stand-in for a sandboxed Python runtime.

    Execution results are looked up by exact source text; unknown code prints
    nothing. Failure modes are switched on through constructor flags.
    """

    language = "python"

    def __init__(
        self,
        *,
        outputs: dict[str, ExecutionResult] | None = None,
        ready: bool = True,
        fail_initialize: bool = False,
        execute_delay: float = 0.0,
        execute_error: Exception | None = None,
        token_error: Exception | None = None,
        ast_error: Exception | None = None,
    ) -> None:
        self.outputs = dict(outputs or {})
        self.ready = ready
        self.fail_initialize = fail_initialize
        self.execute_delay = execute_delay
        self.execute_error = execute_error
        self.token_error = token_error
        self.ast_error = ast_error
        self.executed: list[str] = []
        self.initialize_calls = 0
        self.terminated = False

    async def initialize(self) -> None:
        self.initialize_calls += 1
        if self.fail_initialize:
            raise RuntimeUnavailableError("sandbox failed to load")
        self.ready = True

    def is_ready(self) -> bool:
        return self.ready

    async def execute(self, code: str, *, timeout_ms: int | None = None) -> ExecutionResult:
        self.executed.append(code)
        if self.execute_delay:
            await asyncio.sleep(self.execute_delay)
        if self.execute_error is not None:
            raise self.execute_error
        return self.outputs.get(code, ExecutionResult.ok(""))

    async def tokenize(self, code: str) -> list[Token] | None:
        return tokenize_code(code)

    async def compare_by_tokens(
        self,
        user_answer: str,
        expected_answer: str,
        accepted_solutions: Sequence[str] = (),
    ) -> TokenCompareResult:
        if self.token_error is not None:
            raise self.token_error
        user = tokenize_code(user_answer)
        if user is not None and user == tokenize_code(expected_answer):
            return TokenCompareResult(match=True)
        for solution in accepted_solutions:
            if user is not None and user == tokenize_code(solution):
                return TokenCompareResult(match=True, matched_alternative=solution)
        return TokenCompareResult(match=False)

    async def compare_by_ast(
        self,
        user_answer: str,
        expected_answer: str,
        accepted_solutions: Sequence[str] = (),
        options: AstCompareOptions | None = None,
    ) -> AstCompareResult:
        if self.ast_error is not None:
            raise self.ast_error
        user = normalize_ast(user_answer, options)
        if user is not None and user == normalize_ast(expected_answer, options):
            return AstCompareResult(match=True, infra_available=True)
        for solution in accepted_solutions:
            if user is not None and user == normalize_ast(solution, options):
                return AstCompareResult(
                    match=True, matched_alternative=solution, infra_available=True
                )
        return AstCompareResult(match=False, infra_available=True)

    def terminate(self) -> None:
        self.terminated = True
        self.ready = False


@pytest.fixture
def fake_runtime() -> FakeRuntime:
    return FakeRuntime()


@pytest.fixture
def make_runtime() -> type[FakeRuntime]:
    """Return the fake runtime class for tests that need custom failure modes."""

    return FakeRuntime


EXERCISE_FILE = {
    "language": "python",
    "category": "strings",
    "exercises": [
        {
            "slug": "string-slice-dynamic",
            "title": "Slice a word",
            "type": "predict",
            "generator": "string-slice",
            "prompt": "What does this code print? ({{description}})",
            "code": "{{code}}",
            "expected_answer": "{{result}}",
            "hints": ["Slices stop before the end index."],
        },
        {
            "slug": "first-three",
            "title": "First three items",
            "type": "write",
            "prompt": "Take the first three items of items.",
            "expected_answer": "items[:3]",
            "accepted_solutions": ["items[0:3]"],
            "hints": ["Leave out the start index."],
            "target_construct": {"type": "slice"},
        },
        {
            "slug": "upper-blank",
            "title": "Shout it",
            "type": "fill-in",
            "prompt": "Complete the call.",
            "template": "name.___()",
            "expected_answer": "upper",
            "hints": ["Think capital letters."],
        },
    ],
}


@pytest.fixture
def exercise_file(tmp_path: Path) -> Path:
    """Write a small exercise catalog to disk and return its path."""

    path = tmp_path / "strings.yaml"
    path.write_text(yaml.safe_dump(EXERCISE_FILE, sort_keys=False), encoding="utf-8")
    return path

"""Python runtime backed by a separate interpreter process."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import sys
from typing import Sequence

from ..errors import RuntimeUnavailableError
from ..interface import (
    AstCompareOptions,
    AstCompareResult,
    ExecutionResult,
    Token,
    TokenCompareResult,
)
from .canonical import normalize_ast, tokenize_code

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 5000


async def _kill(process: asyncio.subprocess.Process) -> None:
    with contextlib.suppress(ProcessLookupError):
        process.kill()
    await process.wait()


class PythonRuntime:
    """Run, tokenize, and compare Python code.

    Execution starts a fresh ``python -I`` process per call so submissions
    cannot see each other's state or the engine's environment. Tokenizing
    and tree comparison happen in-process because they never execute the
    submitted code.

    Calls are not serialized internally; callers run one verification per
    learner session at a time.

    Args:
        executable: Interpreter used for execution, defaulting to the one
            running the engine.
        default_timeout_ms: Timeout applied when ``execute`` is called
            without one.
    """

    language = "python"

    def __init__(
        self,
        executable: str | None = None,
        *,
        default_timeout_ms: int = DEFAULT_TIMEOUT_MS,
    ) -> None:
        self._executable = executable or sys.executable
        self._default_timeout_ms = default_timeout_ms
        self._ready = False

    async def initialize(self) -> None:
        """Mark the runtime ready once the interpreter is known to exist."""

        if self._ready:
            return
        if not self._executable:
            raise RuntimeUnavailableError("No Python interpreter is available")
        self._ready = True
        logger.debug("Python runtime ready using %s", self._executable)

    def is_ready(self) -> bool:
        return self._ready

    def _require_ready(self) -> None:
        if not self._ready:
            raise RuntimeUnavailableError("Python runtime is not initialized")

    async def execute(self, code: str, *, timeout_ms: int | None = None) -> ExecutionResult:
        """Run ``code`` in a child interpreter and capture standard output.

        A non-zero exit status yields a failed result carrying the last line
        of standard error, e.g. ``"ZeroDivisionError: division by zero"``.

        Raises:
            RuntimeUnavailableError: If the runtime is not initialized or the
                interpreter cannot be started.
        """

        self._require_ready()
        effective_ms = timeout_ms if timeout_ms is not None else self._default_timeout_ms

        try:
            process = await asyncio.create_subprocess_exec(
                self._executable,
                "-I",
                "-c",
                code,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            msg = f"Unable to start Python interpreter: {exc}"
            raise RuntimeUnavailableError(msg) from exc

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), effective_ms / 1000)
        except asyncio.TimeoutError:
            await _kill(process)
            return ExecutionResult.failed(f"Execution timeout after {effective_ms} ms")
        except asyncio.CancelledError:
            await _kill(process)
            raise

        if process.returncode != 0:
            lines = stderr.decode("utf-8", errors="replace").strip().splitlines()
            error = lines[-1] if lines else f"Process exited with status {process.returncode}"
            return ExecutionResult.failed(error)
        return ExecutionResult.ok(stdout.decode("utf-8", errors="replace"))

    async def tokenize(self, code: str) -> list[Token] | None:
        self._require_ready()
        return tokenize_code(code)

    async def compare_by_tokens(
        self,
        user_answer: str,
        expected_answer: str,
        accepted_solutions: Sequence[str] = (),
    ) -> TokenCompareResult:
        """Compare token streams, trying the expected answer before alternatives."""

        user_tokens = await self.tokenize(user_answer)
        if user_tokens is None:
            return TokenCompareResult(match=False)

        if await self.tokenize(expected_answer) == user_tokens:
            return TokenCompareResult(match=True)
        for solution in accepted_solutions:
            if await self.tokenize(solution) == user_tokens:
                return TokenCompareResult(match=True, matched_alternative=solution)
        return TokenCompareResult(match=False)

    async def compare_by_ast(
        self,
        user_answer: str,
        expected_answer: str,
        accepted_solutions: Sequence[str] = (),
        options: AstCompareOptions | None = None,
    ) -> AstCompareResult:
        """Compare canonical syntax trees.

        A submission that does not parse is a checked mismatch, not an
        infrastructure failure.
        """

        self._require_ready()
        options = options or AstCompareOptions()

        user_tree = normalize_ast(user_answer, options)
        if user_tree is None:
            return AstCompareResult(match=False, infra_available=True)

        if normalize_ast(expected_answer, options) == user_tree:
            return AstCompareResult(match=True, infra_available=True)
        for solution in accepted_solutions:
            if normalize_ast(solution, options) == user_tree:
                return AstCompareResult(
                    match=True, matched_alternative=solution, infra_available=True
                )
        return AstCompareResult(match=False, infra_available=True)

    def terminate(self) -> None:
        self._ready = False

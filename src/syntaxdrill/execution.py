"""Execution-based verification of predicted output and written code."""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass

from .errors import ExecutionError, ExecutionTimeout, RuntimeUnavailableError
from .interface import ExecutionResult, LanguageRuntime
from .matching import normalize_predict_output

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 5000
DEFAULT_VERIFICATION_TEMPLATE = "print({{answer}})"

# Failure messages that point at the sandbox instead of the executed code.
INFRA_ERROR_PATTERNS = (
    "Runtime unavailable",
    "Worker execution error",
    "Worker not ready",
    "Module not found",
    "NetworkError",
    "Failed to fetch",
)

_ANSWER_SLOT = re.compile(r"\{\{\s*answer\s*\}\}")


def normalize_output(text: str | None) -> str:
    return normalize_predict_output(text or "")


def is_timeout_error(error: str | None) -> bool:
    return bool(error) and error.startswith("Execution timeout")


def is_infra_error(error: str | None) -> bool:
    """Return ``True`` when ``error`` came from the sandbox, not the user's code."""

    if not error:
        return False
    return is_timeout_error(error) or any(pattern in error for pattern in INFRA_ERROR_PATTERNS)


def _consume_result(task: asyncio.Future[ExecutionResult]) -> None:
    if not task.cancelled():
        task.exception()


async def execute_code(
    runtime: LanguageRuntime, code: str, timeout_ms: int = DEFAULT_TIMEOUT_MS
) -> ExecutionResult:
    """Run ``code`` and return its result within ``timeout_ms``.

    The call never blocks past the timeout: if the runtime has not answered,
    its task is cancelled, whatever it eventually produces is discarded, and a
    failed result reading ``"Execution timeout after N ms"`` is returned.
    Runtime exceptions are folded into a failed result as well.
    """

    task = asyncio.ensure_future(runtime.execute(code, timeout_ms=timeout_ms))
    task.add_done_callback(_consume_result)
    done, _ = await asyncio.wait({task}, timeout=timeout_ms / 1000)
    if not done:
        task.cancel()
        logger.info("Execution exceeded %d ms and was cancelled", timeout_ms)
        return ExecutionResult.failed(f"Execution timeout after {timeout_ms} ms")

    try:
        return task.result()
    except RuntimeUnavailableError as exc:
        return ExecutionResult.failed(f"Runtime unavailable: {exc}")
    except Exception as exc:  # noqa: BLE001 - converted to a failed result
        logger.warning("Runtime raised during execution: %s", exc)
        return ExecutionResult.failed(f"Worker execution error: {exc}")


def _raise_for_failure(result: ExecutionResult) -> str:
    if result.success:
        return result.output or ""
    error = result.error or "Execution failed"
    if is_timeout_error(error):
        raise ExecutionTimeout(error)
    raise ExecutionError(error, infra=is_infra_error(error))


def fill_verification_template(template: str, answer: str) -> str:
    """Substitute ``answer`` into every ``{{answer}}`` slot of ``template``."""

    return _ANSWER_SLOT.sub(lambda _match: answer, template)


async def verify_predict_answer(
    runtime: LanguageRuntime,
    code: str,
    user_answer: str,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
) -> bool:
    """Run the exercise ``code`` and compare its output with the prediction.

    Raises:
        ExecutionTimeout: If the code did not finish within ``timeout_ms``.
        ExecutionError: If the code failed; ``infra`` tells sandbox failures
            apart from errors raised by the code.
    """

    output = _raise_for_failure(await execute_code(runtime, code, timeout_ms))
    return normalize_output(output) == normalize_output(user_answer)


async def verify_write_answer(
    runtime: LanguageRuntime,
    user_answer: str,
    expected_output: str,
    verification_template: str = DEFAULT_VERIFICATION_TEMPLATE,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
) -> bool:
    """Run the learner's code inside ``verification_template`` and check its output.

    Raises:
        ExecutionTimeout: If the wrapped code did not finish in time.
        ExecutionError: If the wrapped code failed.
    """

    code = fill_verification_template(verification_template, user_answer)
    output = _raise_for_failure(await execute_code(runtime, code, timeout_ms))
    return normalize_output(output) == normalize_output(expected_output)


@dataclass(frozen=True)
class ScriptVerification:
    """Outcome of :func:`verify_with_script`."""

    passed: bool
    infra_available: bool
    error: str | None = None


async def verify_with_script(
    runtime: LanguageRuntime,
    user_code: str,
    script: str,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
) -> ScriptVerification:
    """Run ``user_code`` followed by an assertion ``script``.

    The answer passes when the combined program exits cleanly. A failing
    assertion or an exception raised by the learner's code is a checked
    failure; timeouts and sandbox failures report ``infra_available=False``.
    """

    result = await execute_code(runtime, f"{user_code}\n\n{script}", timeout_ms)
    if result.success:
        return ScriptVerification(passed=True, infra_available=True)
    if is_infra_error(result.error):
        return ScriptVerification(passed=False, infra_available=False, error=result.error)
    return ScriptVerification(passed=False, infra_available=True, error=result.error)

"""Syntax-tree comparison delegated to a language runtime."""

from __future__ import annotations

import logging
from typing import Sequence

from .interface import AstCompareOptions, AstCompareResult, LanguageRuntime

logger = logging.getLogger(__name__)


async def compare_by_ast(
    runtime: LanguageRuntime,
    user_answer: str,
    expected_answer: str,
    accepted_solutions: Sequence[str] = (),
    options: AstCompareOptions | None = None,
) -> AstCompareResult:
    """Compare canonical syntax trees of the user and expected answers.

    Args:
        runtime: Runtime that parses and canonicalizes the code.
        user_answer: Code written by the learner.
        expected_answer: Canonical solution.
        accepted_solutions: Alternatives tried after ``expected_answer``.
        options: Normalizations applied before comparison.

    Returns:
        The runtime's verdict. If the runtime raises, the result has
        ``infra_available=False`` and carries the error message; callers must
        then fall back instead of treating it as a mismatch.
    """

    options = options or AstCompareOptions()
    try:
        return await runtime.compare_by_ast(
            user_answer, expected_answer, accepted_solutions, options
        )
    except Exception as exc:  # noqa: BLE001 - reported as unavailable infrastructure
        logger.warning("AST comparison unavailable in %s runtime: %s", runtime.language, exc)
        return AstCompareResult(match=False, infra_available=False, error=str(exc))

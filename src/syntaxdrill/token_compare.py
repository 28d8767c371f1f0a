"""Token-stream comparison delegated to a language runtime."""

from __future__ import annotations

import logging
from typing import Sequence

from .interface import LanguageRuntime, TokenCompareResult

logger = logging.getLogger(__name__)


async def compare_by_tokens(
    runtime: LanguageRuntime,
    user_answer: str,
    expected_answer: str,
    accepted_solutions: Sequence[str] = (),
) -> TokenCompareResult:
    """Compare ``user_answer`` with the expected answer token by token.

    Whitespace, comments, and newline tokens are ignored by the runtime, so
    ``x=1`` and ``x = 1  # set`` match. Spelling differences that survive
    tokenizing still count: ``items[:3]`` and ``items[0:3]`` do not match.

    A runtime that fails while tokenizing is reported as a mismatch rather
    than raised, because this strategy has no notion of being unavailable.
    """

    try:
        return await runtime.compare_by_tokens(user_answer, expected_answer, accepted_solutions)
    except Exception as exc:  # noqa: BLE001 - runtime failures resolve as no match
        logger.warning("Token comparison failed in %s runtime: %s", runtime.language, exc)
        return TokenCompareResult(match=False)

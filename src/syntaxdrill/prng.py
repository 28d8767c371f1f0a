"""Seeded pseudo-random source used by every generator."""

from __future__ import annotations

import math
import random
from typing import Sequence, TypeVar

T = TypeVar("T")


class SeededRandom:
    """Deterministic random primitives derived from a string seed.

    ``random.Random`` hashes string seeds with SHA-512, so a given seed yields
    the same stream on every platform. All helpers draw from :meth:`next` so
    the sequence stays identical however the primitives are interleaved.

    Args:
        seed: Opaque seed, typically produced by :func:`syntaxdrill.seed.create_seed`.
    """

    def __init__(self, seed: str) -> None:
        self._seed = seed
        self._random = random.Random(seed)

    @property
    def seed(self) -> str:
        return self._seed

    def next(self) -> float:
        """Return a float in ``[0, 1)``."""

        return self._random.random()

    def int(self, minimum: int, maximum: int) -> int:
        """Return an integer in ``[minimum, maximum]`` inclusive.

        Raises:
            ValueError: If ``minimum`` is greater than ``maximum``.
        """

        if minimum > maximum:
            msg = f"minimum {minimum} exceeds maximum {maximum}"
            raise ValueError(msg)
        if minimum == maximum:
            return minimum
        return math.floor(self.next() * (maximum - minimum + 1)) + minimum

    def pick(self, items: Sequence[T]) -> T:
        """Return a uniformly chosen element of ``items``.

        Raises:
            ValueError: If ``items`` is empty.
        """

        if not items:
            raise ValueError("Cannot pick from empty collection")
        return items[math.floor(self.next() * len(items))]

    def shuffle(self, items: Sequence[T]) -> list[T]:
        """Return a shuffled copy of ``items`` (Fisher-Yates)."""

        result = list(items)
        for i in range(len(result) - 1, 0, -1):
            j = math.floor(self.next() * (i + 1))
            result[i], result[j] = result[j], result[i]
        return result

    def chance(self, probability: float) -> bool:
        """Return ``True`` with the given probability."""

        return self.next() < probability

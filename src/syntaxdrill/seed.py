"""Deterministic seed derivation for parameterized exercises."""

from __future__ import annotations

import hashlib
from datetime import date, datetime, timezone


def hash_string(text: str) -> str:
    """Return the SHA-256 hex digest (64 characters) of ``text``."""

    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def calendar_day(when: date | datetime) -> date:
    """Reduce ``when`` to the calendar day used for seeding.

    Aware datetimes are converted to UTC first; naive datetimes are taken at
    face value.
    """

    if isinstance(when, datetime):
        if when.tzinfo is not None:
            when = when.astimezone(timezone.utc)
        return when.date()
    return when


def create_seed(user_id: str, exercise_slug: str, when: date | datetime) -> str:
    """Create the seed for ``exercise_slug`` as seen by ``user_id`` on a given day.

    The time of day never affects the result, so an exercise renders the same
    way for a learner across reloads on one day and changes on the next.

    Args:
        user_id: Learner identifier.
        exercise_slug: Exercise identifier.
        when: Due date or instant; only its calendar day is used.

    Returns:
        A 64-character lowercase hexadecimal seed.
    """

    day = calendar_day(when).isoformat()
    return hash_string(f"{user_id}:{exercise_slug}:{day}")

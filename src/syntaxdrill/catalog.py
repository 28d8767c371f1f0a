"""Load and validate authored exercise files.

Exercise files are YAML documents with a file-level ``language`` and
``category`` and a non-empty ``exercises`` list::

    language: python
    category: strings
    exercises:
      - slug: string-slice-dynamic
        title: Slice a word
        type: predict
        generator: string-slice
        prompt: "What does this print?"
        code: "{{code}}"
        expected_answer: "{{result}}"
        hints: ["Slices stop before the end index."]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, Iterable

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .errors import ConfigurationError, SyntaxDrillError
from .interface import Exercise
from .registry import GeneratorRegistry, default_generator_registry
from .render import ANSWER_PLACEHOLDER, PLACEHOLDER_PATTERN, render_exercise

logger = logging.getLogger(__name__)

KEBAB_CASE_PATTERN = r"^[a-z0-9]+(-[a-z0-9]+)*$"
PROBE_USER_ID = "test-user"


class CatalogExercise(Exercise):
    """Exercise as authored in a catalog file, with authoring rules enforced."""

    slug: str = Field(..., pattern=KEBAB_CASE_PATTERN)
    title: str = Field(..., min_length=1)
    prompt: str = Field(..., min_length=1)
    expected_answer: str = Field(..., min_length=1)
    hints: tuple[str, ...] = Field(..., min_length=1)


class ExerciseFile(BaseModel):
    """One YAML exercise file."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    language: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    exercises: tuple[CatalogExercise, ...] = Field(..., min_length=1)

    @model_validator(mode="before")
    @classmethod
    def inherit_language(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        language = data.get("language")
        exercises = data.get("exercises")
        if language and isinstance(exercises, list):
            data = dict(data)
            data["exercises"] = [
                {"language": language, **item} if isinstance(item, dict) else item
                for item in exercises
            ]
        return data

    @model_validator(mode="after")
    def validate_unique_slugs(self) -> "ExerciseFile":
        seen: set[str] = set()
        for exercise in self.exercises:
            if exercise.slug in seen:
                raise ValueError(f'duplicate slug "{exercise.slug}" in file')
            seen.add(exercise.slug)
        return self


def load_exercise_file(path: Path) -> ExerciseFile:
    """Parse and validate the exercise file at ``path``.

    Raises:
        ConfigurationError: If the file is unreadable, is not YAML, or breaks
            an authoring rule.
    """

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Unable to read exercise file {path}: {exc}") from exc

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"{path.name}: invalid YAML") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(f"{path.name}: exercise file must define a mapping")

    try:
        return ExerciseFile.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"{path.name}: {exc}") from exc


def load_catalog(directory: Path) -> list[ExerciseFile]:
    """Load every ``*.yaml`` exercise file in ``directory``, sorted by name."""

    files = sorted(directory.glob("*.yaml"))
    logger.debug("Loading %d exercise files from %s", len(files), directory)
    return [load_exercise_file(path) for path in files]


@dataclass(frozen=True)
class CatalogIssue:
    slug: str
    message: str


def _unresolved_fields(exercise: Exercise) -> list[str]:
    fields = {
        "prompt": exercise.prompt,
        "expected_answer": exercise.expected_answer,
        "code": exercise.code,
        "template": exercise.template,
    }
    for index, solution in enumerate(exercise.accepted_solutions):
        fields[f"accepted_solutions[{index}]"] = solution
    unresolved = [name for name, value in fields.items() if value and "{{" in value]

    if exercise.verification_template:
        leftovers = {
            match.group(1) for match in PLACEHOLDER_PATTERN.finditer(exercise.verification_template)
        }
        if leftovers - {ANSWER_PLACEHOLDER}:
            unresolved.append("verification_template")
    return unresolved


def validate_dynamic_exercises(
    exercises: Iterable[Exercise],
    registry: GeneratorRegistry | None = None,
    *,
    user_id: str = PROBE_USER_ID,
    when: date | None = None,
) -> list[CatalogIssue]:
    """Render each generated exercise once and report what went wrong.

    Args:
        exercises: Exercises to check; static ones are skipped.
        registry: Generator lookup, defaulting to the bundled generators.
        user_id: Learner identifier used for the probe render.
        when: Probe date, defaulting to today.

    Returns:
        One issue per unknown generator, failed render, or field that still
        contains a placeholder. An empty list means every exercise rendered.
    """

    registry = registry if registry is not None else default_generator_registry()
    when = when or date.today()
    issues: list[CatalogIssue] = []

    for exercise in exercises:
        if exercise.generator is None:
            continue
        if not registry.has(exercise.generator):
            issues.append(
                CatalogIssue(exercise.slug, f"Unknown generator '{exercise.generator}'")
            )
            continue
        try:
            rendered = render_exercise(exercise, user_id, when, registry)
        except SyntaxDrillError as exc:
            issues.append(CatalogIssue(exercise.slug, f"Render error: {exc}"))
            continue
        for field in _unresolved_fields(rendered):
            issues.append(CatalogIssue(exercise.slug, f"Unrendered placeholders in {field}"))
    return issues

"""Tests for exercise file loading and dynamic exercise validation."""

from __future__ import annotations

import copy
from datetime import date
from pathlib import Path

import pytest
import yaml

from conftest import EXERCISE_FILE
from syntaxdrill.catalog import (
    ExerciseFile,
    load_catalog,
    load_exercise_file,
    validate_dynamic_exercises,
)
from syntaxdrill.errors import ConfigurationError
from syntaxdrill.interface import Exercise, ExerciseKind


def _write(tmp_path: Path, data: dict, name: str = "exercises.yaml") -> Path:
    path = tmp_path / name
    path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    return path


def test_load_exercise_file(exercise_file: Path) -> None:
    loaded = load_exercise_file(exercise_file)

    assert loaded.category == "strings"
    assert [exercise.slug for exercise in loaded.exercises] == [
        "string-slice-dynamic",
        "first-three",
        "upper-blank",
    ]
    assert loaded.exercises[0].kind is ExerciseKind.PREDICT
    assert loaded.exercises[2].kind is ExerciseKind.FILL_IN
    assert all(exercise.language == "python" for exercise in loaded.exercises)


@pytest.mark.parametrize(
    ("field", "value"),
    [
        ("slug", "Not_Kebab"),
        ("difficulty", 4),
        ("hints", []),
        ("title", ""),
        ("expected_answer", ""),
    ],
)
def test_authoring_rules_are_enforced(tmp_path: Path, field: str, value: object) -> None:
    data = copy.deepcopy(EXERCISE_FILE)
    data["exercises"][1][field] = value

    with pytest.raises(ConfigurationError):
        load_exercise_file(_write(tmp_path, data))


def test_duplicate_slugs_are_rejected(tmp_path: Path) -> None:
    data = copy.deepcopy(EXERCISE_FILE)
    data["exercises"][2]["slug"] = "first-three"

    with pytest.raises(ConfigurationError) as excinfo:
        load_exercise_file(_write(tmp_path, data))

    assert "duplicate slug" in str(excinfo.value)


@pytest.mark.parametrize("missing", ["language", "category", "exercises"])
def test_file_level_fields_are_required(tmp_path: Path, missing: str) -> None:
    data = copy.deepcopy(EXERCISE_FILE)
    del data[missing]

    with pytest.raises(ConfigurationError):
        load_exercise_file(_write(tmp_path, data))


def test_invalid_yaml_is_a_configuration_error(tmp_path: Path) -> None:
    path = tmp_path / "broken.yaml"
    path.write_text("exercises: [", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_exercise_file(path)


def test_load_catalog_reads_every_yaml_file(tmp_path: Path) -> None:
    _write(tmp_path, EXERCISE_FILE, "b.yaml")
    _write(tmp_path, EXERCISE_FILE, "a.yaml")
    (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")

    files = load_catalog(tmp_path)

    assert len(files) == 2
    assert all(isinstance(item, ExerciseFile) for item in files)


def test_validate_dynamic_exercises_accepts_catalog(exercise_file: Path) -> None:
    loaded = load_exercise_file(exercise_file)

    assert validate_dynamic_exercises(loaded.exercises, when=date(2026, 1, 15)) == []


def test_validate_dynamic_exercises_reports_problems() -> None:
    exercises = [
        Exercise(slug="unknown", generator="nope", prompt="p", expected_answer="a"),
        Exercise(slug="bad-key", generator="slice-bounds", prompt="{{middle}}", expected_answer="a"),
        Exercise(
            slug="bad-verification",
            generator="slice-bounds",
            prompt="{{start}}",
            expected_answer="{{end}}",
            verification_template="assert {{answer}} == {{start}}",
        ),
    ]

    issues = validate_dynamic_exercises(exercises, when=date(2026, 1, 15))

    assert [(issue.slug, issue.message.split(":")[0]) for issue in issues] == [
        ("unknown", "Unknown generator 'nope'"),
        ("bad-key", "Render error"),
    ]

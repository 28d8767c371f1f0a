"""Tests for exercise rendering."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Mapping

import pytest

from syntaxdrill.errors import (
    ConfigurationError,
    GenerationInconsistencyError,
    TemplateError,
    UnknownGeneratorError,
)
from syntaxdrill.interface import Exercise, ExerciseKind
from syntaxdrill.registry import GeneratorRegistry, default_generator_registry
from syntaxdrill.render import format_value, render_exercise, render_exercises, render_template
from syntaxdrill.seed import create_seed


class _FixedGenerator:
    def __init__(self, name: str, params: dict[str, Any], valid: bool = True) -> None:
        self.name = name
        self._params = params
        self._valid = valid

    def generate(self, seed: str) -> dict[str, Any]:
        return dict(self._params)

    def validate(self, params: Mapping[str, Any]) -> bool:
        return self._valid


def _dynamic_slice_exercise() -> Exercise:
    return Exercise(
        slug="string-slice-dynamic",
        kind=ExerciseKind.PREDICT,
        generator="string-slice",
        prompt="What does this print? ({{ description }})",
        code="{{code}}",
        expected_answer="{{result}}",
        hints=("Slices stop before the end index.",),
    )


def test_static_exercise_renders_verbatim() -> None:
    exercise = Exercise(
        slug="static",
        prompt="Print {{not a placeholder}}",
        expected_answer="print('hi')",
        accepted_solutions=('print("hi")',),
    )

    rendered = render_exercise(exercise, "user-123", date(2026, 1, 15))

    assert rendered.prompt == exercise.prompt
    assert rendered.accepted_solutions == exercise.accepted_solutions
    assert rendered.generated_params is None
    assert rendered.seed is None


def test_dynamic_exercise_renders_from_seeded_params() -> None:
    exercise = _dynamic_slice_exercise()
    when = date(2026, 1, 15)

    rendered = render_exercise(exercise, "user-123", when)

    assert rendered.seed == create_seed("user-123", "string-slice-dynamic", when)
    params = rendered.generated_params
    assert params is not None
    assert default_generator_registry().get("string-slice").validate(params)
    assert rendered.code == params["code"]
    assert rendered.expected_answer == params["result"]
    assert f"({params['description']})" in rendered.prompt
    for text in (rendered.prompt, rendered.code, rendered.expected_answer):
        assert "{{" not in text


def test_rendering_is_stable_within_a_day() -> None:
    exercise = _dynamic_slice_exercise()

    morning = render_exercise(exercise, "user-123", datetime(2026, 1, 15, 7, 0))
    night = render_exercise(exercise, "user-123", datetime(2026, 1, 15, 22, 0))

    assert morning == night


def test_rendering_varies_across_learners() -> None:
    exercise = _dynamic_slice_exercise()
    when = date(2026, 1, 15)

    rendered = {render_exercise(exercise, f"user-{i}", when).code for i in range(20)}

    assert len(rendered) > 1


def test_unknown_generator_raises() -> None:
    exercise = Exercise(slug="x", generator="nope", prompt="p", expected_answer="a")

    with pytest.raises(UnknownGeneratorError):
        render_exercise(exercise, "u", date(2026, 1, 15))


def test_unknown_placeholder_raises_template_error() -> None:
    registry = GeneratorRegistry([_FixedGenerator("fixed", {"a": 1})])
    exercise = Exercise(slug="x", generator="fixed", prompt="{{b}}", expected_answer="{{a}}")

    with pytest.raises(TemplateError) as excinfo:
        render_exercise(exercise, "u", date(2026, 1, 15), registry)

    assert "'x'" in str(excinfo.value)
    assert isinstance(excinfo.value, ConfigurationError)


def test_inconsistent_generator_raises() -> None:
    registry = GeneratorRegistry([_FixedGenerator("broken", {"a": 1}, valid=False)])
    exercise = Exercise(slug="x", generator="broken", prompt="{{a}}", expected_answer="{{a}}")

    with pytest.raises(GenerationInconsistencyError):
        render_exercise(exercise, "u", date(2026, 1, 15), registry)


def test_all_template_fields_are_rendered() -> None:
    registry = GeneratorRegistry(
        [_FixedGenerator("fixed", {"n": 3, "flag": True, "items": [1, "a"]})]
    )
    exercise = Exercise(
        slug="all-fields",
        generator="fixed",
        prompt="n={{n}}",
        expected_answer="{{ flag }}",
        accepted_solutions=("{{items}}",),
        hints=("Try {{n}}",),
        code="print({{items}})",
        template="x = ___ + {{n}}",
        verification_template="assert {{answer}} == {{n}}",
    )

    rendered = render_exercise(exercise, "u", date(2026, 1, 15), registry)

    assert rendered.prompt == "n=3"
    assert rendered.expected_answer == "True"
    assert rendered.accepted_solutions == ("[1, 'a']",)
    assert rendered.hints == ("Try 3",)
    assert rendered.code == "print([1, 'a'])"
    assert rendered.template == "x = ___ + 3"
    assert rendered.verification_template == "assert {{answer}} == 3"


def test_variant_overrides_apply_before_rendering() -> None:
    registry = GeneratorRegistry([_FixedGenerator("fixed", {"variant": "loud", "word": "hi"})])
    exercise = Exercise.model_validate(
        {
            "slug": "variants",
            "generator": "fixed",
            "prompt": "Say {{word}}",
            "expected_answer": "{{word}}",
            "variants": {"loud": {"prompt": "SHOUT {{word}}", "expected_answer": "HI"}},
        }
    )

    rendered = render_exercise(exercise, "u", date(2026, 1, 15), registry)

    assert rendered.prompt == "SHOUT hi"
    assert rendered.expected_answer == "HI"
    assert rendered.variants == {}


def test_export_uses_underscore_aliases() -> None:
    rendered = render_exercise(_dynamic_slice_exercise(), "user-123", date(2026, 1, 15))

    exported = rendered.model_dump(by_alias=True)

    assert exported["_seed"] == rendered.seed
    assert exported["_generatedParams"] == rendered.generated_params


def test_render_exercises_shares_registry() -> None:
    exercises = [_dynamic_slice_exercise(), Exercise(slug="s", prompt="p", expected_answer="a")]

    rendered = render_exercises(exercises, "user-123", date(2026, 1, 15))

    assert [item.slug for item in rendered] == ["string-slice-dynamic", "s"]


def test_format_value_uses_python_literals() -> None:
    assert format_value(True) == "True"
    assert format_value(False) == "False"
    assert format_value([1, 2, 3]) == "[1, 2, 3]"
    assert format_value(["a", "b"]) == "['a', 'b']"
    assert format_value(2.5) == "2.5"


def test_render_template_tolerates_inner_whitespace() -> None:
    assert render_template("{{ a }} and {{b}}", {"a": 1, "b": "x"}) == "1 and x"

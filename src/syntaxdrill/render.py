"""Render exercise templates from seeded generator parameters."""

from __future__ import annotations

import logging
import re
from datetime import date, datetime
from typing import Any, Iterable, Mapping

from .errors import GenerationInconsistencyError, TemplateError
from .interface import Exercise, GeneratorParams, ParamValue, RenderedExercise
from .registry import GeneratorRegistry, default_generator_registry
from .seed import create_seed

logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*([A-Za-z_][A-Za-z0-9_]*)\s*\}\}")
ANSWER_PLACEHOLDER = "answer"


def format_value(value: ParamValue) -> str:
    """Render a parameter value the way it reads in Python source."""

    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, list):
        return repr(value)
    return str(value)


def render_template(
    template: str,
    params: Mapping[str, ParamValue],
    *,
    preserve: Iterable[str] = (),
) -> str:
    """Substitute every ``{{key}}`` placeholder in ``template``.

    Args:
        template: Text containing ``{{key}}`` placeholders; whitespace inside
            the braces is tolerated.
        params: Values available for substitution.
        preserve: Placeholder keys left untouched when ``params`` lacks them,
            such as the ``answer`` slot of a verification template.

    Returns:
        The rendered text.

    Raises:
        TemplateError: If a placeholder names a key that is neither in
            ``params`` nor in ``preserve``.
    """

    preserved = frozenset(preserve)

    def substitute(match: re.Match[str]) -> str:
        key = match.group(1)
        if key in params:
            return format_value(params[key])
        if key in preserved:
            return match.group(0)
        msg = f"Template references unknown parameter '{key}'"
        raise TemplateError(msg)

    return PLACEHOLDER_PATTERN.sub(substitute, template)


def _apply_variant(fields: dict[str, Any], exercise: Exercise, params: GeneratorParams) -> None:
    variant = params.get("variant")
    if not isinstance(variant, str) or variant not in exercise.variants:
        return
    overrides = exercise.variants[variant].model_dump(exclude_none=True)
    logger.debug("Applying variant '%s' to %s", variant, exercise.slug)
    fields.update(overrides)


def render_exercise(
    exercise: Exercise,
    user_id: str,
    when: date | datetime,
    registry: GeneratorRegistry | None = None,
) -> RenderedExercise:
    """Resolve the templates of ``exercise`` for one learner on one day.

    Static exercises are returned verbatim without a seed. Generated
    exercises have their prompt, expected answer, accepted solutions, hints,
    code, template, and verification template rendered, with the generated
    parameters and seed attached. Variants are consumed during rendering and
    are not carried on the result.

    Args:
        exercise: Authored exercise.
        user_id: Learner identifier used for seeding.
        when: Due date or instant; only the calendar day matters.
        registry: Generator lookup, defaulting to the bundled generators.

    Returns:
        The rendered exercise.

    Raises:
        UnknownGeneratorError: If the generator is not registered.
        TemplateError: If a template references an unknown parameter.
        GenerationInconsistencyError: If the generator rejects its own output.
    """

    if exercise.generator is None:
        return RenderedExercise.model_validate(exercise.model_dump())

    registry = registry if registry is not None else default_generator_registry()
    generator = registry.get(exercise.generator)
    seed = create_seed(user_id, exercise.slug, when)
    params = generator.generate(seed)
    if not generator.validate(params):
        msg = f"Generator '{exercise.generator}' produced invalid parameters for seed {seed}"
        raise GenerationInconsistencyError(msg)

    fields = exercise.model_dump()
    _apply_variant(fields, exercise, params)

    try:
        fields["prompt"] = render_template(fields["prompt"], params)
        fields["expected_answer"] = render_template(fields["expected_answer"], params)
        fields["accepted_solutions"] = tuple(
            render_template(solution, params) for solution in fields["accepted_solutions"]
        )
        fields["hints"] = tuple(render_template(hint, params) for hint in fields["hints"])
        for name in ("code", "template"):
            if fields[name] is not None:
                fields[name] = render_template(fields[name], params)
        if fields["verification_template"] is not None:
            fields["verification_template"] = render_template(
                fields["verification_template"], params, preserve=(ANSWER_PLACEHOLDER,)
            )
    except TemplateError as exc:
        msg = f"Exercise '{exercise.slug}': {exc}"
        raise TemplateError(msg) from exc

    fields["variants"] = {}
    fields["generated_params"] = dict(params)
    fields["seed"] = seed
    logger.debug("Rendered %s with generator %s", exercise.slug, exercise.generator)
    return RenderedExercise.model_validate(fields)


def render_exercises(
    exercises: Iterable[Exercise],
    user_id: str,
    when: date | datetime,
    registry: GeneratorRegistry | None = None,
) -> list[RenderedExercise]:
    """Render a batch of exercises for one learner, sharing one registry."""

    registry = registry if registry is not None else default_generator_registry()
    return [render_exercise(exercise, user_id, when, registry) for exercise in exercises]

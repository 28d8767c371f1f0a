"""Command-line interface for rendering, grading, and validating exercises."""

import asyncio
import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Any, Sequence

import typer
import yaml

from .catalog import ExerciseFile, load_exercise_file, validate_dynamic_exercises
from .config import EngineSettings, load_settings, settings_template
from .errors import ConfigurationError, SyntaxDrillError
from .grading import GradingPipeline
from .interface import Exercise
from .registry import RuntimeRegistry, default_generator_registry
from .render import render_exercise
from .runtime import PythonRuntime
from .seed import hash_string

logger = logging.getLogger(__name__)

app = typer.Typer(help="Render and grade syntax-practice exercises from the terminal.")

_EXISTING_FILE = dict(exists=True, dir_okay=False, file_okay=True, readable=True)


@app.callback()
def _configure(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load_file(path: Path) -> ExerciseFile:
    """Load an exercise file, reporting problems as CLI parameter errors."""

    try:
        return load_exercise_file(path)
    except ConfigurationError as exc:
        raise typer.BadParameter(str(exc), param_hint="EXERCISE_FILE") from exc


def _load_settings(config_path: Path | None) -> EngineSettings:
    try:
        return load_settings(config_path)
    except ConfigurationError as exc:
        raise typer.BadParameter(str(exc), param_hint="--config") from exc


def _find_exercise(exercise_file: ExerciseFile, slug: str) -> Exercise:
    for exercise in exercise_file.exercises:
        if exercise.slug == slug:
            return exercise
    raise typer.BadParameter(f"No exercise with slug '{slug}'", param_hint="--slug")


def _parse_day(value: str | None) -> date:
    if value is None:
        return date.today()
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise typer.BadParameter("Dates must use YYYY-MM-DD", param_hint="--date") from exc


def _echo_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2))


@app.command("render")
def render(
    exercise_file: Path = typer.Argument(..., help="YAML exercise file.", **_EXISTING_FILE),
    slug: str = typer.Option(..., "--slug", "-s", help="Exercise to render."),
    user: str = typer.Option("cli-user", "--user", "-u", help="Learner identifier."),
    day: str | None = typer.Option(None, "--date", "-d", help="Due date (YYYY-MM-DD)."),
) -> None:
    """Render one exercise for a learner and day as JSON."""

    exercise = _find_exercise(_load_file(exercise_file), slug)
    try:
        rendered = render_exercise(exercise, user, _parse_day(day))
    except SyntaxDrillError as exc:
        raise typer.BadParameter(str(exc), param_hint="--slug") from exc
    _echo_json(rendered.model_dump(mode="json", by_alias=True, exclude={"variants"}))


@app.command("grade")
def grade(
    exercise_file: Path = typer.Argument(..., help="YAML exercise file.", **_EXISTING_FILE),
    slug: str = typer.Option(..., "--slug", "-s", help="Exercise to grade."),
    answer: str | None = typer.Option(None, "--answer", "-a", help="Submitted answer."),
    answer_file: Path | None = typer.Option(
        None, "--answer-file", help="Read the submitted answer from a file.", **_EXISTING_FILE
    ),
    user: str = typer.Option("cli-user", "--user", "-u", help="Learner identifier."),
    day: str | None = typer.Option(None, "--date", "-d", help="Due date (YYYY-MM-DD)."),
    config: Path | None = typer.Option(
        None, "--config", "-c", help="YAML settings file.", **_EXISTING_FILE
    ),
    no_runtime: bool = typer.Option(
        False, "--no-runtime", help="Grade without the Python runtime (exact matching only)."
    ),
) -> None:
    """Grade an answer to one exercise and print the verdict as JSON."""

    if (answer is None) == (answer_file is None):
        raise typer.BadParameter(
            "Provide exactly one of --answer or --answer-file.",
            param_hint="--answer/--answer-file",
        )
    submitted = answer if answer is not None else answer_file.read_text(encoding="utf-8")

    settings = _load_settings(config)
    exercise = _find_exercise(_load_file(exercise_file), slug)
    try:
        rendered = render_exercise(exercise, user, _parse_day(day))
    except SyntaxDrillError as exc:
        raise typer.BadParameter(str(exc), param_hint="--slug") from exc

    runtimes = RuntimeRegistry()
    if not no_runtime:
        runtimes.register(PythonRuntime(default_timeout_ms=settings.execution_timeout_ms))
    pipeline = GradingPipeline(runtimes, settings)
    try:
        report = asyncio.run(pipeline.grade(submitted, rendered))
    finally:
        runtimes.clear()

    _echo_json(
        {
            **report.result.model_dump(mode="json"),
            "fallback_used": report.outcome.fallback_used,
            "fallback_reason": report.outcome.fallback_reason,
        }
    )


@app.command("validate")
def validate(
    exercise_files: list[Path] = typer.Argument(
        ..., help="YAML exercise files to check.", **_EXISTING_FILE
    ),
) -> None:
    """Validate exercise files and probe-render every generated exercise."""

    registry = default_generator_registry()
    failures = 0
    for path in exercise_files:
        try:
            exercise_file = load_exercise_file(path)
        except ConfigurationError as exc:
            typer.echo(f"[{path.name}] {exc}", err=True)
            failures += 1
            continue
        issues = validate_dynamic_exercises(exercise_file.exercises, registry)
        for issue in issues:
            typer.echo(f"[{path.name}] {issue.slug}: {issue.message}", err=True)
        failures += len(issues)
        typer.echo(f"[{path.name}] {len(exercise_file.exercises)} exercises checked")

    if failures:
        typer.echo(f"Found {failures} problem(s)", err=True)
        raise typer.Exit(code=1)
    typer.echo("All exercises valid")


@app.command("check-generators")
def check_generators(
    seeds: int = typer.Option(
        50, "--seeds", "-n", min=1, help="Number of seeds tried per generator."
    ),
    name: list[str] | None = typer.Option(
        None, "--name", help="Only check these generators (repeatable)."
    ),
) -> None:
    """Confirm every generator accepts its own output across many seeds."""

    registry = default_generator_registry()
    names = name or list(registry.names())
    failures = 0
    for generator_name in names:
        try:
            generator = registry.get(generator_name)
        except ConfigurationError as exc:
            raise typer.BadParameter(str(exc), param_hint="--name") from exc
        seeds_tried = (hash_string(f"{generator_name}:{index}") for index in range(seeds))
        rejected = [
            seed for seed in seeds_tried if not generator.validate(generator.generate(seed))
        ]
        status = "ok" if not rejected else f"{len(rejected)} rejected"
        typer.echo(f"{generator_name}: {status}")
        failures += len(rejected)

    if failures:
        raise typer.Exit(code=1)


@app.command("write-config")
def write_config(
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="File path for the generated YAML template. Defaults to printing to stdout.",
        file_okay=True,
        dir_okay=False,
        writable=True,
        resolve_path=True,
    ),
) -> None:
    """Emit a YAML settings template with every default."""

    header_lines = [
        "# syntaxdrill settings generated by `syntaxdrill write-config`.",
        "# strategy_overrides maps an exercise kind to its strategy chain,",
        "# e.g. write: [ast, exact]",
        "",
    ]
    content = "\n".join(header_lines) + yaml.safe_dump(settings_template(), sort_keys=False)

    if output is None:
        typer.echo(content)
        return

    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(content, encoding="utf-8")
    except OSError as exc:  # pragma: no cover - filesystem failure
        raise typer.BadParameter(f"Unable to write settings file: {exc}") from exc
    typer.echo(f"Wrote settings template to {output}")


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point used by the console script defined in ``pyproject.toml``."""

    app(args=list(argv if argv is not None else sys.argv[1:]))

"""End-to-end tests for the Typer CLI."""

import json
from pathlib import Path

import yaml
from click.testing import Result
from typer.testing import CliRunner

from syntaxdrill.config import settings_template
from syntaxdrill.main import app


def _invoke(args: list[str]) -> Result:
    return CliRunner().invoke(app, args)


def _render(exercise_file: Path, slug: str) -> dict:
    result = _invoke(
        ["render", str(exercise_file), "--slug", slug, "--user", "learner", "--date", "2026-01-15"]
    )
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)


def test_render_dynamic_exercise_is_deterministic(exercise_file: Path) -> None:
    """Rendering twice for the same learner and day yields the same exercise."""

    first = _render(exercise_file, "string-slice-dynamic")
    second = _render(exercise_file, "string-slice-dynamic")

    assert first == second
    assert len(first["_seed"]) == 64
    assert first["expected_answer"] == first["_generatedParams"]["result"]
    assert "{{" not in first["prompt"]
    assert "variants" not in first


def test_render_static_exercise_has_no_seed(exercise_file: Path) -> None:
    rendered = _render(exercise_file, "first-three")

    assert rendered["expected_answer"] == "items[:3]"
    assert rendered["_seed"] is None


def test_render_rejects_unknown_slug_and_bad_date(exercise_file: Path) -> None:
    missing = _invoke(["render", str(exercise_file), "--slug", "missing"])
    bad_date = _invoke(["render", str(exercise_file), "--slug", "first-three", "-d", "01/15/2026"])

    assert missing.exit_code != 0
    assert "No exercise with slug" in missing.output
    assert bad_date.exit_code != 0


def test_grade_without_runtime_falls_back_to_exact(exercise_file: Path) -> None:
    result = _invoke(
        ["grade", str(exercise_file), "-s", "first-three", "-a", "items[0:3]", "--no-runtime"]
    )

    assert result.exit_code == 0, result.output
    verdict = json.loads(result.stdout)
    assert verdict["is_correct"] is True
    assert verdict["grading_method"] == "exact"
    assert verdict["matched_alternative"] == "items[0:3]"
    assert verdict["fallback_used"] is True
    assert verdict["fallback_reason"] == "runtime_unavailable"


def test_grade_with_runtime_uses_ast(exercise_file: Path) -> None:
    result = _invoke(["grade", str(exercise_file), "-s", "first-three", "-a", "items[ : 3 ]"])

    assert result.exit_code == 0, result.output
    verdict = json.loads(result.stdout)
    assert verdict["is_correct"] is True
    assert verdict["grading_method"] == "ast"
    assert verdict["used_target_construct"] is True
    assert verdict["fallback_used"] is False


def test_grade_predict_answer_from_file(exercise_file: Path, tmp_path: Path) -> None:
    rendered = _render(exercise_file, "string-slice-dynamic")
    answer_path = tmp_path / "answer.txt"
    answer_path.write_text(rendered["expected_answer"] + "\n", encoding="utf-8")

    result = _invoke(
        [
            "grade",
            str(exercise_file),
            "-s",
            "string-slice-dynamic",
            "-u",
            "learner",
            "-d",
            "2026-01-15",
            "--answer-file",
            str(answer_path),
        ]
    )

    assert result.exit_code == 0, result.output
    verdict = json.loads(result.stdout)
    assert verdict["is_correct"] is True
    assert verdict["grading_method"] == "execution"


def test_grade_requires_exactly_one_answer_source(exercise_file: Path, tmp_path: Path) -> None:
    answer_path = tmp_path / "answer.txt"
    answer_path.write_text("upper", encoding="utf-8")

    neither = _invoke(["grade", str(exercise_file), "-s", "upper-blank"])
    both = _invoke(
        [
            "grade",
            str(exercise_file),
            "-s",
            "upper-blank",
            "-a",
            "upper",
            "--answer-file",
            str(answer_path),
        ]
    )

    assert neither.exit_code != 0
    assert both.exit_code != 0
    assert "exactly one" in both.output


def test_grade_reports_invalid_settings(exercise_file: Path, tmp_path: Path) -> None:
    config = tmp_path / "settings.yaml"
    config.write_text("execution_timeout_ms: -1\n", encoding="utf-8")

    result = _invoke(
        ["grade", str(exercise_file), "-s", "upper-blank", "-a", "upper", "-c", str(config)]
    )

    assert result.exit_code != 0
    assert "Settings file is invalid" in result.output


def test_validate_accepts_good_file(exercise_file: Path) -> None:
    result = _invoke(["validate", str(exercise_file)])

    assert result.exit_code == 0, result.output
    assert "3 exercises checked" in result.stdout
    assert "All exercises valid" in result.stdout


def test_validate_reports_problems(exercise_file: Path, tmp_path: Path) -> None:
    broken = tmp_path / "broken.yaml"
    broken.write_text(
        yaml.safe_dump(
            {
                "language": "python",
                "category": "loops",
                "exercises": [
                    {
                        "slug": "mystery",
                        "title": "Mystery",
                        "type": "predict",
                        "generator": "does-not-exist",
                        "prompt": "p",
                        "expected_answer": "{{result}}",
                        "hints": ["h"],
                    }
                ],
            }
        ),
        encoding="utf-8",
    )

    result = _invoke(["validate", str(exercise_file), str(broken)])

    assert result.exit_code == 1
    assert "Unknown generator 'does-not-exist'" in result.output
    assert "Found 1 problem(s)" in result.output


def test_check_generators_reports_each_generator() -> None:
    result = _invoke(["check-generators", "-n", "5", "--name", "slice-bounds", "--name", "zip-lists"])

    assert result.exit_code == 0, result.output
    assert result.stdout.splitlines() == ["slice-bounds: ok", "zip-lists: ok"]


def test_check_generators_rejects_unknown_name() -> None:
    result = _invoke(["check-generators", "--name", "nope"])

    assert result.exit_code != 0


def test_write_config_command_generates_template(tmp_path: Path) -> None:
    """The write-config command should emit a loadable YAML template."""

    destination = tmp_path / "nested" / "settings.yaml"

    result = _invoke(["write-config", "--output", str(destination)])

    assert result.exit_code == 0, result.output
    assert destination.exists()
    content = destination.read_text(encoding="utf-8")
    assert content.startswith("# syntaxdrill settings")
    assert yaml.safe_load(content) == settings_template()


def test_write_config_prints_to_stdout() -> None:
    result = _invoke(["write-config"])

    assert result.exit_code == 0, result.output
    assert "execution_timeout_ms: 5000" in result.stdout


def test_top_level_help_lists_commands() -> None:
    result = _invoke(["--help"])

    assert result.exit_code == 0, result.stdout
    for command in ("render", "grade", "validate", "check-generators", "write-config"):
        assert command in result.stdout

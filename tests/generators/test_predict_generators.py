"""Run generated snippets and compare them with the answers generators record."""

from __future__ import annotations

import contextlib
import io

import pytest

from syntaxdrill.matching import normalize_predict_output
from syntaxdrill.registry import default_generator_registry
from syntaxdrill.seed import hash_string

PROGRAM_GENERATORS = {
    "string-slice": "result",
    "string-ops": "result",
    "string-format": "result",
    "list-method": "result",
    "nested-access": "result",
    "loop-simulation": "output",
    "conditional-chain": "result",
    "try-except-flow": "output",
    "finally-flow": "output",
    "function-call": "result",
    "default-args": "result",
    "lambda-expr": "result",
}

EXPRESSION_GENERATORS = {
    "dict-comp": ("code", "result"),
    "set-ops": ("code", "result"),
    "sorted-list": ("code", "output"),
    "zip-lists": ("code", "output"),
    "comp-filter": ("expression", "result"),
    "comp-mapping": ("expression", "result"),
    "operator-chain": ("expression", "result"),
}


def _seeds(name: str) -> list[str]:
    return [hash_string(f"{name}:predict:{index}") for index in range(15)]


def _run(code: str) -> str:
    buffer = io.StringIO()
    with contextlib.redirect_stdout(buffer):
        exec(code, {})  # noqa: S102 - generated fixtures only
    return buffer.getvalue()


@pytest.mark.parametrize(("name", "answer_key"), sorted(PROGRAM_GENERATORS.items()))
def test_program_output_matches_recorded_answer(name: str, answer_key: str) -> None:
    generator = default_generator_registry().get(name)

    for seed in _seeds(name):
        params = generator.generate(seed)
        printed = normalize_predict_output(_run(params["code"]))
        assert printed == normalize_predict_output(str(params[answer_key])), params


@pytest.mark.parametrize(("name", "keys"), sorted(EXPRESSION_GENERATORS.items()))
def test_expression_value_matches_recorded_answer(name: str, keys: tuple[str, str]) -> None:
    generator = default_generator_registry().get(name)
    source_key, answer_key = keys

    for seed in _seeds(name):
        params = generator.generate(seed)
        assert repr(eval(params[source_key], {})) == params[answer_key], params  # noqa: S307


def test_bool_logic_result_is_python_truth_value() -> None:
    generator = default_generator_registry().get("bool-logic")

    for seed in _seeds("bool-logic"):
        params = generator.generate(seed)
        assert str(bool(eval(params["expression"], {}))) == params["result"]  # noqa: S307


def test_exception_scenario_raises_named_exception() -> None:
    generator = default_generator_registry().get("exception-scenario")
    seen: set[str] = set()

    for seed in _seeds("exception-scenario"):
        params = generator.generate(seed)
        with pytest.raises(BaseException) as excinfo:
            exec(params["code"], {})  # noqa: S102
        assert type(excinfo.value).__name__ == params["exception_type"]
        assert params["catch_block"] == f"except {params['exception_type']}:"
        seen.add(params["exception_type"])

    assert len(seen) >= 2

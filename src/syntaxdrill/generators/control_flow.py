"""Generators for loops, branches, and exception handling exercises."""

from __future__ import annotations

import ast
from typing import Literal

from pydantic import model_validator

from ..interface import GeneratorParams
from ..prng import SeededRandom
from .base import GeneratedParams, ParameterGenerator, check


def _loop_output(start: int, stop: int, step: int) -> str:
    return " ".join(str(i) for i in range(start, stop, step))


def _loop_code(start: int, stop: int, step: int) -> str:
    return f'for i in range({start}, {stop}, {step}):\n    print(i, end=" ")'


class _LoopSimulationParams(GeneratedParams):
    start: int
    stop: int
    step: int
    output: str
    code: str

    @model_validator(mode="after")
    def validate_output(self) -> "_LoopSimulationParams":
        check(self.step != 0, "step must not be zero")
        check(self.output == _loop_output(self.start, self.stop, self.step), "output mismatch")
        check(self.output != "", "loop must run at least once")
        check(self.code == _loop_code(self.start, self.stop, self.step), "code mismatch")
        return self


class LoopSimulationGenerator(ParameterGenerator):
    """``range`` loops counting up or down whose printed values must be traced."""

    name = "loop-simulation"
    params_model = _LoopSimulationParams

    def _build(self, rng: SeededRandom) -> GeneratorParams:
        if rng.chance(0.75):
            start = rng.int(0, 5)
            step = rng.int(1, 3)
            stop = start + step * rng.int(2, 5) + rng.int(0, step - 1)
        else:
            start = rng.int(6, 12)
            step = -rng.int(1, 2)
            stop = start + step * rng.int(2, 5)

        return {
            "start": start,
            "stop": stop,
            "step": step,
            "output": _loop_output(start, stop, step),
            "code": _loop_code(start, stop, step),
        }


# subject, target, description, thresholds (descending), labels, value range
_CHAIN_SCENARIOS: dict[
    str, tuple[str, str, str, tuple[int, ...], tuple[str, ...], tuple[int, int]]
] = {
    "grade": (
        "score",
        "grade",
        "grade classification",
        (90, 80, 70, 60),
        ("A", "B", "C", "D", "F"),
        (40, 100),
    ),
    "age_category": (
        "age",
        "category",
        "age category classification",
        (65, 18, 13),
        ("senior", "adult", "teen", "child"),
        (1, 90),
    ),
    "temperature": (
        "temp",
        "feel",
        "temperature description",
        (30, 20, 10),
        ("hot", "warm", "mild", "cold"),
        (-5, 40),
    ),
}


def _classify(value: int, thresholds: tuple[int, ...], labels: tuple[str, ...]) -> str:
    for threshold, label in zip(thresholds, labels):
        if value >= threshold:
            return label
    return labels[-1]


def _chain_code(scenario: str, value: int) -> str:
    subject, target, _, thresholds, labels, _ = _CHAIN_SCENARIOS[scenario]
    lines = [f"{subject} = {value}"]
    for position, (threshold, label) in enumerate(zip(thresholds, labels)):
        keyword = "if" if position == 0 else "elif"
        lines.append(f"{keyword} {subject} >= {threshold}:")
        lines.append(f'    {target} = "{label}"')
    lines.append("else:")
    lines.append(f'    {target} = "{labels[-1]}"')
    lines.append(f"print({target})")
    return "\n".join(lines)


class _ConditionalChainParams(GeneratedParams):
    value: int
    result: str
    code: str
    description: str
    scenario: str

    @model_validator(mode="after")
    def validate_branch(self) -> "_ConditionalChainParams":
        check(self.scenario in _CHAIN_SCENARIOS, "unknown scenario")
        _, _, description, thresholds, labels, (low, high) = _CHAIN_SCENARIOS[self.scenario]
        check(low <= self.value <= high, "value out of range")
        check(self.description == description, "description mismatch")
        check(self.result == _classify(self.value, thresholds, labels), "result mismatch")
        check(self.code == _chain_code(self.scenario, self.value), "code mismatch")
        return self


class ConditionalChainGenerator(ParameterGenerator):
    """``if``/``elif``/``else`` ladders where the first true branch wins."""

    name = "conditional-chain"
    params_model = _ConditionalChainParams

    def _build(self, rng: SeededRandom) -> GeneratorParams:
        scenario = rng.pick(tuple(_CHAIN_SCENARIOS))
        _, _, description, thresholds, labels, (low, high) = _CHAIN_SCENARIOS[scenario]
        value = rng.int(low, high)
        return {
            "value": value,
            "result": _classify(value, thresholds, labels),
            "code": _chain_code(scenario, value),
            "description": description,
            "scenario": scenario,
        }


_TRY_VALUES = ('"123"', '"456"', '"789"', '"-42"', '"abc"', '"xyz"', '"3.14"', '""')


def _int_parses(value: str) -> bool:
    try:
        int(ast.literal_eval(value))
    except ValueError:
        return False
    return True


def _try_code(value: str) -> str:
    return (
        "try:\n"
        f"    number = int({value})\n"
        '    print("success")\n'
        "except ValueError:\n"
        '    print("error")'
    )


class _TryExceptFlowParams(GeneratedParams):
    value: str
    output: Literal["success", "error"]
    code: str

    @model_validator(mode="after")
    def validate_output(self) -> "_TryExceptFlowParams":
        check(self.value in _TRY_VALUES, "unknown value")
        expected = "success" if _int_parses(self.value) else "error"
        check(self.output == expected, "output mismatch")
        check(self.code == _try_code(self.value), "code mismatch")
        return self


class TryExceptFlowGenerator(ParameterGenerator):
    """``int()`` conversions that either succeed or land in ``except ValueError``."""

    name = "try-except-flow"
    params_model = _TryExceptFlowParams

    def _build(self, rng: SeededRandom) -> GeneratorParams:
        value = rng.pick(_TRY_VALUES)
        return {
            "value": value,
            "output": "success" if _int_parses(value) else "error",
            "code": _try_code(value),
        }


_FINALLY_SCENARIOS = {
    "no_exception": "no exception, finally still runs",
    "with_exception": "exception caught, finally runs after except",
    "return_in_try": "finally runs even with return in try",
    "uncaught_type": "except does not match, finally runs before the error escapes",
}


def _finally_program(scenario: str, value: int) -> tuple[str, str]:
    """Return the snippet for ``scenario`` and the stdout it produces."""

    if scenario == "no_exception":
        code = (
            "try:\n"
            f'    print("try: {value}")\n'
            "except ZeroDivisionError:\n"
            '    print("except")\n'
            "finally:\n"
            '    print("finally")'
        )
        return code, f"try: {value}\nfinally"
    if scenario == "with_exception":
        code = (
            "try:\n"
            '    print("try")\n'
            f"    x = {value} / 0\n"
            "except ZeroDivisionError:\n"
            '    print("except: division error")\n'
            "finally:\n"
            '    print("finally")'
        )
        return code, "try\nexcept: division error\nfinally"
    if scenario == "return_in_try":
        code = (
            "def compute():\n"
            "    try:\n"
            '        print("try")\n'
            f"        return {value}\n"
            "    finally:\n"
            '        print("finally")\n'
            "\n"
            "print(compute())"
        )
        return code, f"try\nfinally\n{value}"
    code = (
        "try:\n"
        "    try:\n"
        f"        items = [{value}]\n"
        "        print(items[5])\n"
        "    except KeyError:\n"
        '        print("key error")\n'
        "    finally:\n"
        '        print("finally")\n'
        "except IndexError:\n"
        '    print("outer: index error")'
    )
    return code, "finally\nouter: index error"


class _FinallyFlowParams(GeneratedParams):
    value: int
    code: str
    output: str
    description: str
    raises_exception: bool
    scenario: str

    @model_validator(mode="after")
    def validate_program(self) -> "_FinallyFlowParams":
        check(self.scenario in _FINALLY_SCENARIOS, "unknown scenario")
        check(self.description == _FINALLY_SCENARIOS[self.scenario], "description mismatch")
        check(1 <= self.value <= 20, "value must be within [1, 20]")
        code, output = _finally_program(self.scenario, self.value)
        check((self.code, self.output) == (code, output), "program mismatch")
        check(
            self.raises_exception == (self.scenario in {"with_exception", "uncaught_type"}),
            "raises_exception mismatch",
        )
        return self


class FinallyFlowGenerator(ParameterGenerator):
    """``try``/``except``/``finally`` orderings, one printed line per block reached."""

    name = "finally-flow"
    params_model = _FinallyFlowParams

    def _build(self, rng: SeededRandom) -> GeneratorParams:
        scenario = rng.pick(tuple(_FINALLY_SCENARIOS))
        value = rng.int(1, 20)
        code, output = _finally_program(scenario, value)
        return {
            "value": value,
            "code": code,
            "output": output,
            "description": _FINALLY_SCENARIOS[scenario],
            "raises_exception": scenario in {"with_exception", "uncaught_type"},
            "scenario": scenario,
        }


_EXCEPTION_SCENARIOS: tuple[dict[str, str], ...] = (
    {
        "operation": "file read",
        "exception_type": "FileNotFoundError",
        "context": "file handling",
        "code": 'open("missing.txt")',
    },
    {
        "operation": "division",
        "exception_type": "ZeroDivisionError",
        "context": "arithmetic",
        "code": "result = 10 / 0",
    },
    {
        "operation": "list access",
        "exception_type": "IndexError",
        "context": "collections",
        "code": "items = [1, 2, 3]\nitem = items[10]",
    },
    {
        "operation": "dict access",
        "exception_type": "KeyError",
        "context": "collections",
        "code": 'data = {"a": 1}\nvalue = data["missing"]',
    },
    {
        "operation": "type conversion",
        "exception_type": "ValueError",
        "context": "parsing",
        "code": 'num = int("abc")',
    },
    {
        "operation": "string concatenation",
        "exception_type": "TypeError",
        "context": "types",
        "code": 'label = "total: " + 5',
    },
    {
        "operation": "attribute lookup",
        "exception_type": "AttributeError",
        "context": "objects",
        "code": "count = None\ncount.append(1)",
    },
)


class _ExceptionScenarioParams(GeneratedParams):
    operation: str
    exception_type: str
    context: str
    code: str
    catch_block: str

    @model_validator(mode="after")
    def validate_scenario(self) -> "_ExceptionScenarioParams":
        fields = {
            "operation": self.operation,
            "exception_type": self.exception_type,
            "context": self.context,
            "code": self.code,
        }
        check(fields in _EXCEPTION_SCENARIOS, "unknown exception scenario")
        check(self.catch_block == f"except {self.exception_type}:", "catch_block mismatch")
        return self


class ExceptionScenarioGenerator(ParameterGenerator):
    """Snippets that raise a specific built-in exception and the clause that catches it."""

    name = "exception-scenario"
    params_model = _ExceptionScenarioParams

    def _build(self, rng: SeededRandom) -> GeneratorParams:
        scenario = rng.pick(_EXCEPTION_SCENARIOS)
        return {**scenario, "catch_block": f"except {scenario['exception_type']}:"}

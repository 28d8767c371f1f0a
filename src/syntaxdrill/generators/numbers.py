"""Generators for arithmetic, comparison, boolean, and conversion exercises."""

from __future__ import annotations

import ast
import math
from typing import Literal

from pydantic import model_validator

from ..interface import GeneratorParams
from ..prng import SeededRandom
from .base import GeneratedParams, ParameterGenerator, check, evaluate_expression, py_bool


class _ArithmeticValuesParams(GeneratedParams):
    x: int
    y: int
    sum: int
    product: int
    floor_div: int
    modulo: int
    div_result: str
    float_val: float
    rounded_int: str
    truncated_int: str
    ceil_int: str

    @model_validator(mode="after")
    def validate_results(self) -> "_ArithmeticValuesParams":
        check(5 <= self.x <= 20, "x must be within [5, 20]")
        check(2 <= self.y <= 9, "y must be within [2, 9]")
        check(self.sum == self.x + self.y, "sum mismatch")
        check(self.product == self.x * self.y, "product mismatch")
        check(self.floor_div == self.x // self.y, "floor_div mismatch")
        check(self.modulo == self.x % self.y, "modulo mismatch")
        check(self.div_result == str(self.x / self.y), "div_result mismatch")
        check(self.rounded_int == str(round(self.float_val)), "rounded_int mismatch")
        check(self.truncated_int == str(int(self.float_val)), "truncated_int mismatch")
        check(self.ceil_int == str(math.ceil(self.float_val)), "ceil_int mismatch")
        return self


class ArithmeticValuesGenerator(ParameterGenerator):
    """Operands with every arithmetic result Python would print for them.

    ``x`` stays within [5, 20] and ``y`` within [2, 9] so floor division and
    modulo give non-trivial answers. ``float_val`` always has a non-zero
    fractional digit for ``round``/``int``/``math.ceil`` drills.
    """

    name = "arithmetic-values"
    params_model = _ArithmeticValuesParams

    def _build(self, rng: SeededRandom) -> GeneratorParams:
        x = rng.int(5, 20)
        y = rng.int(2, 9)
        float_val = float(f"{rng.int(1, 10)}.{rng.int(1, 9)}")
        return {
            "x": x,
            "y": y,
            "sum": x + y,
            "product": x * y,
            "floor_div": x // y,
            "modulo": x % y,
            "div_result": str(x / y),
            "float_val": float_val,
            "rounded_int": str(round(float_val)),
            "truncated_int": str(int(float_val)),
            "ceil_int": str(math.ceil(float_val)),
        }


_COMPARISON_OPERATORS = ("<", ">", "==", "!=", "<=", ">=")


class _ComparisonLogicParams(GeneratedParams):
    a: int
    b: int
    op: Literal["<", ">", "==", "!=", "<=", ">="]
    result: Literal["True", "False"]

    @model_validator(mode="after")
    def validate_result(self) -> "_ComparisonLogicParams":
        check(1 <= self.a <= 20 and 1 <= self.b <= 20, "operands must be within [1, 20]")
        actual = evaluate_expression(f"{self.a} {self.op} {self.b}")
        check(py_bool(actual) == self.result, "result does not match comparison")
        return self


class ComparisonLogicGenerator(ParameterGenerator):
    """Two integers, a comparison operator, and the printed outcome."""

    name = "comparison-logic"
    params_model = _ComparisonLogicParams

    def _build(self, rng: SeededRandom) -> GeneratorParams:
        a = rng.int(1, 20)
        b = rng.int(1, 20)
        op = rng.pick(_COMPARISON_OPERATORS)
        return {
            "a": a,
            "b": b,
            "op": op,
            "result": py_bool(evaluate_expression(f"{a} {op} {b}")),
        }


_BOOL_SCENARIOS: dict[str, tuple[str, str]] = {
    "and_both_true": ("{a} > 0 and {b} > 0", "both positive"),
    "or_either": ("{a} > 10 or {b} > 10", "either greater than 10"),
    "not_negative": ("not {a} < 0", "not negative"),
    "range_check": ("0 < {a} < 10", "in range (0, 10)"),
    "equal_or_greater": ("{a} >= {b}", "greater than or equal"),
    "not_equal": ("{a} != {b}", "not equal"),
    "and_with_equal": ("{a} > 5 and {a} == {b}", "greater than 5 and equal"),
    "or_with_zero": ("{a} == 0 or {b} == 0", "either is zero"),
    "compound_and_or": ("({a} > {b}) or ({a} == 0)", "greater or zero"),
    "divisibility": ("{a} % 2 == 0 and {b} % 2 == 0", "both even"),
}


class _BoolLogicParams(GeneratedParams):
    a: int
    b: int
    expression: str
    result: Literal["True", "False"]
    description: str
    scenario: str

    @model_validator(mode="after")
    def validate_expression(self) -> "_BoolLogicParams":
        check(self.scenario in _BOOL_SCENARIOS, "unknown scenario")
        template, description = _BOOL_SCENARIOS[self.scenario]
        check(self.description == description, "description does not match scenario")
        check(
            self.expression == template.format(a=self.a, b=self.b),
            "expression does not match scenario",
        )
        check(
            py_bool(bool(evaluate_expression(self.expression))) == self.result,
            "result does not match expression",
        )
        return self


class BoolLogicGenerator(ParameterGenerator):
    """Compound ``and``/``or``/``not`` conditions with their truth value."""

    name = "bool-logic"
    params_model = _BoolLogicParams

    def _build(self, rng: SeededRandom) -> GeneratorParams:
        scenario = rng.pick(tuple(_BOOL_SCENARIOS))
        template, description = _BOOL_SCENARIOS[scenario]
        a = rng.int(-5, 15)
        # Equality scenarios need a fair chance of equal operands.
        b = a if rng.chance(0.3) else rng.int(-5, 15)
        expression = template.format(a=a, b=b)
        return {
            "a": a,
            "b": b,
            "expression": expression,
            "result": py_bool(bool(evaluate_expression(expression))),
            "description": description,
            "scenario": scenario,
        }


def _format_number(value: int | float) -> str:
    return repr(value)


_OPERATOR_SCENARIOS: dict[str, str] = {
    "add_multiply": "multiplication before addition",
    "parens_first": "parentheses override precedence",
    "divide_subtract": "true division before subtraction gives a float",
    "power_first": "exponentiation before addition",
    "floor_division": "floor division with addition",
    "modulo_chain": "modulo with addition",
    "unary_power": "exponentiation binds tighter than unary minus",
}


class _OperatorChainParams(GeneratedParams):
    expression: str
    result: str
    description: str
    scenario: str

    @model_validator(mode="after")
    def validate_result(self) -> "_OperatorChainParams":
        check(self.scenario in _OPERATOR_SCENARIOS, "unknown scenario")
        check(self.description == _OPERATOR_SCENARIOS[self.scenario], "description mismatch")
        check(
            _format_number(evaluate_expression(self.expression)) == self.result,
            "result does not match expression",
        )
        return self


class OperatorChainGenerator(ParameterGenerator):
    """Expressions whose answer hinges on operator precedence."""

    name = "operator-chain"
    params_model = _OperatorChainParams

    def _build(self, rng: SeededRandom) -> GeneratorParams:
        scenario = rng.pick(tuple(_OPERATOR_SCENARIOS))
        if scenario == "add_multiply":
            expression = f"{rng.int(2, 5)} + {rng.int(2, 5)} * {rng.int(2, 5)}"
        elif scenario == "parens_first":
            expression = f"({rng.int(2, 5)} + {rng.int(2, 5)}) * {rng.int(2, 5)}"
        elif scenario == "divide_subtract":
            divisor = rng.int(2, 4)
            dividend = divisor * rng.int(2, 5)
            expression = f"{rng.int(10, 20)} - {dividend} / {divisor}"
        elif scenario == "power_first":
            expression = f"{rng.int(2, 4)} ** {rng.int(2, 3)} + {rng.int(1, 5)}"
        elif scenario == "floor_division":
            expression = f"{rng.int(10, 30)} // {rng.int(3, 7)} + {rng.int(1, 5)}"
        elif scenario == "modulo_chain":
            expression = f"{rng.int(15, 30)} % {rng.int(4, 8)} + {rng.int(2, 4)}"
        else:
            expression = f"-{rng.int(2, 4)} ** 2"

        return {
            "expression": expression,
            "result": _format_number(evaluate_expression(expression)),
            "description": _OPERATOR_SCENARIOS[scenario],
            "scenario": scenario,
        }


_CONVERSIONS: tuple[tuple[str, str], ...] = (
    ('"42"', "int"),
    ('"123"', "int"),
    ('"-5"', "int"),
    ("3.7", "int"),
    ("9.99", "int"),
    ("-2.8", "int"),
    ('"3.14"', "float"),
    ('"2.5"', "float"),
    ("5", "float"),
    ("10", "float"),
    ("42", "str"),
    ("3.14", "str"),
    ("True", "str"),
    ("[1, 2]", "str"),
    ("0", "bool"),
    ("1", "bool"),
    ('""', "bool"),
    ('"hello"', "bool"),
    ("[]", "bool"),
    ("[0]", "bool"),
)

_CONVERTERS = {"int": int, "float": float, "str": str, "bool": bool}


def _convert(input_value: str, target_type: str) -> str:
    return repr(_CONVERTERS[target_type](ast.literal_eval(input_value)))


class _TypeConversionParams(GeneratedParams):
    input_value: str
    target_type: Literal["int", "float", "str", "bool"]
    result: str
    conversion_call: str

    @model_validator(mode="after")
    def validate_result(self) -> "_TypeConversionParams":
        check(
            (self.input_value, self.target_type) in _CONVERSIONS,
            "unknown conversion",
        )
        check(self.result == _convert(self.input_value, self.target_type), "result mismatch")
        check(
            self.conversion_call == f"{self.target_type}({self.input_value})",
            "conversion_call mismatch",
        )
        return self


class TypeConversionGenerator(ParameterGenerator):
    """Built-in conversions with the value the REPL would echo."""

    name = "type-conversion"
    params_model = _TypeConversionParams

    def _build(self, rng: SeededRandom) -> GeneratorParams:
        input_value, target_type = rng.pick(_CONVERSIONS)
        return {
            "input_value": input_value,
            "target_type": target_type,
            "result": _convert(input_value, target_type),
            "conversion_call": f"{target_type}({input_value})",
        }


_FALSY_VALUES = ("False", "None", "0", "0.0", '""', "''", "[]", "{}", "()")
_TRUTHY_VALUES = (
    "True",
    "1",
    "-1",
    "0.1",
    '"hello"',
    '"0"',
    '"False"',
    "[0]",
    "[False]",
    '{"a": 1}',
    "{1}",
    "(0,)",
)
_TRUTHY_EXPLANATION = "Non-empty and non-zero values are truthy"
_FALSY_EXPLANATION = "Empty collections, zero, None, and False are falsy"


class _TruthinessParams(GeneratedParams):
    value_str: str
    is_truthy: Literal["True", "False"]
    explanation: str

    @model_validator(mode="after")
    def validate_truthiness(self) -> "_TruthinessParams":
        check(self.value_str in _FALSY_VALUES + _TRUTHY_VALUES, "unknown value")
        truthy = bool(ast.literal_eval(self.value_str))
        check(py_bool(truthy) == self.is_truthy, "is_truthy mismatch")
        expected = _TRUTHY_EXPLANATION if truthy else _FALSY_EXPLANATION
        check(self.explanation == expected, "explanation mismatch")
        return self


class TruthinessGenerator(ParameterGenerator):
    """A literal and whether ``bool()`` of it is ``True``, leaning towards falsy ones."""

    name = "truthiness"
    params_model = _TruthinessParams

    def _build(self, rng: SeededRandom) -> GeneratorParams:
        pool = _FALSY_VALUES if rng.chance(0.55) else _TRUTHY_VALUES
        value_str = rng.pick(pool)
        truthy = bool(ast.literal_eval(value_str))
        return {
            "value_str": value_str,
            "is_truthy": py_bool(truthy),
            "explanation": _TRUTHY_EXPLANATION if truthy else _FALSY_EXPLANATION,
        }

"""Generators for list and dict comprehension exercises."""

from __future__ import annotations

from pydantic import model_validator

from ..interface import GeneratorParams
from ..prng import SeededRandom
from .base import GeneratedParams, ParameterGenerator, check, evaluate_expression


class _CompFilterParams(GeneratedParams):
    n: int
    mod: int
    expression: str
    result: str

    @model_validator(mode="after")
    def validate_result(self) -> "_CompFilterParams":
        check(5 <= self.n <= 8, "n must be within [5, 8]")
        check(2 <= self.mod <= 3, "mod must be within [2, 3]")
        check(
            self.expression == f"[i for i in range({self.n}) if i % {self.mod} == 0]",
            "expression mismatch",
        )
        check(self.result == repr(evaluate_expression(self.expression)), "result mismatch")
        return self


class CompFilterGenerator(ParameterGenerator):
    """A ``range`` bound and modulus for filtering comprehensions.

    ``n`` is within [5, 8] and ``mod`` within [2, 3], which keeps the
    filtered list short enough to predict by hand.
    """

    name = "comp-filter"
    params_model = _CompFilterParams

    def _build(self, rng: SeededRandom) -> GeneratorParams:
        n = rng.int(5, 8)
        mod = rng.int(2, 3)
        expression = f"[i for i in range({n}) if i % {mod} == 0]"
        return {
            "n": n,
            "mod": mod,
            "expression": expression,
            "result": repr(evaluate_expression(expression)),
        }


class _CompMappingParams(GeneratedParams):
    n: int
    m: int
    expression: str
    result: str

    @model_validator(mode="after")
    def validate_result(self) -> "_CompMappingParams":
        check(3 <= self.n <= 6, "n must be within [3, 6]")
        check(2 <= self.m <= 4, "m must be within [2, 4]")
        check(self.expression == f"[i * {self.m} for i in range({self.n})]", "expression mismatch")
        check(self.result == repr(evaluate_expression(self.expression)), "result mismatch")
        return self


class CompMappingGenerator(ParameterGenerator):
    """Scale every element of ``range(n)`` by ``m``."""

    name = "comp-mapping"
    params_model = _CompMappingParams

    def _build(self, rng: SeededRandom) -> GeneratorParams:
        n = rng.int(3, 6)
        m = rng.int(2, 4)
        expression = f"[i * {m} for i in range({n})]"
        return {
            "n": n,
            "m": m,
            "expression": expression,
            "result": repr(evaluate_expression(expression)),
        }


_DICT_COMP_SCENARIOS: dict[str, tuple[str, str]] = {
    "squares": ("{{x: x ** 2 for x in range({n})}}", "maps numbers to their squares"),
    "cubes": ("{{x: x ** 3 for x in range({n})}}", "maps numbers to their cubes"),
    "doubles": ("{{x: x * 2 for x in range({n})}}", "maps numbers to their doubles"),
    "even_only": (
        "{{x: x for x in range({n}) if x % 2 == 0}}",
        "maps even numbers to themselves",
    ),
    "string_keys": ("{{str(x): x for x in range({n})}}", "maps string keys to numbers"),
}


class _DictCompParams(GeneratedParams):
    n: int
    code: str
    result: str
    description: str
    scenario: str

    @model_validator(mode="after")
    def validate_result(self) -> "_DictCompParams":
        check(self.scenario in _DICT_COMP_SCENARIOS, "unknown scenario")
        template, description = _DICT_COMP_SCENARIOS[self.scenario]
        check(self.description == description, "description mismatch")
        check(3 <= self.n <= 5, "n must be within [3, 5]")
        check(self.code == template.format(n=self.n), "code mismatch")
        check(self.result == repr(evaluate_expression(self.code)), "result mismatch")
        return self


class DictCompGenerator(ParameterGenerator):
    """Dict comprehensions over ``range(n)`` with several value mappings."""

    name = "dict-comp"
    params_model = _DictCompParams

    def _build(self, rng: SeededRandom) -> GeneratorParams:
        scenario = rng.pick(tuple(_DICT_COMP_SCENARIOS))
        template, description = _DICT_COMP_SCENARIOS[scenario]
        n = rng.int(3, 5)
        code = template.format(n=n)
        return {
            "n": n,
            "code": code,
            "result": repr(evaluate_expression(code)),
            "description": description,
            "scenario": scenario,
        }

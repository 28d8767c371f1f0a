"""Generators for string indexing, slicing, methods, and naming exercises."""

from __future__ import annotations

import keyword
import re
from typing import Literal

from pydantic import model_validator

from ..interface import GeneratorParams
from ..prng import SeededRandom
from .base import GeneratedParams, ParameterGenerator, check

SLICE_WORDS = (
    "python",
    "keyboard",
    "notebook",
    "sandwich",
    "elephant",
    "mountain",
    "computer",
    "treasure",
    "festival",
    "umbrella",
)

_SLICE_EXPR = re.compile(r"^\[(-?\d*):(-?\d*)(?::(-?\d+))?\]$")


def _apply_slice_expr(word: str, slice_expr: str) -> str:
    """Evaluate a literal slice such as ``[1:4]`` or ``[::-1]`` against ``word``."""

    match = _SLICE_EXPR.match(slice_expr)
    if match is None:
        msg = f"'{slice_expr}' is not a literal slice"
        raise ValueError(msg)
    start, end, step = (int(part) if part else None for part in match.groups())
    return word[slice(start, end, step)]


class _SliceBoundsParams(GeneratedParams):
    start: int
    end: int

    @model_validator(mode="after")
    def validate_bounds(self) -> "_SliceBoundsParams":
        check(0 <= self.start <= 4, "start must be within [0, 4]")
        check(self.start < self.end <= 7, "end must be greater than start and at most 7")
        return self


class SliceBoundsGenerator(ParameterGenerator):
    """Pick a slice start in [0, 4] and an end strictly after it, capped at 7."""

    name = "slice-bounds"
    params_model = _SliceBoundsParams

    def _build(self, rng: SeededRandom) -> GeneratorParams:
        start = rng.int(0, 4)
        end = rng.int(start + 1, 7)
        return {"start": start, "end": end}


_SLICE_SCENARIOS: dict[str, str] = {
    "basic": "basic slice from start to end",
    "from_start": "slice from the beginning up to an index",
    "to_end": "slice from an index to the end",
    "negative_start": "slice using a negative start index",
    "negative_end": "slice using a negative end index",
    "step": "slice with a step",
    "reverse": "reverse the string with [::-1]",
    "every_other": "every other character with [::2]",
}


class _StringSliceParams(GeneratedParams):
    word: str
    slice_expr: str
    result: str
    code: str
    scenario: str
    description: str

    @model_validator(mode="after")
    def validate_result(self) -> "_StringSliceParams":
        check(self.scenario in _SLICE_SCENARIOS, "unknown slice scenario")
        check(
            self.description == _SLICE_SCENARIOS[self.scenario],
            "description does not match scenario",
        )
        check(
            _apply_slice_expr(self.word, self.slice_expr) == self.result,
            "result does not match the slice",
        )
        check(
            self.code == f"s = {self.word!r}\nprint(s{self.slice_expr})",
            "code does not match word and slice",
        )
        return self


class StringSliceGenerator(ParameterGenerator):
    """Slice a word with positive, negative, or stepped bounds."""

    name = "string-slice"
    params_model = _StringSliceParams

    def _build(self, rng: SeededRandom) -> GeneratorParams:
        word = rng.pick(SLICE_WORDS)
        scenario = rng.pick(tuple(_SLICE_SCENARIOS))
        length = len(word)

        if scenario == "basic":
            start = rng.int(0, 2)
            slice_expr = f"[{start}:{rng.int(start + 2, length)}]"
        elif scenario == "from_start":
            slice_expr = f"[:{rng.int(2, length - 1)}]"
        elif scenario == "to_end":
            slice_expr = f"[{rng.int(1, length - 2)}:]"
        elif scenario == "negative_start":
            slice_expr = f"[{-rng.int(1, 3)}:]"
        elif scenario == "negative_end":
            slice_expr = f"[:{-rng.int(1, 3)}]"
        elif scenario == "step":
            slice_expr = f"[{rng.int(0, 1)}::2]"
        elif scenario == "reverse":
            slice_expr = "[::-1]"
        else:
            slice_expr = "[::2]"

        return {
            "word": word,
            "slice_expr": slice_expr,
            "result": _apply_slice_expr(word, slice_expr),
            "code": f"s = {word!r}\nprint(s{slice_expr})",
            "scenario": scenario,
            "description": _SLICE_SCENARIOS[scenario],
        }


_STRING_METHODS = ("upper", "lower", "strip", "title", "capitalize")
_STRING_POOL = (
    "  hello  ",
    "WORLD",
    "Python",
    "  code  ",
    "TEST",
    "Example",
    "hello world",
    "data science",
)


class _StringOpsParams(GeneratedParams):
    original: str
    method: Literal["upper", "lower", "strip", "title", "capitalize"]
    result: str
    code: str

    @model_validator(mode="after")
    def validate_result(self) -> "_StringOpsParams":
        check(
            getattr(self.original, self.method)() == self.result,
            "result does not match the string method",
        )
        check(
            self.code == f"print({self.original!r}.{self.method}())",
            "code does not match original and method",
        )
        return self


class StringOpsGenerator(ParameterGenerator):
    """Call a common ``str`` method and record what it returns."""

    name = "string-ops"
    params_model = _StringOpsParams

    def _build(self, rng: SeededRandom) -> GeneratorParams:
        original = rng.pick(_STRING_POOL)
        method = rng.pick(_STRING_METHODS)
        return {
            "original": original,
            "method": method,
            "result": getattr(original, method)(),
            "code": f"print({original!r}.{method}())",
        }


_FORMAT_SPECS = {
    "two_decimals": ".2f",
    "thousands": ",",
    "percent": ".0%",
    "zero_pad": "03d",
}


class _StringFormatParams(GeneratedParams):
    scenario: Literal["two_decimals", "thousands", "percent", "zero_pad"]
    value: int | float
    format_spec: str
    code: str
    result: str

    @model_validator(mode="after")
    def validate_result(self) -> "_StringFormatParams":
        check(self.format_spec == _FORMAT_SPECS[self.scenario], "spec does not match scenario")
        check(format(self.value, self.format_spec) == self.result, "result mismatch")
        return self


class StringFormatGenerator(ParameterGenerator):
    """Format a number inside an f-string replacement field."""

    name = "string-format"
    params_model = _StringFormatParams

    def _build(self, rng: SeededRandom) -> GeneratorParams:
        scenario = rng.pick(tuple(_FORMAT_SPECS))
        if scenario == "two_decimals":
            value: int | float = rng.int(100, 9999) / 100
        elif scenario == "thousands":
            value = rng.int(1000, 999999)
        elif scenario == "percent":
            value = rng.int(1, 99) / 100
        else:
            value = rng.int(1, 99)

        spec = _FORMAT_SPECS[scenario]
        return {
            "scenario": scenario,
            "value": value,
            "format_spec": spec,
            "code": f'value = {value!r}\nprint(f"{{value:{spec}}}")',
            "result": format(value, spec),
        }


_VARIABLE_NAMES = (
    "count",
    "total",
    "result",
    "score",
    "index",
    "message",
    "price",
    "quantity",
    "customer_id",
    "order_total",
    "tax_rate",
    "line_items",
    "max_val",
    "is_active",
)

_INVALID_NAMES = {
    "2nd_place": "names cannot start with a digit",
    "my-var": "hyphens are not allowed in names",
    "total cost": "names cannot contain spaces",
    "class": "'class' is a reserved keyword",
    "for": "'for' is a reserved keyword",
    "$price": "'$' is not allowed in names",
}


def _is_valid_name(name: str) -> bool:
    return name.isidentifier() and not keyword.iskeyword(name)


class _VariableNamesParams(GeneratedParams):
    name: str
    value: int
    invalid_name: str
    invalid_reason: str

    @model_validator(mode="after")
    def validate_names(self) -> "_VariableNamesParams":
        check(_is_valid_name(self.name), "name must be a valid identifier")
        check(not _is_valid_name(self.invalid_name), "invalid_name must be invalid")
        check(
            _INVALID_NAMES.get(self.invalid_name) == self.invalid_reason,
            "invalid_reason does not match invalid_name",
        )
        check(1 <= self.value <= 100, "value must be within [1, 100]")
        return self


class VariableNamesGenerator(ParameterGenerator):
    """Pick a readable identifier, a value, and a name Python rejects."""

    name = "variable-names"
    params_model = _VariableNamesParams

    def _build(self, rng: SeededRandom) -> GeneratorParams:
        invalid_name = rng.pick(tuple(_INVALID_NAMES))
        return {
            "name": rng.pick(_VARIABLE_NAMES),
            "value": rng.int(1, 100),
            "invalid_name": invalid_name,
            "invalid_reason": _INVALID_NAMES[invalid_name],
        }

"""Generators for function definition, call, and lambda exercises."""

from __future__ import annotations

from pydantic import model_validator

from ..interface import GeneratorParams
from ..prng import SeededRandom
from .base import GeneratedParams, ParameterGenerator, check, evaluate_expression


def _call(params: str, body: str, args: str) -> object:
    """Evaluate ``body`` as a function of ``params`` applied to ``args``."""

    return evaluate_expression(f"(lambda {params}: {body})({args})")


# parameter names, return expression, argument ranges, context
_FUNCTION_SCENARIOS: dict[str, tuple[tuple[str, ...], str, tuple[tuple[int, int], ...], str]] = {
    "calculate_total": (
        ("price", "quantity"),
        "price * quantity",
        ((10, 100), (1, 10)),
        "shopping cart",
    ),
    "apply_discount": (
        ("amount", "percent"),
        "round(amount * (1 - percent / 100))",
        ((50, 200), (10, 30)),
        "discount calculation",
    ),
    "calculate_average": (
        ("total", "count"),
        "round(total / count)",
        ((100, 500), (5, 20)),
        "statistics",
    ),
    "compute_area": (
        ("width", "height"),
        "width * height",
        ((5, 20), (5, 20)),
        "geometry",
    ),
    "get_celsius": (
        ("fahrenheit",),
        "round((fahrenheit - 32) * 5 / 9)",
        ((32, 100),),
        "temperature conversion",
    ),
    "calculate_tip": (
        ("bill", "percent"),
        "round(bill * percent / 100)",
        ((20, 150), (15, 25)),
        "restaurant bill",
    ),
}


def _function_code(func_name: str, params: str, body: str, args: str) -> str:
    return f"def {func_name}({params}):\n    return {body}\n\nprint({func_name}({args}))"


class _FunctionCallParams(GeneratedParams):
    func_name: str
    params: str
    args: str
    body: str
    code: str
    result: str
    context: str

    @model_validator(mode="after")
    def validate_call(self) -> "_FunctionCallParams":
        check(self.func_name in _FUNCTION_SCENARIOS, "unknown function")
        names, body, ranges, context = _FUNCTION_SCENARIOS[self.func_name]
        check(self.params == ", ".join(names), "params mismatch")
        check(self.body == body, "body mismatch")
        check(self.context == context, "context mismatch")
        values = evaluate_expression(f"({self.args},)")
        check(len(values) == len(ranges), "wrong number of arguments")
        check(
            all(low <= value <= high for value, (low, high) in zip(values, ranges)),
            "argument out of range",
        )
        check(self.result == str(_call(self.params, self.body, self.args)), "result mismatch")
        check(
            self.code == _function_code(self.func_name, self.params, self.body, self.args),
            "code mismatch",
        )
        return self


class FunctionCallGenerator(ParameterGenerator):
    """Small named functions called with realistic arguments."""

    name = "function-call"
    params_model = _FunctionCallParams

    def _build(self, rng: SeededRandom) -> GeneratorParams:
        func_name = rng.pick(tuple(_FUNCTION_SCENARIOS))
        names, body, ranges, context = _FUNCTION_SCENARIOS[func_name]
        params = ", ".join(names)
        args = ", ".join(str(rng.int(low, high)) for low, high in ranges)
        return {
            "func_name": func_name,
            "params": params,
            "args": args,
            "body": body,
            "code": _function_code(func_name, params, body, args),
            "result": str(_call(params, body, args)),
            "context": context,
        }


_DEFAULT_ARG_SCENARIOS: dict[str, tuple[str, str]] = {
    "use_default": ('f"Hello, {name}!"', "uses the default when no argument is given"),
    "override_name": ('f"Hello, {name}!"', "overrides the default with an explicit argument"),
    "mixed_params": ("x * multiplier", "required parameter followed by a default"),
    "override_default": ("base ** exp", "explicit value replaces the default"),
}


class _DefaultArgsParams(GeneratedParams):
    func_name: str
    params: str
    call_args: str
    result: str
    description: str
    code: str
    scenario: str

    @model_validator(mode="after")
    def validate_call(self) -> "_DefaultArgsParams":
        check(self.scenario in _DEFAULT_ARG_SCENARIOS, "unknown scenario")
        body, description = _DEFAULT_ARG_SCENARIOS[self.scenario]
        check(self.description == description, "description mismatch")
        check("=" in self.params, "signature must declare a default")
        check(
            self.result == str(_call(self.params, body, self.call_args)),
            "result mismatch",
        )
        check(
            self.code == _function_code(self.func_name, self.params, body, self.call_args),
            "code mismatch",
        )
        return self


class DefaultArgsGenerator(ParameterGenerator):
    """Functions with default parameter values, called with and without overrides."""

    name = "default-args"
    params_model = _DefaultArgsParams

    def _build(self, rng: SeededRandom) -> GeneratorParams:
        scenario = rng.pick(tuple(_DEFAULT_ARG_SCENARIOS))
        body, description = _DEFAULT_ARG_SCENARIOS[scenario]

        if scenario in {"use_default", "override_name"}:
            func_name = rng.pick(("greet", "welcome", "hello"))
            params = f'name="{rng.pick(("World", "User", "Guest", "Friend"))}"'
            call_args = ""
            if scenario == "override_name":
                call_args = f'"{rng.pick(("Alice", "Bob", "Charlie", "David"))}"'
        elif scenario == "mixed_params":
            func_name = "calculate"
            params = f"x, multiplier={rng.int(2, 4)}"
            call_args = str(rng.int(1, 5))
        else:
            func_name = "power"
            params = f"base, exp={rng.int(1, 3)}"
            call_args = f"{rng.int(2, 5)}, {rng.int(2, 4)}"

        return {
            "func_name": func_name,
            "params": params,
            "call_args": call_args,
            "result": str(_call(params, body, call_args)),
            "description": description,
            "code": _function_code(func_name, params, body, call_args),
            "scenario": scenario,
        }


# parameter names, body, argument range, description
_LAMBDA_OPERATIONS: dict[str, tuple[str, str, tuple[int, int], str]] = {
    "double": ("x", "x * 2", (1, 20), "doubles the input"),
    "square": ("x", "x ** 2", (1, 12), "squares the input"),
    "add": ("x, y", "x + y", (1, 50), "adds two numbers"),
    "multiply": ("x, y", "x * y", (1, 12), "multiplies two numbers"),
    "subtract": ("x, y", "x - y", (1, 50), "subtracts y from x"),
    "increment": ("x", "x + 1", (1, 99), "adds one to the input"),
    "max_of_two": ("x, y", "x if x > y else y", (1, 50), "returns the larger value"),
    "is_even": ("x", "x % 2 == 0", (1, 99), "checks whether the input is even"),
}


class _LambdaExprParams(GeneratedParams):
    operation: str
    params: str
    body: str
    lambda_str: str
    args: str
    code: str
    result: str
    description: str

    @model_validator(mode="after")
    def validate_result(self) -> "_LambdaExprParams":
        check(self.operation in _LAMBDA_OPERATIONS, "unknown operation")
        params, body, (low, high), description = _LAMBDA_OPERATIONS[self.operation]
        check((self.params, self.body) == (params, body), "lambda mismatch")
        check(self.description == description, "description mismatch")
        check(self.lambda_str == f"lambda {params}: {body}", "lambda_str mismatch")
        values = evaluate_expression(f"({self.args},)")
        check(len(values) == len(params.split(", ")), "wrong number of arguments")
        check(all(low <= value <= high for value in values), "argument out of range")
        check(self.result == str(_call(params, body, self.args)), "result mismatch")
        check(self.code == f"f = {self.lambda_str}\nprint(f({self.args}))", "code mismatch")
        return self


class LambdaExprGenerator(ParameterGenerator):
    """One-line ``lambda`` functions applied to sample arguments."""

    name = "lambda-expr"
    params_model = _LambdaExprParams

    def _build(self, rng: SeededRandom) -> GeneratorParams:
        operation = rng.pick(tuple(_LAMBDA_OPERATIONS))
        params, body, (low, high), description = _LAMBDA_OPERATIONS[operation]
        args = ", ".join(str(rng.int(low, high)) for _ in params.split(", "))
        lambda_str = f"lambda {params}: {body}"
        return {
            "operation": operation,
            "params": params,
            "body": body,
            "lambda_str": lambda_str,
            "args": args,
            "code": f"f = {lambda_str}\nprint(f({args}))",
            "result": str(_call(params, body, args)),
            "description": description,
        }

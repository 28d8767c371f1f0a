"""Shared plumbing for the bundled parameter generators.

Each generator pairs a ``_build`` recipe driven by :class:`SeededRandom` with
a strict pydantic model that re-derives the recipe's constraints. ``validate``
never trusts the recipe: it only accepts parameters the model can rebuild.
"""

from __future__ import annotations

import ast
import operator
from typing import Any, Callable, ClassVar, Iterator, Mapping

from pydantic import BaseModel, ConfigDict, ValidationError

from ..interface import GeneratorParams
from ..prng import SeededRandom


# Raised by consistency checks fed foreign values; pydantic only wraps ValueError.
_REJECTED_ERRORS: tuple[type[Exception], ...] = (
    TypeError,
    KeyError,
    IndexError,
    AttributeError,
    ZeroDivisionError,
    OverflowError,
    SyntaxError,
)


class GeneratedParams(BaseModel):
    """Base schema for generator output; subclasses add a consistency validator."""

    model_config = ConfigDict(extra="forbid", frozen=True, strict=True)


class ParameterGenerator:
    """Base class implementing the :class:`~syntaxdrill.interface.Generator` contract.

    Subclasses set ``name`` and ``params_model`` and implement ``_build``.
    """

    name: ClassVar[str]
    params_model: ClassVar[type[GeneratedParams]]

    def generate(self, seed: str) -> GeneratorParams:
        """Produce parameters deterministically from ``seed``."""

        return self._build(SeededRandom(seed))

    def validate(self, params: Mapping[str, Any]) -> bool:
        """Return ``True`` when ``params`` satisfy ``params_model``.

        Never raises: values of the right schema type that cannot be compared
        or evaluated by the consistency checks are rejected as well.
        """

        try:
            self.params_model.model_validate(dict(params))
        except (ValidationError, *_REJECTED_ERRORS):
            return False
        return True

    def _build(self, rng: SeededRandom) -> GeneratorParams:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


def py_bool(value: bool) -> str:
    """Render ``value`` the way Python prints it."""

    return "True" if value else "False"


def check(condition: bool, message: str) -> None:
    """Raise ``ValueError`` with ``message`` unless ``condition`` holds."""

    if not condition:
        raise ValueError(message)


_BINARY_OPS: dict[type[ast.operator], Callable[[Any, Any], Any]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
    ast.BitAnd: operator.and_,
    ast.BitOr: operator.or_,
    ast.BitXor: operator.xor,
}

_UNARY_OPS: dict[type[ast.unaryop], Callable[[Any], Any]] = {
    ast.USub: operator.neg,
    ast.UAdd: operator.pos,
    ast.Not: operator.not_,
}

_COMPARE_OPS: dict[type[ast.cmpop], Callable[[Any, Any], bool]] = {
    ast.Lt: operator.lt,
    ast.Gt: operator.gt,
    ast.LtE: operator.le,
    ast.GtE: operator.ge,
    ast.Eq: operator.eq,
    ast.NotEq: operator.ne,
    ast.In: lambda left, right: left in right,
    ast.NotIn: lambda left, right: left not in right,
}

_SAFE_CALLS: dict[str, Callable[..., Any]] = {
    "abs": abs,
    "all": all,
    "any": any,
    "bool": bool,
    "dict": dict,
    "enumerate": enumerate,
    "filter": filter,
    "float": float,
    "int": int,
    "len": len,
    "list": list,
    "map": map,
    "max": max,
    "min": min,
    "range": range,
    "reversed": reversed,
    "round": round,
    "set": set,
    "sorted": sorted,
    "str": str,
    "sum": sum,
    "tuple": tuple,
    "zip": zip,
}


def evaluate_expression(source: str, names: Mapping[str, Any] | None = None) -> Any:
    """Evaluate a small literal expression without executing arbitrary code.

    Generators use this to confirm that an expression they emitted really
    produces the answer they recorded. Literals, containers, operators,
    subscripts, comprehensions, lambdas, names from ``names``, and a handful
    of pure builtins are understood; attribute access and statements are not.

    Raises:
        ValueError: If ``source`` uses anything outside that subset.
    """

    try:
        tree = ast.parse(source.strip(), mode="eval")
    except SyntaxError as exc:
        msg = f"'{source}' is not a valid expression"
        raise ValueError(msg) from exc
    return _evaluate(tree.body, dict(names or {}))


def _evaluate(node: ast.AST, names: dict[str, Any]) -> Any:
    if isinstance(node, ast.Constant):
        return node.value
    if isinstance(node, ast.Name):
        if node.id in names:
            return names[node.id]
        if node.id in {"True", "False", "None"}:
            return {"True": True, "False": False, "None": None}[node.id]
        msg = f"Unknown name '{node.id}'"
        raise ValueError(msg)
    if isinstance(node, (ast.List, ast.Tuple, ast.Set)):
        items = [_evaluate(item, names) for item in node.elts]
        if isinstance(node, ast.Tuple):
            return tuple(items)
        return set(items) if isinstance(node, ast.Set) else items
    if isinstance(node, ast.Dict):
        return {
            _evaluate(key, names): _evaluate(value, names)
            for key, value in zip(node.keys, node.values)
            if key is not None
        }
    if isinstance(node, ast.BinOp) and type(node.op) in _BINARY_OPS:
        return _BINARY_OPS[type(node.op)](
            _evaluate(node.left, names), _evaluate(node.right, names)
        )
    if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPS:
        return _UNARY_OPS[type(node.op)](_evaluate(node.operand, names))
    if isinstance(node, ast.BoolOp):
        value: Any = None
        for operand in node.values:
            value = _evaluate(operand, names)
            if isinstance(node.op, ast.And) and not value:
                return value
            if isinstance(node.op, ast.Or) and value:
                return value
        return value
    if isinstance(node, ast.Compare):
        left = _evaluate(node.left, names)
        for op, comparator in zip(node.ops, node.comparators):
            if type(op) not in _COMPARE_OPS:
                break
            right = _evaluate(comparator, names)
            if not _COMPARE_OPS[type(op)](left, right):
                return False
            left = right
        else:
            return True
    if isinstance(node, ast.IfExp):
        if _evaluate(node.test, names):
            return _evaluate(node.body, names)
        return _evaluate(node.orelse, names)
    if isinstance(node, ast.Subscript):
        return _evaluate(node.value, names)[_evaluate(node.slice, names)]
    if isinstance(node, ast.Slice):
        return slice(
            _evaluate(node.lower, names) if node.lower else None,
            _evaluate(node.upper, names) if node.upper else None,
            _evaluate(node.step, names) if node.step else None,
        )
    if isinstance(node, (ast.ListComp, ast.GeneratorExp)):
        return [_evaluate(node.elt, scope) for scope in _scopes(node.generators, names)]
    if isinstance(node, ast.SetComp):
        return {_evaluate(node.elt, scope) for scope in _scopes(node.generators, names)}
    if isinstance(node, ast.DictComp):
        return {
            _evaluate(node.key, scope): _evaluate(node.value, scope)
            for scope in _scopes(node.generators, names)
        }
    if isinstance(node, ast.Lambda):
        return _Lambda(node, names)
    if isinstance(node, ast.JoinedStr):
        return "".join(str(_evaluate(part, names)) for part in node.values)
    if isinstance(node, ast.FormattedValue):
        value = _evaluate(node.value, names)
        if node.conversion == ord("r"):
            value = repr(value)
        elif node.conversion == ord("s"):
            value = str(value)
        spec = _evaluate(node.format_spec, names) if node.format_spec else ""
        return format(value, spec)
    if isinstance(node, ast.Call) and not any(kw.arg is None for kw in node.keywords):
        if isinstance(node.func, ast.Name) and node.func.id in _SAFE_CALLS:
            function: Callable[..., Any] = _SAFE_CALLS[node.func.id]
        else:
            function = _evaluate(node.func, names)
            if not isinstance(function, _Lambda):
                msg = "Only builtins and lambdas may be called"
                raise ValueError(msg)
        args = [_evaluate(arg, names) for arg in node.args]
        kwargs = {kw.arg: _evaluate(kw.value, names) for kw in node.keywords}
        return function(*args, **kwargs)

    msg = f"Unsupported expression element: {type(node).__name__}"
    raise ValueError(msg)


def _scopes(generators: list[ast.comprehension], names: dict[str, Any]) -> Iterator[dict[str, Any]]:
    if not generators:
        yield names
        return
    first, rest = generators[0], generators[1:]
    for item in _evaluate(first.iter, names):
        scope = dict(names)
        _bind(first.target, item, scope)
        if all(_evaluate(condition, scope) for condition in first.ifs):
            yield from _scopes(rest, scope)


def _bind(target: ast.AST, value: Any, scope: dict[str, Any]) -> None:
    if isinstance(target, ast.Name):
        scope[target.id] = value
        return
    if isinstance(target, (ast.Tuple, ast.List)):
        values = list(value)
        if len(values) != len(target.elts):
            msg = "Cannot unpack value into target"
            raise ValueError(msg)
        for element, item in zip(target.elts, values):
            _bind(element, item, scope)
        return
    msg = f"Unsupported assignment target: {type(target).__name__}"
    raise ValueError(msg)


class _Lambda:
    """Callable produced when an evaluated expression contains ``lambda``."""

    def __init__(self, node: ast.Lambda, names: dict[str, Any]) -> None:
        self._node = node
        self._names = names

    def __call__(self, *args: Any) -> Any:
        params = [arg.arg for arg in self._node.args.args]
        defaults = [_evaluate(value, self._names) for value in self._node.args.defaults]
        missing = len(params) - len(args)
        if missing < 0 or missing > len(defaults):
            msg = "Lambda called with the wrong number of arguments"
            raise ValueError(msg)
        values = list(args) + defaults[len(defaults) - missing :]
        scope = dict(self._names)
        scope.update(zip(params, values))
        return _evaluate(self._node.body, scope)

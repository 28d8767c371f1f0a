"""Detect whether an answer uses a particular Python construct.

Answers that parse are inspected through their syntax tree. Fragments that
do not parse on their own fall back to pattern matching after string
literals and comments have been blanked out.
"""

from __future__ import annotations

import ast
import re
from dataclasses import dataclass
from typing import Callable, Iterable

from .interface import ConstructType


@dataclass(frozen=True)
class ConstructCheck:
    detected: bool
    construct_type: ConstructType | None


def _calls(name: str) -> Callable[[ast.AST], bool]:
    def predicate(node: ast.AST) -> bool:
        return (
            isinstance(node, ast.Call)
            and isinstance(node.func, ast.Name)
            and node.func.id == name
        )

    return predicate


def _is_f_string(node: ast.AST) -> bool:
    return isinstance(node, ast.JoinedStr) and any(
        isinstance(part, ast.FormattedValue) for part in node.values
    )


_NODE_PREDICATES: dict[ConstructType, Callable[[ast.AST], bool]] = {
    ConstructType.SLICE: lambda node: isinstance(node, ast.Slice),
    ConstructType.COMPREHENSION: lambda node: isinstance(
        node, (ast.ListComp, ast.SetComp, ast.DictComp)
    ),
    ConstructType.F_STRING: _is_f_string,
    ConstructType.TERNARY: lambda node: isinstance(node, ast.IfExp),
    ConstructType.ENUMERATE: _calls("enumerate"),
    ConstructType.ZIP: _calls("zip"),
    ConstructType.LAMBDA: lambda node: isinstance(node, ast.Lambda),
    ConstructType.GENERATOR_EXPR: lambda node: isinstance(node, ast.GeneratorExp),
}

CONSTRUCT_PATTERNS: dict[ConstructType, re.Pattern[str]] = {
    ConstructType.SLICE: re.compile(r"\[[^\]]*:[^\]]*\]"),
    ConstructType.COMPREHENSION: re.compile(r"[\[{][^}\]]*\bfor\b[^}\]]+\bin\b[^}\]]+[\]}]"),
    ConstructType.F_STRING: re.compile(r"f[\"'][^\"']*\{[^}]+\}[^\"']*[\"']"),
    ConstructType.TERNARY: re.compile(r"\S+\s+if\s+.+\s+else\s+\S+"),
    ConstructType.ENUMERATE: re.compile(r"\benumerate\s*\("),
    ConstructType.ZIP: re.compile(r"\bzip\s*\("),
    ConstructType.LAMBDA: re.compile(r"\blambda\b[^:]*:"),
    ConstructType.GENERATOR_EXPR: re.compile(r"\([^)]*\bfor\b[^)]+\bin\b[^)]+\)"),
}

_F_STRING_LITERAL = re.compile(r"f([\"'])(?:[^\"'\\]|\\.)*?\{[^}]*\}(?:[^\"'\\]|\\.)*?\1")
_STRING_LITERAL = re.compile(r"(?<!f)([\"'])(?:[^\"'\\]|\\.)*?\1")
_COMMENT = re.compile(r"#.*")


def strip_strings_and_comments(code: str) -> str:
    """Blank out string literals and drop comments, keeping f-string shape."""

    cleaned = _F_STRING_LITERAL.sub(r"f\1{x}\1", code)
    cleaned = _STRING_LITERAL.sub('""', cleaned)
    return _COMMENT.sub("", cleaned)


def check_construct(code: str, construct_type: ConstructType | str) -> ConstructCheck:
    """Report whether ``code`` uses ``construct_type``.

    Unknown construct names are reported as not detected.
    """

    try:
        construct = ConstructType(construct_type)
    except ValueError:
        return ConstructCheck(detected=False, construct_type=None)

    try:
        tree = ast.parse(code)
    except (SyntaxError, ValueError):
        pattern = CONSTRUCT_PATTERNS[construct]
        detected = pattern.search(strip_strings_and_comments(code)) is not None
    else:
        predicate = _NODE_PREDICATES[construct]
        detected = any(predicate(node) for node in ast.walk(tree))
    return ConstructCheck(detected=detected, construct_type=construct)


def check_any_construct(
    code: str, construct_types: Iterable[ConstructType | str]
) -> ConstructCheck:
    """Return the first of ``construct_types`` that ``code`` uses."""

    for construct_type in construct_types:
        result = check_construct(code, construct_type)
        if result.detected:
            return result
    return ConstructCheck(detected=False, construct_type=None)

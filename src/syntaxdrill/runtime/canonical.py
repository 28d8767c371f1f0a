"""Token streams and canonical syntax trees for Python source."""

from __future__ import annotations

import ast
import io
import tokenize
from typing import Literal

from ..interface import AstCompareOptions, Token

_IGNORED_TOKENS = frozenset(
    {
        tokenize.COMMENT,
        tokenize.NL,
        tokenize.NEWLINE,
        tokenize.ENCODING,
        tokenize.ENDMARKER,
    }
)


def tokenize_code(code: str) -> list[Token] | None:
    """Return the significant ``(type, string)`` tokens of ``code``.

    Comments and newline tokens are dropped; indentation tokens are kept so
    block structure still counts. ``None`` means the source could not be
    tokenized, for example because a bracket is never closed.
    """

    try:
        return [
            (token.type, token.string)
            for token in tokenize.generate_tokens(io.StringIO(code).readline)
            if token.type not in _IGNORED_TOKENS
        ]
    except (tokenize.TokenError, IndentationError, SyntaxError):
        return None


class Canonicalize(ast.NodeTransformer):
    """Rewrite a tree so equivalent spellings dump identically.

    Function and lambda parameters, loop and comprehension targets,
    ``with``/``except`` names, and names assigned inside a function body are
    renamed to ``_v0``, ``_v1``, ... per scope. Names assigned at module or
    class level keep their spelling, as do names that are never bound
    (builtins, globals supplied by the exercise).
    """

    def __init__(self, options: AstCompareOptions) -> None:
        self.options = options
        self.scopes: list[dict[str, str]] = []
        self.contexts: list[Literal["module", "class", "function"]] = []

    def _push_scope(self) -> None:
        self.scopes.append({})

    def _pop_scope(self) -> None:
        self.scopes.pop()

    def _in_function(self) -> bool:
        return bool(self.contexts) and self.contexts[-1] == "function"

    def _bind_store(self, target: ast.expr) -> ast.expr:
        """Bind an assignment target, renaming only inside a function body."""

        if self._in_function():
            return self._bind_target(target)
        return self.visit(target)

    def _bind(self, name: str) -> str:
        if not self.options.rename_locals or not self.scopes:
            return name
        scope = self.scopes[-1]
        if name not in scope:
            scope[name] = f"_v{len(scope)}"
        return scope[name]

    def _lookup(self, name: str) -> str:
        for scope in reversed(self.scopes):
            if name in scope:
                return scope[name]
        return name

    def _bind_target(self, target: ast.expr) -> ast.expr:
        if isinstance(target, ast.Name):
            target.id = self._bind(target.id)
            return target
        if isinstance(target, (ast.Tuple, ast.List)):
            target.elts = [self._bind_target(element) for element in target.elts]
            return target
        if isinstance(target, ast.Starred):
            target.value = self._bind_target(target.value)
            return target
        return self.visit(target)

    def _bind_arguments(self, arguments: ast.arguments) -> None:
        for arg in (*arguments.posonlyargs, *arguments.args, *arguments.kwonlyargs):
            arg.arg = self._bind(arg.arg)
        if arguments.vararg:
            arguments.vararg.arg = self._bind(arguments.vararg.arg)
        if arguments.kwarg:
            arguments.kwarg.arg = self._bind(arguments.kwarg.arg)

    def _strip_docstring(self, body: list[ast.stmt]) -> list[ast.stmt]:
        if not self.options.ignore_docstrings or not body:
            return body
        first = body[0]
        if (
            isinstance(first, ast.Expr)
            and isinstance(first.value, ast.Constant)
            and isinstance(first.value.value, str)
        ):
            return body[1:] or [ast.Pass()]
        return body

    # Scopes

    def visit_Module(self, node: ast.Module) -> ast.Module:
        self._push_scope()
        self.contexts.append("module")
        node.body = self._strip_docstring(node.body)
        self.generic_visit(node)
        self.contexts.pop()
        self._pop_scope()
        return node

    def visit_Expression(self, node: ast.Expression) -> ast.Expression:
        self._push_scope()
        self.generic_visit(node)
        self._pop_scope()
        return node

    def _visit_function(
        self, node: ast.FunctionDef | ast.AsyncFunctionDef
    ) -> ast.FunctionDef | ast.AsyncFunctionDef:
        node.decorator_list = [self.visit(item) for item in node.decorator_list]
        node.args.defaults = [self.visit(item) for item in node.args.defaults]
        node.args.kw_defaults = [
            self.visit(item) if item is not None else None for item in node.args.kw_defaults
        ]
        self._push_scope()
        self.contexts.append("function")
        self._bind_arguments(node.args)
        node.body = [self.visit(item) for item in self._strip_docstring(node.body)]
        self.contexts.pop()
        self._pop_scope()
        return node

    def visit_FunctionDef(self, node: ast.FunctionDef) -> ast.FunctionDef:
        return self._visit_function(node)

    def visit_AsyncFunctionDef(self, node: ast.AsyncFunctionDef) -> ast.AsyncFunctionDef:
        return self._visit_function(node)

    def visit_ClassDef(self, node: ast.ClassDef) -> ast.ClassDef:
        node.body = self._strip_docstring(node.body)
        self.contexts.append("class")
        self.generic_visit(node)
        self.contexts.pop()
        return node

    def visit_Lambda(self, node: ast.Lambda) -> ast.Lambda:
        node.args.defaults = [self.visit(item) for item in node.args.defaults]
        self._push_scope()
        self.contexts.append("function")
        self._bind_arguments(node.args)
        node.body = self.visit(node.body)
        self.contexts.pop()
        self._pop_scope()
        return node

    def _visit_comprehension_scope(self, node: ast.AST, elements: tuple[str, ...]) -> ast.AST:
        # Generators bind their targets before the element expressions run.
        self._push_scope()
        for generator in node.generators:  # type: ignore[attr-defined]
            generator.iter = self.visit(generator.iter)
            generator.target = self._bind_target(generator.target)
            generator.ifs = [self.visit(condition) for condition in generator.ifs]
        for field in elements:
            setattr(node, field, self.visit(getattr(node, field)))
        self._pop_scope()
        return node

    def visit_ListComp(self, node: ast.ListComp) -> ast.AST:
        return self._visit_comprehension_scope(node, ("elt",))

    def visit_SetComp(self, node: ast.SetComp) -> ast.AST:
        return self._visit_comprehension_scope(node, ("elt",))

    def visit_GeneratorExp(self, node: ast.GeneratorExp) -> ast.AST:
        return self._visit_comprehension_scope(node, ("elt",))

    def visit_DictComp(self, node: ast.DictComp) -> ast.AST:
        return self._visit_comprehension_scope(node, ("key", "value"))

    # Binding statements

    def visit_Assign(self, node: ast.Assign) -> ast.Assign:
        node.value = self.visit(node.value)
        node.targets = [self._bind_store(target) for target in node.targets]
        return node

    def visit_AnnAssign(self, node: ast.AnnAssign) -> ast.AnnAssign:
        node.annotation = self.visit(node.annotation)
        if node.value is not None:
            node.value = self.visit(node.value)
        node.target = self._bind_store(node.target)
        return node

    def visit_AugAssign(self, node: ast.AugAssign) -> ast.AugAssign:
        node.value = self.visit(node.value)
        node.target = self._bind_store(node.target)
        return node

    def visit_NamedExpr(self, node: ast.NamedExpr) -> ast.NamedExpr:
        node.value = self.visit(node.value)
        node.target = self._bind_store(node.target)  # type: ignore[assignment]
        return node

    def visit_For(self, node: ast.For) -> ast.For:
        node.iter = self.visit(node.iter)
        node.target = self._bind_target(node.target)
        node.body = [self.visit(item) for item in node.body]
        node.orelse = [self.visit(item) for item in node.orelse]
        return node

    def visit_withitem(self, node: ast.withitem) -> ast.withitem:
        node.context_expr = self.visit(node.context_expr)
        if node.optional_vars is not None:
            node.optional_vars = self._bind_target(node.optional_vars)
        return node

    def visit_ExceptHandler(self, node: ast.ExceptHandler) -> ast.ExceptHandler:
        if node.type is not None:
            node.type = self.visit(node.type)
        if node.name:
            node.name = self._bind(node.name)
        node.body = [self.visit(item) for item in node.body]
        return node

    def visit_Name(self, node: ast.Name) -> ast.Name:
        node.id = self._lookup(node.id)
        return node

    # Slices

    def visit_Slice(self, node: ast.Slice) -> ast.Slice:
        if not self.options.normalize_slices:
            self.generic_visit(node)
            return node
        if isinstance(node.lower, ast.Constant) and node.lower.value == 0:
            node.lower = None
        elif node.lower is not None:
            node.lower = self.visit(node.lower)
        if node.upper is not None:
            node.upper = self.visit(node.upper)
        if isinstance(node.step, ast.Constant) and node.step.value == 1:
            node.step = None
        elif node.step is not None:
            node.step = self.visit(node.step)
        return node


def _parse(code: str, mode: Literal["auto", "exec", "eval"]) -> ast.AST | None:
    source = code.strip()
    attempts = ("exec", "eval") if mode == "auto" else (mode,)
    for attempt in attempts:
        try:
            return ast.parse(source, mode=attempt)
        except (SyntaxError, ValueError):
            continue
    return None


def normalize_ast(code: str, options: AstCompareOptions | None = None) -> str | None:
    """Return a canonical dump of ``code`` or ``None`` when it does not parse."""

    options = options or AstCompareOptions()
    tree = _parse(code, options.mode)
    if tree is None:
        return None
    tree = Canonicalize(options).visit(tree)
    return ast.dump(tree, include_attributes=False)

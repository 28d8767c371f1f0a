"""Tests for the :mod:`syntaxdrill.registry` module."""

from typing import Any, Mapping

import pytest

from syntaxdrill.errors import (
    ConfigurationError,
    DuplicateRegistrationError,
    UnknownGeneratorError,
)
from syntaxdrill.registry import GeneratorRegistry, RuntimeRegistry, default_generator_registry

BUILTIN_NAMES = {
    "slice-bounds",
    "string-slice",
    "string-ops",
    "string-format",
    "variable-names",
    "arithmetic-values",
    "comparison-logic",
    "bool-logic",
    "operator-chain",
    "type-conversion",
    "truthiness",
    "list-values",
    "index-values",
    "dict-values",
    "tuple-access",
    "set-ops",
    "sorted-list",
    "zip-lists",
    "any-all",
    "list-method",
    "nested-access",
    "comp-filter",
    "comp-mapping",
    "dict-comp",
    "lambda-expr",
    "loop-simulation",
    "conditional-chain",
    "try-except-flow",
    "finally-flow",
    "exception-scenario",
    "function-call",
    "default-args",
}


class _ConstantGenerator:
    """Minimal generator for registry tests."""

    def __init__(self, name: str = "constant") -> None:
        self.name = name

    def generate(self, seed: str) -> dict[str, Any]:
        return {"value": 1}

    def validate(self, params: Mapping[str, Any]) -> bool:
        return params.get("value") == 1


def test_default_registry_holds_every_builtin_generator() -> None:
    registry = default_generator_registry()

    assert set(registry.names()) == BUILTIN_NAMES
    assert len(registry) == len(BUILTIN_NAMES)


def test_default_registries_are_independent() -> None:
    first = default_generator_registry()
    first.clear()

    assert len(first) == 0
    assert len(default_generator_registry()) == len(BUILTIN_NAMES)


def test_registry_returns_registered_generator() -> None:
    generator = _ConstantGenerator()
    registry = GeneratorRegistry([generator])

    assert registry.get("constant") is generator
    assert registry.has("constant")
    assert "constant" in registry


def test_registry_rejects_duplicate_names() -> None:
    registry = GeneratorRegistry([_ConstantGenerator()])

    with pytest.raises(DuplicateRegistrationError) as excinfo:
        registry.register(_ConstantGenerator())

    assert "Duplicate generator name" in str(excinfo.value)


def test_unknown_generator_is_a_configuration_error() -> None:
    registry = GeneratorRegistry()

    with pytest.raises(UnknownGeneratorError):
        registry.get("missing")
    with pytest.raises(ConfigurationError):
        registry.get("missing")
    assert not registry.has("missing")


def test_registry_rejects_objects_without_generator_contract() -> None:
    with pytest.raises(ConfigurationError):
        GeneratorRegistry().register(object())  # type: ignore[arg-type]


def test_runtime_registry_lookup_and_duplicates(make_runtime) -> None:
    runtime = make_runtime()
    runtimes = RuntimeRegistry([runtime])

    assert runtimes.get("python") is runtime
    assert runtimes.get("javascript") is None
    assert runtimes.has("python")
    assert runtimes.languages() == ("python",)

    with pytest.raises(DuplicateRegistrationError):
        runtimes.register(make_runtime())


def test_runtime_registry_clear_terminates_runtimes(make_runtime) -> None:
    runtime = make_runtime()
    runtimes = RuntimeRegistry([runtime])

    runtimes.clear()

    assert runtime.terminated
    assert len(runtimes) == 0

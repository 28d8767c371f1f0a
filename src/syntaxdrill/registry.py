"""Explicit registries for generators and language runtimes.

Both registries are plain objects rather than module-level singletons so tests
can build, reset, and discard them freely. Nothing is discovered implicitly:
callers register every entry, and a second entry under an existing key is a
configuration error.
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator

from .errors import ConfigurationError, DuplicateRegistrationError, UnknownGeneratorError
from .interface import Generator, LanguageRuntime

logger = logging.getLogger(__name__)


class GeneratorRegistry:
    """Map generator names (e.g. ``"slice-bounds"``) to generator instances.

    Args:
        generators: Optional generators registered at construction time,
            primarily used by tests to supply fakes.
    """

    def __init__(self, generators: Iterable[Generator] | None = None) -> None:
        self._generators: dict[str, Generator] = {}
        for generator in generators or ():
            self.register(generator)

    def register(self, generator: Generator) -> None:
        """Add ``generator`` under its ``name``.

        Raises:
            DuplicateRegistrationError: If the name is already registered.
            ConfigurationError: If ``generator`` lacks the generator contract.
        """

        if not isinstance(generator, Generator):
            msg = f"Object {generator!r} does not implement the Generator interface"
            raise ConfigurationError(msg)

        name = generator.name
        if name in self._generators:
            msg = f"Duplicate generator name '{name}'"
            raise DuplicateRegistrationError(msg)
        self._generators[name] = generator

    def has(self, name: str) -> bool:
        return name in self._generators

    def get(self, name: str) -> Generator:
        """Return the generator registered as ``name``.

        Raises:
            UnknownGeneratorError: If ``name`` is unknown.
        """

        try:
            return self._generators[name]
        except KeyError as exc:
            msg = f"Unknown generator '{name}'"
            raise UnknownGeneratorError(msg) from exc

    def names(self) -> tuple[str, ...]:
        """Return the registered generator names sorted alphabetically."""

        return tuple(sorted(self._generators))

    def clear(self) -> None:
        self._generators.clear()

    def __contains__(self, name: object) -> bool:
        return name in self._generators

    def __iter__(self) -> Iterator[Generator]:
        return iter(self._generators[name] for name in self.names())

    def __len__(self) -> int:
        return len(self._generators)


def default_generator_registry() -> GeneratorRegistry:
    """Build a registry holding every bundled generator."""

    from .generators import BUILTIN_GENERATORS

    return GeneratorRegistry(generator_cls() for generator_cls in BUILTIN_GENERATORS)


class RuntimeRegistry:
    """Map language keys (e.g. ``"python"``) to sandboxed runtimes.

    Lookup is read-only; :meth:`clear` terminates every registered runtime so
    a test can start from a clean slate.
    """

    def __init__(self, runtimes: Iterable[LanguageRuntime] | None = None) -> None:
        self._runtimes: dict[str, LanguageRuntime] = {}
        for runtime in runtimes or ():
            self.register(runtime)

    def register(self, runtime: LanguageRuntime) -> None:
        """Add ``runtime`` under its ``language``.

        Raises:
            DuplicateRegistrationError: If the language already has a runtime.
            ConfigurationError: If ``runtime`` lacks the runtime contract.
        """

        if not isinstance(runtime, LanguageRuntime):
            msg = f"Object {runtime!r} does not implement the LanguageRuntime interface"
            raise ConfigurationError(msg)

        language = runtime.language
        if language in self._runtimes:
            msg = f"Runtime for language '{language}' is already registered"
            raise DuplicateRegistrationError(msg)
        self._runtimes[language] = runtime

    def get(self, language: str) -> LanguageRuntime | None:
        """Return the runtime for ``language`` or ``None`` when absent."""

        return self._runtimes.get(language)

    def has(self, language: str) -> bool:
        return language in self._runtimes

    def languages(self) -> tuple[str, ...]:
        return tuple(sorted(self._runtimes))

    def clear(self) -> None:
        """Terminate and forget every registered runtime."""

        for language, runtime in list(self._runtimes.items()):
            try:
                runtime.terminate()
            except Exception:  # pragma: no cover - teardown must reach every runtime
                logger.exception("Failed to terminate runtime for '%s'", language)
        self._runtimes.clear()

    def __len__(self) -> int:
        return len(self._runtimes)

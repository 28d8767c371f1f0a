"""Exception taxonomy shared by the syntaxdrill engine.

Configuration problems are fatal and never shown to learners. Runtime and
execution failures are raised to the component that asked for the work so a
grading policy can decide whether to fall back. A mismatched answer is not an
error and has no exception type.
"""

from __future__ import annotations


class SyntaxDrillError(RuntimeError):
    """Base class for every error raised by the engine."""


class ConfigurationError(SyntaxDrillError):
    """Raised when exercises, generators, or runtimes are wired incorrectly."""


class UnknownGeneratorError(ConfigurationError):
    """Raised when an exercise names a generator that was never registered."""


class DuplicateRegistrationError(ConfigurationError):
    """Raised when a registry already holds an entry under the same key."""


class TemplateError(ConfigurationError):
    """Raised when a template references a parameter the generator did not produce."""


class GenerationInconsistencyError(SyntaxDrillError):
    """Raised when a generator's output fails its own ``validate`` check."""


class RuntimeUnavailableError(SyntaxDrillError):
    """Raised when a sandboxed runtime cannot service a request."""


class ExecutionError(SyntaxDrillError):
    """Raised when execution-based verification could not produce output.

    Attributes:
        infra: ``True`` when the failure came from the sandbox itself rather
            than from the code that was executed.
    """

    def __init__(self, message: str, *, infra: bool = False) -> None:
        super().__init__(message)
        self.infra = infra


class ExecutionTimeout(ExecutionError):
    """Raised when execution exceeded its configured timeout."""

    def __init__(self, message: str) -> None:
        super().__init__(message, infra=True)

"""Core interfaces shared by syntaxdrill components.

Generators, the renderer, the grading pipeline, and language runtimes only
meet through the models and protocols defined here, which keeps each of them
replaceable without touching the others.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal, Mapping, Protocol, Sequence, Union, runtime_checkable

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

ParamValue = Union[str, int, float, bool, list[Union[str, int, float]]]
GeneratorParams = dict[str, ParamValue]
Token = tuple[int, str]


class ExerciseKind(str, Enum):
    """How the learner answers an exercise."""

    WRITE = "write"
    FILL_IN = "fill-in"
    PREDICT = "predict"


class GradingMethod(str, Enum):
    """Strategy that produced a grading verdict."""

    EXACT = "exact"
    TOKEN = "token"
    AST = "ast"
    EXECUTION = "execution"


class ConstructType(str, Enum):
    """Language constructs an exercise may ask the learner to practise."""

    SLICE = "slice"
    COMPREHENSION = "comprehension"
    F_STRING = "f-string"
    TERNARY = "ternary"
    ENUMERATE = "enumerate"
    ZIP = "zip"
    LAMBDA = "lambda"
    GENERATOR_EXPR = "generator-expr"


class TargetConstruct(BaseModel):
    """Construct checked after a correct answer to decide on coaching."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    type: ConstructType = Field(..., description="Construct the exercise is teaching.")
    feedback: str | None = Field(
        default=None,
        description="Tip shown when a correct answer avoided the construct.",
    )


class VariantOverrides(BaseModel):
    """Fields a generator-selected variant replaces before rendering."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    prompt: str | None = None
    expected_answer: str | None = None
    accepted_solutions: tuple[str, ...] | None = None
    hints: tuple[str, ...] | None = None
    code: str | None = None
    template: str | None = None


class Exercise(BaseModel):
    """Authored exercise template supplied by the catalog.

    Templates may contain ``{{key}}`` placeholders that are resolved from the
    parameters of the named ``generator``. Exercises without a generator are
    static and render verbatim.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    slug: str = Field(..., min_length=1, description="Stable exercise identifier.")
    title: str = Field(default="", description="Short human readable title.")
    language: str = Field(default="python", description="Target language key.")
    kind: ExerciseKind = Field(
        default=ExerciseKind.WRITE,
        validation_alias=AliasChoices("kind", "type", "exercise_type"),
        description="Answer style: write, fill-in, or predict.",
    )
    concept: str | None = Field(default=None, description="Concept the exercise drills.")
    difficulty: int = Field(default=1, ge=1, le=3)
    prompt: str = Field(..., description="Prompt template shown to the learner.")
    expected_answer: str = Field(..., description="Canonical answer template.")
    accepted_solutions: tuple[str, ...] = Field(
        default=(), description="Alternative answer templates accepted as correct."
    )
    hints: tuple[str, ...] = Field(default=())
    generator: str | None = Field(
        default=None, description="Registered generator name for dynamic exercises."
    )
    code: str | None = Field(
        default=None, description="Snippet executed for predict-output exercises."
    )
    template: str | None = Field(
        default=None, description="Fill-in template with a blank for the learner."
    )
    verification_template: str | None = Field(
        default=None,
        description="Wrapper with an ``{{answer}}`` slot used for execution checks.",
    )
    verification_script: str | None = Field(
        default=None, description="Assertions appended to the learner's code."
    )
    verify_by_execution: bool = Field(default=False)
    grading_strategy: GradingMethod | None = Field(
        default=None, description="Strategy tried before the kind's defaults."
    )
    target_construct: TargetConstruct | None = None
    variants: dict[str, VariantOverrides] = Field(default_factory=dict)


class RenderedExercise(Exercise):
    """Exercise with every placeholder resolved and provenance attached."""

    generated_params: GeneratorParams | None = Field(
        default=None, serialization_alias="_generatedParams"
    )
    seed: str | None = Field(default=None, serialization_alias="_seed")


class GradingResult(BaseModel):
    """Verdict for one graded submission."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    is_correct: bool
    used_target_construct: bool | None = None
    coaching_feedback: str | None = None
    grading_method: GradingMethod
    normalized_user_answer: str
    normalized_expected_answer: str
    matched_alternative: str | None = None


class TokenCompareResult(BaseModel):
    """Outcome of comparing token streams."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    match: bool
    matched_alternative: str | None = None


class AstCompareResult(TokenCompareResult):
    """Outcome of comparing canonical syntax trees.

    ``infra_available`` is ``False`` when the comparison could not run at all;
    ``match`` carries no meaning in that case.
    """

    infra_available: bool
    error: str | None = None


class AstCompareOptions(BaseModel):
    """Normalizations applied before syntax trees are compared."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    mode: Literal["auto", "exec", "eval"] = "auto"
    rename_locals: bool = True
    normalize_slices: bool = True
    ignore_docstrings: bool = True


class ExecutionResult(BaseModel):
    """Captured outcome of running code in a sandbox."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    success: bool
    output: str | None = None
    error: str | None = None

    @model_validator(mode="after")
    def validate_exclusive(self) -> "ExecutionResult":
        if self.success and self.error is not None:
            raise ValueError("successful executions cannot carry an error")
        if not self.success and (self.output is not None or not self.error):
            raise ValueError("failed executions need an error and no output")
        return self

    @classmethod
    def ok(cls, output: str) -> "ExecutionResult":
        return cls(success=True, output=output, error=None)

    @classmethod
    def failed(cls, error: str) -> "ExecutionResult":
        return cls(success=False, output=None, error=error)


@runtime_checkable
class Generator(Protocol):
    """Contract for pure parameter generators.

    For every seed, ``validate(generate(seed))`` must be ``True``.
    """

    @property
    def name(self) -> str:
        """Unique registry name, e.g. ``'slice-bounds'``."""

    def generate(self, seed: str) -> GeneratorParams:
        """Produce parameters deterministically from ``seed``."""

    def validate(self, params: Mapping[str, Any]) -> bool:
        """Return ``True`` when ``params`` satisfy the generator's constraints."""


@runtime_checkable
class LanguageRuntime(Protocol):
    """Contract a sandboxed language integration must satisfy."""

    @property
    def language(self) -> str:
        """Language key the runtime is registered under."""

    async def initialize(self) -> None:
        """Prepare the sandbox; safe to call more than once."""

    def is_ready(self) -> bool:
        """Return ``True`` once the sandbox can service requests."""

    async def execute(self, code: str, *, timeout_ms: int | None = None) -> ExecutionResult:
        """Run ``code`` and capture its standard output."""

    async def tokenize(self, code: str) -> list[Token] | None:
        """Return significant tokens, or ``None`` when ``code`` cannot be tokenized."""

    async def compare_by_tokens(
        self,
        user_answer: str,
        expected_answer: str,
        accepted_solutions: Sequence[str] = (),
    ) -> TokenCompareResult:
        """Compare answers token by token."""

    async def compare_by_ast(
        self,
        user_answer: str,
        expected_answer: str,
        accepted_solutions: Sequence[str] = (),
        options: AstCompareOptions | None = None,
    ) -> AstCompareResult:
        """Compare answers by canonical syntax tree."""

    def terminate(self) -> None:
        """Release sandbox resources."""

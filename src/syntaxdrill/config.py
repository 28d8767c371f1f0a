"""Engine settings loaded from YAML files and the environment."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigurationError
from .interface import AstCompareOptions, ExerciseKind, GradingMethod

ENVIRONMENT_VARIABLE = "SYNTAXDRILL_ENV"
DEFAULT_ENVIRONMENT = "production"
DEFAULT_COACHING_FEEDBACK = "Great job! Consider trying the suggested approach next time."


def _default_environment() -> str:
    return os.environ.get(ENVIRONMENT_VARIABLE, DEFAULT_ENVIRONMENT)


class EngineSettings(BaseModel):
    """Tunable behavior of the grading pipeline.

    Attributes:
        environment: Deployment name; telemetry is only logged in
            ``"development"``. Defaults to ``$SYNTAXDRILL_ENV``.
        execution_timeout_ms: Upper bound for every sandboxed execution.
        default_coaching_feedback: Tip used when an exercise names a target
            construct without its own feedback.
        ast_options: Normalizations applied by AST comparison.
        strategy_overrides: Replacement strategy chains keyed by exercise
            kind. Exact matching is appended when a chain omits it.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    environment: str = Field(default_factory=_default_environment)
    execution_timeout_ms: int = Field(default=5000, gt=0)
    default_coaching_feedback: str = Field(default=DEFAULT_COACHING_FEEDBACK, min_length=1)
    ast_options: AstCompareOptions = Field(default_factory=AstCompareOptions)
    strategy_overrides: dict[ExerciseKind, tuple[GradingMethod, ...]] = Field(
        default_factory=dict
    )

    @field_validator("strategy_overrides")
    @classmethod
    def validate_overrides(
        cls, value: dict[ExerciseKind, tuple[GradingMethod, ...]]
    ) -> dict[ExerciseKind, tuple[GradingMethod, ...]]:
        for kind, chain in value.items():
            if not chain:
                raise ValueError(f"Strategy chain for '{kind.value}' must not be empty")
            if len(set(chain)) != len(chain):
                raise ValueError(f"Strategy chain for '{kind.value}' repeats a strategy")
        return value

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


def settings_template() -> dict[str, Any]:
    """Return the default settings as a YAML-friendly mapping."""

    return EngineSettings(environment=DEFAULT_ENVIRONMENT).model_dump(mode="json")


def load_settings(path: Path | None) -> EngineSettings:
    """Load :class:`EngineSettings` from the YAML file at ``path``.

    Args:
        path: Settings file, or ``None`` for defaults.

    Returns:
        The validated settings.

    Raises:
        ConfigurationError: If the file cannot be read, is not YAML, or does
            not describe valid settings.
    """

    if path is None:
        return EngineSettings()

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Unable to read settings file: {exc}") from exc

    try:
        data = yaml.safe_load(raw) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError("Settings file contains invalid YAML") from exc

    if not isinstance(data, dict):
        raise ConfigurationError("Settings file must define a mapping")

    try:
        return EngineSettings.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Settings file is invalid: {exc}") from exc

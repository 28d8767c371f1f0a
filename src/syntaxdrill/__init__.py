"""Seeded exercise generation and layered grading for syntax practice."""

from .attempts import AttemptRecord, build_attempt_record
from .grading import GradingPipeline, GradingReport, grade_answer, should_show_coaching
from .interface import Exercise, GradingResult, RenderedExercise
from .quality import infer_quality
from .registry import GeneratorRegistry, RuntimeRegistry, default_generator_registry
from .render import render_exercise, render_exercises

__all__ = [
    "AttemptRecord",
    "Exercise",
    "GeneratorRegistry",
    "GradingPipeline",
    "GradingReport",
    "GradingResult",
    "RenderedExercise",
    "RuntimeRegistry",
    "build_attempt_record",
    "default_generator_registry",
    "grade_answer",
    "infer_quality",
    "render_exercise",
    "render_exercises",
    "should_show_coaching",
]

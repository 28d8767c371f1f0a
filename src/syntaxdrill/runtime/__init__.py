"""Concrete language runtimes."""

from .python import PythonRuntime

__all__ = ["PythonRuntime"]

"""Exercises package."""

from .catalog import Exercise, ExerciseCatalog, EXERCISES
from .gate import ExerciseGate, ExerciseProvider, FALLBACK_EXERCISE

__all__ = [
    "Exercise",
    "ExerciseCatalog",
    "EXERCISES",
    "ExerciseGate",
    "ExerciseProvider",
    "FALLBACK_EXERCISE",
]

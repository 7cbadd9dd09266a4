"""UI package."""

from .banner import BannerToast
from .exercise_dialog import ExerciseDialog

__all__ = [
    "BannerToast",
    "ExerciseDialog",
]

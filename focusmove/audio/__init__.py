"""Audio package."""

from .sounds import SoundManager, CUE_NAMES, GENERATORS

__all__ = ["SoundManager", "CUE_NAMES", "GENERATORS"]

"""Terminal presentation for VocalCheck."""

from .result_screen import ResultScreen

__all__ = ["ResultScreen"]

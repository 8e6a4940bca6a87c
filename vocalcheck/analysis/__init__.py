"""Analysis of voice samples through an external generative engine."""

from .client import AnalysisClient, serialize_history
from .engine import GenerativeEngine, GeminiEngine
from .fallback import best_effort

__all__ = [
    "AnalysisClient",
    "serialize_history",
    "GenerativeEngine",
    "GeminiEngine",
    "best_effort",
]

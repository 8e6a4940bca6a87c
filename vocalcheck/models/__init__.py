"""Data models for the VocalCheck application."""

from .audio import AudioPayload, AudioStats, AudioFrame, RECORDED_MIME_TYPE
from .analysis import (
    MAX_HISTORY_ENTRIES,
    Indicator,
    RiskLevel,
    ConfidenceLevel,
    AnalysisResult,
    HistoryEntry,
    HistoryLog,
    TrendPoint,
)
from .session import SessionState, SessionEvent

__all__ = [
    "AudioPayload",
    "AudioStats",
    "AudioFrame",
    "RECORDED_MIME_TYPE",
    # Analysis and history
    "MAX_HISTORY_ENTRIES",
    "Indicator",
    "RiskLevel",
    "ConfidenceLevel",
    "AnalysisResult",
    "HistoryEntry",
    "HistoryLog",
    "TrendPoint",
    # Session
    "SessionState",
    "SessionEvent",
]

"""Persistence of analysis history."""

from .history_store import HistoryStore, trend_points, find_entry, entry_audio, DEFAULT_SLOT_NAME

__all__ = [
    "HistoryStore",
    "trend_points",
    "find_entry",
    "entry_audio",
    "DEFAULT_SLOT_NAME",
]

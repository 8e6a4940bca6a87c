"""Durable, size-bounded log of past analysis results."""

import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import List, Sequence

from ..analysis.schema import parse_history_entry
from ..audio.encoder import decode
from ..exceptions import HistoryEntryNotFoundError, PersistenceError
from ..models.analysis import MAX_HISTORY_ENTRIES, HistoryEntry, HistoryLog, TrendPoint
from ..models.audio import AudioPayload

logger = logging.getLogger(__name__)

DEFAULT_SLOT_NAME = "voiceAnalysisHistory"


class HistoryStore:
    """Stores the analysis history in a single JSON file.

    The file holds a JSON array of history entries, newest first, never
    longer than MAX_HISTORY_ENTRIES.
    """

    def __init__(self, data_dir: str = "./data", slot_name: str = DEFAULT_SLOT_NAME):
        """Initialize history store.

        Args:
            data_dir: Base directory for stored data
            slot_name: Fixed name of the durable slot
        """
        self.data_dir = Path(data_dir)
        self.slot_name = slot_name
        self.slot_path = self.data_dir / f"{slot_name}.json"

        logger.info(f"HistoryStore initialized with slot: {self.slot_path}")

    def load(self) -> HistoryLog:
        """Read the history log.

        Missing or corrupt data yields an empty log; corruption is logged,
        never raised.

        Returns:
            History entries, newest first
        """
        if not self.slot_path.exists():
            logger.debug(f"No history slot at {self.slot_path}")
            return []

        try:
            with open(self.slot_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            if not isinstance(data, list):
                raise ValueError(f"expected a JSON array, got {type(data).__name__}")
            entries = [parse_history_entry(item) for item in data]
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load history from {self.slot_path}: {e}")
            return []

        if len(entries) > MAX_HISTORY_ENTRIES:
            logger.warning(f"History slot holds {len(entries)} entries, keeping newest {MAX_HISTORY_ENTRIES}")
            entries = entries[:MAX_HISTORY_ENTRIES]

        logger.info(f"Loaded {len(entries)} history entries")
        return entries

    def save(self, log: Sequence[HistoryEntry]) -> None:
        """Overwrite the slot with the full log.

        The file is replaced atomically, so a failed write leaves the
        previous contents in place.

        Raises:
            PersistenceError: If the slot cannot be written
        """
        payload = [entry.to_dict() for entry in log]
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self.slot_name}.", suffix=".tmp", dir=self.data_dir)
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    json.dump(payload, f, indent=2, ensure_ascii=False)
                os.replace(tmp_name, self.slot_path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            logger.error(f"Error saving history: {e}")
            raise PersistenceError(f"Failed to save history to {self.slot_path}: {e}") from e

        logger.info(f"History saved: {len(payload)} entries")

    @staticmethod
    def append(log: Sequence[HistoryEntry], entry: HistoryEntry) -> HistoryLog:
        """Return a new log with ``entry`` first, trimmed to the newest entries.

        The input log is left untouched.
        """
        return [entry, *log][:MAX_HISTORY_ENTRIES]


def find_entry(log: Sequence[HistoryEntry], entry_id: str) -> HistoryEntry:
    for entry in log:
        if entry.id == entry_id:
            return entry
    raise HistoryEntryNotFoundError(entry_id)


def entry_audio(entry: HistoryEntry) -> AudioPayload:
    """Decode the recording stored with a history entry for playback."""
    return decode(entry.audio_url, source="history")


def trend_points(log: Sequence[HistoryEntry]) -> List[TrendPoint]:
    """Build the history chart series, oldest entry first.

    Args:
        log: History entries, newest first

    Returns:
        One point per entry with its date, indicator count and confidence
    """
    points = []
    for entry in reversed(log):
        points.append(TrendPoint(
            label=_entry_date(entry),
            indicator_count=len(entry.result.indicators),
            confidence_score=entry.result.confidence_score,
            entry_id=entry.id,
        ))
    return points


def _entry_date(entry: HistoryEntry) -> str:
    try:
        return datetime.fromisoformat(entry.id).date().isoformat()
    except (TypeError, ValueError):
        return entry.timestamp

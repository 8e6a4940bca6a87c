"""Session-related data models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict


class SessionState(Enum):
    """States of the recording/analysis session."""
    IDLE = "idle"
    RECORDING = "recording"
    CAPTURED = "captured"
    ANALYZING = "analyzing"
    RESULT_READY = "result-ready"


@dataclass
class SessionEvent:
    """Session lifecycle event."""
    event_id: str
    event_type: str  # "state_changed", "analysis_completed", "warning", ...
    timestamp: datetime = field(default_factory=datetime.now)
    metadata: Dict[str, Any] = field(default_factory=dict)

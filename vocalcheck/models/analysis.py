"""Analysis result and history data models."""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

MAX_HISTORY_ENTRIES = 10


class Indicator(Enum):
    """Acoustic features the analyzer may flag."""
    VOCAL_TREMOR = "Vocal Tremor"
    HYPOPHONIA = "Hypophonia"
    MONOTONE_PITCH = "Monotone Pitch"
    DYSARTHRIA = "Dysarthria"
    BRADYKINESIA = "Bradykinesia in Speech"


class RiskLevel(Enum):
    """Ordinal risk tier derived by the analyzer from the indicator count."""
    NONE = "Level 0"
    FEW = "Level 1"
    MULTIPLE = "Level 2"

    @classmethod
    def for_indicator_count(cls, count: int) -> "RiskLevel":
        if count <= 0:
            return cls.NONE
        if count <= 2:
            return cls.FEW
        return cls.MULTIPLE


class ConfidenceLevel(Enum):
    """Advisory confidence label, authoritative as given by the analyzer."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


@dataclass(frozen=True)
class AnalysisResult:
    """Structured verdict returned by the analysis capability."""
    indicators: Tuple[Indicator, ...]
    risk_level: RiskLevel
    summary: str
    confidence_score: int
    confidence_level: ConfidenceLevel
    comparison_with_history: Optional[str] = None

    def with_comparison(self, comparison: Optional[str]) -> "AnalysisResult":
        return replace(self, comparison_with_history=comparison)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the camelCase keys of the wire format."""
        data: Dict[str, Any] = {
            "indicators": [indicator.value for indicator in self.indicators],
            "riskLevel": self.risk_level.value,
            "summary": self.summary,
            "confidenceScore": self.confidence_score,
            "confidenceLevel": self.confidence_level.value,
        }
        if self.comparison_with_history is not None:
            data["comparisonWithHistory"] = self.comparison_with_history
        return data


@dataclass(frozen=True)
class HistoryEntry:
    """A persisted analysis result with identity, timestamp and embedded audio."""
    id: str
    timestamp: str
    audio_url: str
    result: AnalysisResult

    def to_dict(self) -> Dict[str, Any]:
        data = {"id": self.id, "timestamp": self.timestamp, "audioUrl": self.audio_url}
        data.update(self.result.to_dict())
        return data

    def context_dict(self) -> Dict[str, Any]:
        """Serialize for history context, without identity or raw audio."""
        data = {"timestamp": self.timestamp}
        data.update(self.result.to_dict())
        return data


# Newest first, at most MAX_HISTORY_ENTRIES long.
HistoryLog = List[HistoryEntry]


@dataclass
class TrendPoint:
    """One bar of the history trend chart."""
    label: str
    indicator_count: int
    confidence_score: int
    entry_id: str = field(default="", compare=False)

"""Validation of engine replies at the analysis trust boundary."""

import json
import re
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from ..audio.encoder import is_data_uri
from ..models.analysis import AnalysisResult, ConfidenceLevel, HistoryEntry, Indicator, RiskLevel

_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*(?P<body>.*?)\s*```$", re.DOTALL)
_PARENTHETICAL = re.compile(r"\s*\(.*?\)\s*")

INDICATOR_ALIASES = {
    "vocal tremor": Indicator.VOCAL_TREMOR,
    "tremor": Indicator.VOCAL_TREMOR,
    "hypophonia": Indicator.HYPOPHONIA,
    "softness": Indicator.HYPOPHONIA,
    "monotone pitch": Indicator.MONOTONE_PITCH,
    "monotone": Indicator.MONOTONE_PITCH,
    "dysarthria": Indicator.DYSARTHRIA,
    "slurred speech": Indicator.DYSARTHRIA,
    "bradykinesia in speech": Indicator.BRADYKINESIA,
    "bradykinesia": Indicator.BRADYKINESIA,
    "slow rate": Indicator.BRADYKINESIA,
}


def normalize_indicator(value: Any) -> Indicator:
    """Map an indicator name from the engine onto the fixed vocabulary.

    Matching ignores case and a trailing parenthetical, so
    ``"Hypophonia (Softness)"`` maps to :attr:`Indicator.HYPOPHONIA`.
    """
    if isinstance(value, Indicator):
        return value
    if not isinstance(value, str):
        raise ValueError(f"indicator must be a string, got {type(value).__name__}")
    key = value.strip().casefold()
    if key not in INDICATOR_ALIASES:
        key = _PARENTHETICAL.sub(" ", key).strip()
    if key not in INDICATOR_ALIASES:
        raise ValueError(f"unknown indicator: {value!r}")
    return INDICATOR_ALIASES[key]


class PrimaryAnalysisPayload(BaseModel):
    """Reply of the primary analysis call."""

    model_config = ConfigDict(populate_by_name=True)

    indicators: List[Indicator]
    risk_level: RiskLevel = Field(alias="riskLevel")
    summary: str
    confidence_score: int = Field(alias="confidenceScore", ge=0, le=100, strict=True)
    confidence_level: ConfidenceLevel = Field(alias="confidenceLevel")

    @field_validator("indicators", mode="before")
    @classmethod
    def _normalize_indicators(cls, value: Any) -> List[Indicator]:
        if not isinstance(value, list):
            raise ValueError("indicators must be an array")
        return [normalize_indicator(item) for item in value]

    @field_validator("indicators")
    @classmethod
    def _reject_duplicates(cls, value: List[Indicator]) -> List[Indicator]:
        if len(set(value)) != len(value):
            raise ValueError("indicators must not contain duplicates")
        return value

    @model_validator(mode="after")
    def _check_risk_level(self) -> "PrimaryAnalysisPayload":
        expected = RiskLevel.for_indicator_count(len(self.indicators))
        if self.risk_level is not expected:
            raise ValueError(
                f"riskLevel {self.risk_level.value} does not match "
                f"{len(self.indicators)} indicator(s), expected {expected.value}"
            )
        return self

    def to_result(self) -> AnalysisResult:
        return AnalysisResult(
            indicators=tuple(self.indicators),
            risk_level=self.risk_level,
            summary=self.summary,
            confidence_score=self.confidence_score,
            confidence_level=self.confidence_level,
        )


class HistoryEntryPayload(PrimaryAnalysisPayload):
    """One entry read back from the history slot.

    Holds the stored verdict to the same rules as a fresh reply, plus a
    non-empty id and playable audio.
    """

    id: str = Field(min_length=1)
    timestamp: str
    audio_url: str = Field(alias="audioUrl")
    comparison_with_history: Optional[str] = Field(default=None, alias="comparisonWithHistory")

    @field_validator("audio_url")
    @classmethod
    def _require_data_uri(cls, value: str) -> str:
        if not is_data_uri(value):
            raise ValueError("audioUrl must be a base64 data URI")
        return value

    def to_entry(self) -> HistoryEntry:
        return HistoryEntry(
            id=self.id,
            timestamp=self.timestamp,
            audio_url=self.audio_url,
            result=self.to_result().with_comparison(self.comparison_with_history),
        )


class ComparisonPayload(BaseModel):
    """Reply of the historical comparison call."""

    model_config = ConfigDict(populate_by_name=True)

    trend_analysis: str = Field(alias="trendAnalysis", min_length=1)
    recommendations: str


def parse_json_reply(text: str) -> Any:
    """Parse an engine reply as JSON, tolerating a Markdown code fence.

    Raises:
        ValueError: If the reply is not JSON
    """
    text = text.strip()
    match = _FENCE_PATTERN.match(text)
    if match:
        text = match.group("body")
    return json.loads(text)


def parse_primary_reply(text: str) -> AnalysisResult:
    """Parse and validate a primary analysis reply.

    Raises:
        ValueError: If the reply is not JSON or violates the schema
    """
    data = parse_json_reply(text)
    if not isinstance(data, dict):
        raise ValueError("analysis reply must be a JSON object")
    # comparisonWithHistory is never taken from the primary call
    data.pop("comparisonWithHistory", None)
    return PrimaryAnalysisPayload.model_validate(data).to_result()


def parse_history_entry(data: Any) -> HistoryEntry:
    """Validate one stored history entry.

    Raises:
        ValueError: If the entry is malformed
    """
    if not isinstance(data, dict):
        raise ValueError("history entry must be a JSON object")
    return HistoryEntryPayload.model_validate(data).to_entry()


def parse_comparison_reply(text: str) -> ComparisonPayload:
    data = parse_json_reply(text)
    if not isinstance(data, dict):
        raise ValueError("comparison reply must be a JSON object")
    return ComparisonPayload.model_validate(data)


__all__ = [
    "PrimaryAnalysisPayload",
    "ComparisonPayload",
    "HistoryEntryPayload",
    "ValidationError",
    "normalize_indicator",
    "parse_json_reply",
    "parse_primary_reply",
    "parse_comparison_reply",
    "parse_history_entry",
]

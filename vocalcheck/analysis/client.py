"""Analysis client: primary verdict plus optional historical comparison."""

import json
import logging
from typing import Any, Dict, List, Optional, Sequence, Union

from ..audio.encoder import is_data_uri
from ..exceptions import AnalysisUnavailableError
from ..models.analysis import AnalysisResult, HistoryEntry
from .engine import GenerativeEngine
from .fallback import best_effort
from .prompts import PRIMARY_ANALYSIS_PROMPT, build_comparison_prompt
from .schema import parse_comparison_reply, parse_primary_reply

logger = logging.getLogger(__name__)

PriorResult = Union[AnalysisResult, HistoryEntry]


class AnalysisClient:
    """Invokes the external analysis capability and validates what comes back.

    Each call makes a single attempt per step; there are no retries.
    """

    def __init__(self, engine: GenerativeEngine):
        """Initialize analysis client.

        Args:
            engine: Generative engine implementing the GenerativeEngine protocol
        """
        self.engine = engine

    async def analyze(self, audio: str, prior_history: Sequence[PriorResult] = ()) -> AnalysisResult:
        """Analyze an encoded voice sample.

        Args:
            audio: Audio as a ``data:<mime>;base64,<data>`` URI
            prior_history: Earlier results, newest first

        Returns:
            The primary result, with ``comparison_with_history`` set only if
            history was given and the comparison step succeeded

        Raises:
            AnalysisUnavailableError: If the primary analysis fails
        """
        primary = await self.analyze_primary(audio)

        if not prior_history:
            logger.debug("No history supplied, skipping comparison")
            return primary

        comparison = await best_effort(
            lambda: self.compare_with_history(primary, prior_history),
            "Historical comparison",
        )
        if comparison is None:
            return primary
        return primary.with_comparison(comparison)

    async def analyze_primary(self, audio: str) -> AnalysisResult:
        """Run the primary analysis on the audio alone.

        Raises:
            AnalysisUnavailableError: On engine failure or an invalid reply
        """
        if not is_data_uri(audio):
            raise AnalysisUnavailableError("Audio must be a base64 data URI")

        try:
            reply = await self.engine.generate(PRIMARY_ANALYSIS_PROMPT, audio=audio)
        except Exception as e:
            logger.error(f"Primary analysis request failed: {e}")
            raise AnalysisUnavailableError() from e

        try:
            result = parse_primary_reply(reply)
        except ValueError as e:
            logger.error(f"Primary analysis returned an invalid verdict: {e}")
            raise AnalysisUnavailableError() from e

        logger.info(
            f"Primary analysis: {result.risk_level.value}, "
            f"{len(result.indicators)} indicator(s), confidence {result.confidence_score}"
        )
        return result

    async def compare_with_history(self, current: AnalysisResult, prior_history: Sequence[PriorResult]) -> str:
        """Ask for a trend narrative comparing the current result to history.

        Returns:
            The ``trendAnalysis`` text

        Raises:
            EngineError: If the request fails
            ValueError: If the reply is invalid
        """
        prompt = build_comparison_prompt(
            current_voice_analysis=json.dumps(current.to_dict()),
            historical_voice_data=serialize_history(prior_history),
        )
        reply = await self.engine.generate(prompt)
        comparison = parse_comparison_reply(reply)
        logger.info("Historical comparison completed")
        return comparison.trend_analysis


def context_record(item: PriorResult) -> Dict[str, Any]:
    if isinstance(item, HistoryEntry):
        return item.context_dict()
    return item.to_dict()


def serialize_history(prior_history: Sequence[PriorResult], indent: Optional[int] = 2) -> str:
    """Serialize prior results as a JSON array, leaving out ids and audio."""
    records: List[Dict[str, Any]] = [context_record(item) for item in prior_history]
    return json.dumps(records, indent=indent)

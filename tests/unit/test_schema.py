"""Unit tests for validation of engine replies."""

import json

import pytest

from vocalcheck.analysis.schema import (
    normalize_indicator,
    parse_comparison_reply,
    parse_json_reply,
    parse_primary_reply,
)
from vocalcheck.models import ConfidenceLevel, Indicator, RiskLevel

from tests.fakes import comparison_reply, primary_reply

ALL_INDICATORS = [indicator.value for indicator in Indicator]
LEVEL_FOR_COUNT = {0: "Level 0", 1: "Level 1", 2: "Level 1", 3: "Level 2", 4: "Level 2", 5: "Level 2"}


@pytest.mark.unit
class TestPrimaryReply:
    """Test cases for parse_primary_reply."""

    def test_valid_reply_without_indicators(self):
        result = parse_primary_reply(json.dumps(primary_reply()))

        assert result.indicators == ()
        assert result.risk_level is RiskLevel.NONE
        assert result.confidence_score == 20
        assert result.confidence_level is ConfidenceLevel.LOW
        assert result.comparison_with_history is None

    def test_valid_reply_with_indicators(self):
        reply = primary_reply(
            indicators=["Vocal Tremor", "Monotone Pitch", "Dysarthria"],
            risk_level="Level 2",
            confidence_score=82,
            confidence_level="High",
        )

        result = parse_primary_reply(json.dumps(reply))

        assert result.indicators == (Indicator.VOCAL_TREMOR, Indicator.MONOTONE_PITCH, Indicator.DYSARTHRIA)
        assert result.risk_level is RiskLevel.MULTIPLE

    @pytest.mark.parametrize("count", sorted(LEVEL_FOR_COUNT))
    def test_consistent_risk_level_accepted(self, count):
        reply = primary_reply(indicators=ALL_INDICATORS[:count], risk_level=LEVEL_FOR_COUNT[count])

        result = parse_primary_reply(json.dumps(reply))

        assert len(result.indicators) == count

    @pytest.mark.parametrize("count,level", [
        (0, "Level 1"),
        (1, "Level 0"),
        (2, "Level 2"),
        (3, "Level 1"),
        (5, "Level 0"),
    ])
    def test_inconsistent_risk_level_rejected(self, count, level):
        reply = primary_reply(indicators=ALL_INDICATORS[:count], risk_level=level)

        with pytest.raises(ValueError, match="riskLevel"):
            parse_primary_reply(json.dumps(reply))

    @pytest.mark.parametrize("score", [-1, 101, 250])
    def test_score_out_of_range_rejected(self, score):
        with pytest.raises(ValueError):
            parse_primary_reply(json.dumps(primary_reply(confidence_score=score)))

    @pytest.mark.parametrize("score", [0, 100])
    def test_score_bounds_accepted(self, score):
        assert parse_primary_reply(json.dumps(primary_reply(confidence_score=score))).confidence_score == score

    def test_fractional_score_rejected(self):
        with pytest.raises(ValueError):
            parse_primary_reply(json.dumps(primary_reply(confidence_score=42.5)))

    @pytest.mark.parametrize("score", [True, False, "55", "high", None, [55]])
    def test_non_numeric_score_rejected(self, score):
        with pytest.raises(ValueError, match="confidenceScore"):
            parse_primary_reply(json.dumps(primary_reply(confidence_score=score)))

    @pytest.mark.parametrize("field,value", [
        ("riskLevel", "Level 3"),
        ("confidenceLevel", "Very High"),
    ])
    def test_enum_violation_rejected(self, field, value):
        reply = primary_reply()
        reply[field] = value

        with pytest.raises(ValueError):
            parse_primary_reply(json.dumps(reply))

    @pytest.mark.parametrize("field", ["indicators", "riskLevel", "summary", "confidenceScore", "confidenceLevel"])
    def test_missing_field_rejected(self, field):
        reply = primary_reply()
        del reply[field]

        with pytest.raises(ValueError):
            parse_primary_reply(json.dumps(reply))

    def test_unknown_indicator_rejected(self):
        reply = primary_reply(indicators=["Hoarseness"], risk_level="Level 1")

        with pytest.raises(ValueError, match="unknown indicator"):
            parse_primary_reply(json.dumps(reply))

    def test_duplicate_indicators_rejected(self):
        reply = primary_reply(indicators=["Vocal Tremor", "vocal tremor"], risk_level="Level 1")

        with pytest.raises(ValueError, match="duplicates"):
            parse_primary_reply(json.dumps(reply))

    def test_comparison_from_primary_call_is_ignored(self):
        reply = primary_reply(comparisonWithHistory="made up")

        assert parse_primary_reply(json.dumps(reply)).comparison_with_history is None

    def test_non_object_reply_rejected(self):
        with pytest.raises(ValueError):
            parse_primary_reply(json.dumps([primary_reply()]))

    def test_non_json_reply_rejected(self):
        with pytest.raises(ValueError):
            parse_primary_reply("The recording sounds fine.")

    def test_fenced_reply_accepted(self):
        text = "```json\n" + json.dumps(primary_reply()) + "\n```"

        assert parse_primary_reply(text).risk_level is RiskLevel.NONE


@pytest.mark.unit
class TestIndicatorNormalization:
    """Test cases for normalize_indicator."""

    @pytest.mark.parametrize("name,expected", [
        ("Vocal Tremor", Indicator.VOCAL_TREMOR),
        ("  vocal tremor ", Indicator.VOCAL_TREMOR),
        ("Hypophonia (Softness)", Indicator.HYPOPHONIA),
        ("Monotone Pitch", Indicator.MONOTONE_PITCH),
        ("Dysarthria (Slurred Speech)", Indicator.DYSARTHRIA),
        ("Bradykinesia in Speech (Slow Rate)", Indicator.BRADYKINESIA),
    ])
    def test_known_names(self, name, expected):
        assert normalize_indicator(name) is expected

    def test_non_string_rejected(self):
        with pytest.raises(ValueError):
            normalize_indicator(3)


@pytest.mark.unit
class TestComparisonReply:
    """Test cases for parse_comparison_reply."""

    def test_valid_reply(self):
        comparison = parse_comparison_reply(json.dumps(comparison_reply("Improving.")))

        assert comparison.trend_analysis == "Improving."
        assert comparison.recommendations == "Keep recording weekly."

    def test_missing_trend_rejected(self):
        with pytest.raises(ValueError):
            parse_comparison_reply(json.dumps({"recommendations": "Rest."}))

    def test_empty_trend_rejected(self):
        with pytest.raises(ValueError):
            parse_comparison_reply(json.dumps({"trendAnalysis": "", "recommendations": "Rest."}))


@pytest.mark.unit
def test_parse_json_reply_plain_fence():
    assert parse_json_reply("```\n{\"a\": 1}\n```") == {"a": 1}

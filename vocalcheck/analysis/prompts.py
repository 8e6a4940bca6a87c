"""Prompt templates for the analysis and comparison calls."""

from ..models.analysis import Indicator

PRIMARY_ANALYSIS_PROMPT = """You analyze voice recordings for a fixed set of acoustic features. Base the analysis only on the attached audio and do not infer any medical condition. Natural speech varies; flag a feature only when it is clear, prominent and persistent.

Features (use exactly these names):
1. "{tremor}": a clear and consistent shaky or trembling voice quality.
2. "{hypophonia}": volume that is persistently low or fades without recovering.
3. "{monotone}": pitch that is flat and lacks intonation across the whole recording.
4. "{dysarthria}": articulation that is repeatedly imprecise, slurred or mumbled.
5. "{bradykinesia}": a speaking rate that is abnormally slow, or rushes broken by inappropriate pauses.

Reply with a JSON object with these keys:
- "indicators": array of the feature names detected, empty if none.
- "riskLevel": "Level 0" for no indicators, "Level 1" for 1-2, "Level 2" for 3 or more.
- "summary": a short justification describing what was heard for each indicator, or stating that no clear evidence was found.
- "confidenceScore": integer 0-100 reflecting how clear the indicators are.
- "confidenceLevel": "Low" (0-40), "Medium" (41-75) or "High" (76-100).
""".format(
    tremor=Indicator.VOCAL_TREMOR.value,
    hypophonia=Indicator.HYPOPHONIA.value,
    monotone=Indicator.MONOTONE_PITCH.value,
    dysarthria=Indicator.DYSARTHRIA.value,
    bradykinesia=Indicator.BRADYKINESIA.value,
)

COMPARISON_PROMPT = """You track how vocal indicators change over time. Compare the current voice analysis with the historical analyses, both given as JSON.

- Is the confidenceScore rising, falling or stable?
- Are indicators appearing or disappearing over time?
- Are there notable shifts in the summary text?

Do not give medical advice; you may suggest consulting a healthcare professional if there is a significant negative trend.

Reply with a JSON object with keys "trendAnalysis" (a concise description of the progression) and "recommendations" (practical next steps such as monitoring frequency).

Current Voice Analysis (JSON):
{current}

Historical Voice Data (JSON Array):
{history}
"""


def build_comparison_prompt(current_voice_analysis: str, historical_voice_data: str) -> str:
    return COMPARISON_PROMPT.format(current=current_voice_analysis, history=historical_voice_data)

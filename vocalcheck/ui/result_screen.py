"""Terminal rendering of analysis results and history."""

import logging
from typing import Optional, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..models.analysis import AnalysisResult, HistoryEntry, RiskLevel, TrendPoint
from ..models.audio import AudioStats
from ..models.session import SessionEvent, SessionState

logger = logging.getLogger(__name__)

RISK_STYLES = {
    RiskLevel.NONE: "bold green",
    RiskLevel.FEW: "bold yellow",
    RiskLevel.MULTIPLE: "bold red",
}

# Peak level below which a recording is probably too quiet to analyze
QUIET_PEAK_LEVEL = 0.05

STATE_LABELS = {
    SessionState.IDLE: "⏹️  Idle",
    SessionState.RECORDING: "🔴 Recording",
    SessionState.CAPTURED: "🎧 Audio ready",
    SessionState.ANALYZING: "⏳ Analyzing",
    SessionState.RESULT_READY: "✅ Result ready",
}


class ResultScreen:
    """Prints session progress, results and history with rich."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def on_session_event(self, event: SessionEvent) -> None:
        """Pub/sub listener for session events."""
        if event.event_type == "state_changed":
            state = SessionState(event.metadata["state"])
            self.console.print(STATE_LABELS[state], style="blue")
        elif event.event_type == "warning":
            self.console.print(f"⚠️  {event.metadata.get('detail')}", style="yellow")

    def show_result(self, result: AnalysisResult) -> None:
        body = Table.grid(padding=(0, 2))
        body.add_column(style="bold")
        body.add_column()
        body.add_row("Risk level", Text(result.risk_level.value, style=RISK_STYLES[result.risk_level]))
        body.add_row("Confidence", f"{result.confidence_level.value} ({result.confidence_score}%)")
        indicators = ", ".join(indicator.value for indicator in result.indicators) or "None detected"
        body.add_row("Indicators", indicators)
        body.add_row("Summary", result.summary)
        if result.comparison_with_history:
            body.add_row("Historical comparison", result.comparison_with_history)

        self.console.print(Panel(body, title="Analysis Results", border_style="cyan"))
        self.console.print(
            "This is not a medical diagnosis. Consult a healthcare professional with any concerns.",
            style="dim",
        )

    def show_history(self, history: Sequence[HistoryEntry], trend: Sequence[TrendPoint]) -> None:
        if not history:
            self.console.print(Panel("No history yet.\nYour past analyses will appear here.", title="Analysis History"))
            return

        table = Table(title="Analysis History")
        table.add_column("Id", style="dim")
        table.add_column("When")
        table.add_column("Risk")
        table.add_column("Confidence", justify="right")
        table.add_column("Indicators")
        table.add_column("Comparison")
        for entry in history:
            result = entry.result
            table.add_row(
                entry.id,
                entry.timestamp,
                Text(result.risk_level.value, style=RISK_STYLES[result.risk_level]),
                f"{result.confidence_level.value} ({result.confidence_score}%)",
                ", ".join(indicator.value for indicator in result.indicators) or "-",
                result.comparison_with_history or "-",
            )
        self.console.print(table)
        self.show_trend(trend)

    def show_trend(self, trend: Sequence[TrendPoint]) -> None:
        """Text bar chart of indicator counts and confidence, oldest first."""
        table = Table(title="Vocal Health Trend", show_edge=False)
        table.add_column("Date")
        table.add_column("Indicators")
        table.add_column("Confidence (%)")
        for point in trend:
            table.add_row(
                point.label,
                f"{'■' * point.indicator_count} {point.indicator_count}",
                f"{'█' * (point.confidence_score // 10)} {point.confidence_score}",
            )
        self.console.print(table)

    def show_recording_stats(self, stats: AudioStats) -> None:
        seconds = stats.total_chunks * stats.chunk_size / stats.sample_rate if stats.sample_rate else 0.0
        self.console.print(f"🎧 Captured {seconds:.1f}s of audio, peak level {stats.peak_level:.0%}")
        if stats.peak_level < QUIET_PEAK_LEVEL:
            self.console.print(
                "⚠️  The recording is very quiet. Move closer to the microphone and try again.",
                style="yellow",
            )

    def show_error(self, message: str) -> None:
        self.console.print(f"❌ {message}", style="bold red")

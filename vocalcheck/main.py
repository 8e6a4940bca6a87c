"""Main application entry point for VocalCheck."""

import sys
import asyncio
import argparse
import logging
from pathlib import Path
from typing import Optional

from pubsub import pub

from .analysis import AnalysisClient, GeminiEngine
from .audio.file_source import write_audio_file
from .config import VocalCheckConfig
from .exceptions import VocalCheckError
from .services import EventPublisher, SessionController
from .models.session import SessionState
from .storage import HistoryStore, entry_audio, find_entry, trend_points
from .ui import ResultScreen

logger = logging.getLogger(__name__)


class App:

    def __init__(self, config_path: Optional[str], log_level: Optional[str] = None):
        # Load configuration
        self.config = VocalCheckConfig(config_path)
        # Command line overrides the configured log level
        if log_level:
            self.config.set('logging.level', log_level)
        setup_logging(self.config, self.config.get('logging.level', 'INFO'))
        self.screen = ResultScreen()
        self.controller: Optional[SessionController] = None
        self.recorder = None

    def init(self, with_microphone: bool = False) -> None:
        logger.info("Initializing services...")

        store = self._history_store()
        engine = GeminiEngine(
            api_key=self.config.get_api_key(),
            model=self.config.get('gemini.model', 'gemini-1.5-flash'),
            timeout_seconds=self.config.get('gemini.timeout_seconds', 60),
            temperature=self.config.get('gemini.temperature', 0.2),
        )

        if with_microphone:
            # PyAudio is only needed when recording
            from .audio.capture import MicrophoneRecorder
            self.recorder = MicrophoneRecorder(
                sample_rate=self.config.get('audio.sample_rate', 16000),
                chunk_size=self.config.get('audio.chunk_size', 1024),
                channels=self.config.get('audio.channels', 1),
            )

        topic = self.config.get('events.topic', 'session.events')
        pub.subscribe(self.screen.on_session_event, topic)

        self.controller = SessionController(
            analysis_client=AnalysisClient(engine),
            history_store=store,
            recorder=self.recorder,
            publisher=EventPublisher(topic),
        )

    async def record_and_analyze(self, duration: int) -> None:
        await self.controller.start_recording()
        self.screen.console.print(f"🎙️  Recording for {duration}s. Say \"pa-ta-ka\" clearly and repeatedly.")
        try:
            await asyncio.sleep(duration)
        finally:
            if self.controller.state is SessionState.RECORDING:
                await self.controller.stop_recording()
        self.screen.show_recording_stats(self.recorder.get_recording_stats())
        await self.analyze()

    async def analyze_file(self, path: str, mime_type: Optional[str] = None) -> None:
        self.controller.select_file(path, mime_type)
        await self.analyze()

    async def analyze(self) -> None:
        result = await self.controller.analyze()
        if result is not None:
            self.screen.show_result(result)
        self.show_history()

    def show_history(self) -> None:
        self.screen.show_history(self.controller.history, self.controller.trend())

    def show_stored_history(self) -> None:
        history = self._history_store().load()
        self.screen.show_history(history, trend_points(history))

    def export_audio(self, entry_id: str, path: str) -> None:
        """Write the recording stored with a history entry to a file."""
        entry = find_entry(self._history_store().load(), entry_id)
        written = write_audio_file(path, entry_audio(entry))
        self.screen.console.print(f"💾 Saved recording from {entry.timestamp} to {written}")

    def _history_store(self) -> HistoryStore:
        return HistoryStore(
            self.config.get_data_directory(),
            slot_name=self.config.get('storage.history_slot', 'voiceAnalysisHistory'),
        )

    def cleanup(self) -> None:
        if self.controller is not None:
            self.controller.reset()


def setup_logging(config, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path', 'data/logs/vocalcheck.log')
    console_output = config.get('logging.console_output', True)

    # Set up handlers
    handlers = []

    if log_file_path:
        Path(log_file_path).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file_path)
        file_handler.setLevel(logging.DEBUG)
        file_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
        )
        file_handler.setFormatter(file_formatter)
        handlers.append(file_handler)

    # Console handler - only if enabled in config
    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)  # Only show warnings and above on console
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger = logging.getLogger(__name__)
    logger.info("=" * 50)
    logger.info("VocalCheck starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="VocalCheck - AI-assisted voice analysis with history tracking",
        epilog="Results are heuristic and not a medical diagnosis.",
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: built-in defaults)"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (default: from config, INFO)"
    )

    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument(
        "--record",
        action="store_true",
        help="Record from the microphone, then analyze"
    )
    mode.add_argument(
        "--file",
        type=str,
        help="Analyze an audio file"
    )
    mode.add_argument(
        "--history",
        action="store_true",
        help="Show stored analysis history and exit"
    )
    mode.add_argument(
        "--export-audio",
        nargs=2,
        metavar=("ENTRY_ID", "PATH"),
        help="Write the recording of a stored history entry to PATH and exit"
    )

    parser.add_argument(
        "--duration",
        type=int,
        default=10,
        help="Recording duration in seconds (default: 10)"
    )

    parser.add_argument(
        "--mime",
        type=str,
        help="Declared MIME type of --file (default: guessed from the extension)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version="VocalCheck v0.1.0"
    )
    return parser


def main() -> None:
    """Main entry point for VocalCheck application."""
    args = build_parser().parse_args()

    app = None
    try:
        app = App(args.config, args.log_level)
        if args.history:
            app.show_stored_history()
            return
        if args.export_audio:
            app.export_audio(*args.export_audio)
            return
        app.init(with_microphone=args.record)
        if args.record:
            asyncio.run(app.record_and_analyze(args.duration))
        else:
            asyncio.run(app.analyze_file(args.file, args.mime))
    except KeyboardInterrupt:
        if app is not None:
            app.cleanup()
        print("\n👋 Goodbye!")
    except VocalCheckError as e:
        screen = app.screen if app is not None else ResultScreen()
        screen.show_error(e.detail)
        logging.error(f"Application error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()

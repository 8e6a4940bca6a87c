"""Session controller: the recording / analysis state machine."""

import logging
import uuid
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, List, Optional, Protocol, Tuple, Union

from ..analysis.client import AnalysisClient
from ..audio.encoder import encode
from ..audio.file_source import is_audio_type, read_audio_file
from ..exceptions import (
    AnalysisUnavailableError,
    CaptureError,
    DeviceAccessError,
    InvalidFileTypeError,
    PersistenceError,
    SessionStateError,
    VocalCheckError,
)
from ..models.analysis import AnalysisResult, HistoryEntry, HistoryLog, TrendPoint
from ..models.audio import AudioPayload
from ..models.session import SessionEvent, SessionState
from ..storage.history_store import HistoryStore, trend_points

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

# States from which a new capture may begin; an existing capture is discarded.
CAPTURE_STATES = (SessionState.IDLE, SessionState.CAPTURED, SessionState.RESULT_READY)


class AudioRecorder(Protocol):
    """Microphone recorder used by the session."""

    async def start(self) -> None:
        ...

    async def stop(self) -> AudioPayload:
        ...

    def abort(self) -> None:
        ...


class SessionPublisher(Protocol):
    def publish(self, event: SessionEvent) -> None:
        ...


class SessionController:
    """Sequences capture, encoding, analysis and history for one user session.

    States: idle, recording, captured, analyzing, result-ready. Every failure
    leaves the session in a well-defined state:

    - capture errors return to ``idle``
    - analysis errors return to ``captured`` with the audio kept for a retry
    - persistence errors only set ``persistence_warning``

    ``reset()`` while analyzing abandons the request: its result is dropped
    when it arrives. Abandonment is tracked with a generation counter that
    every reset advances.
    """

    def __init__(
        self,
        analysis_client: AnalysisClient,
        history_store: HistoryStore,
        recorder: Optional[AudioRecorder] = None,
        publisher: Optional[SessionPublisher] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """Initialize session controller.

        Args:
            analysis_client: Client for the external analysis capability
            history_store: Durable history slot
            recorder: Microphone recorder; recording is unavailable without one
            publisher: Receives session events
            clock: Source of creation instants for history entries
        """
        self.analysis_client = analysis_client
        self.history_store = history_store
        self.recorder = recorder
        self.publisher = publisher
        self.clock = clock

        self.state = SessionState.IDLE
        self.payload: Optional[AudioPayload] = None
        self.current_result: Optional[AnalysisResult] = None
        self.last_error: Optional[VocalCheckError] = None
        self.persistence_warning: Optional[PersistenceError] = None

        self._audio_url: Optional[str] = None
        self._history: HistoryLog = []
        self._generation = 0
        self._starting = False
        self._stopping = False

        self.load_history()

    # Queries

    @property
    def history(self) -> Tuple[HistoryEntry, ...]:
        return tuple(self._history)

    @property
    def audio_url(self) -> Optional[str]:
        """Playback handle for the captured audio, encoded on first use."""
        if self.payload is None:
            return None
        if self._audio_url is None:
            self._audio_url = encode(self.payload)
        return self._audio_url

    def trend(self) -> List[TrendPoint]:
        return trend_points(self._history)

    # Commands

    def load_history(self) -> HistoryLog:
        """Replace the in-memory history with the stored log."""
        self._history = self.history_store.load()
        return list(self._history)

    async def start_recording(self) -> None:
        """Acquire the microphone and enter ``recording``.

        Raises:
            SessionStateError: If recording or analyzing is in progress
            DeviceAccessError: If the microphone is unavailable; the session is idle
        """
        self._require_capture_allowed("start recording")
        if self.recorder is None:
            error = DeviceAccessError("No microphone recorder is configured")
            self.last_error = error
            raise error

        self.reset()
        generation = self._generation
        self._starting = True
        try:
            await self.recorder.start()
        except DeviceAccessError as e:
            logger.error(f"Microphone error: {e}")
            if generation == self._generation:
                self.last_error = e
            raise
        finally:
            self._starting = False

        if generation != self._generation:
            logger.info("Session reset while the microphone was opening, releasing it")
            self.recorder.abort()
            return
        self._set_state(SessionState.RECORDING)

    async def stop_recording(self) -> Optional[AudioPayload]:
        """Finish recording and enter ``captured``.

        Returns:
            The recorded payload, or None if the session was reset meanwhile

        Raises:
            SessionStateError: If not recording
            DeviceAccessError: If the microphone failed; the session is idle
        """
        if self.state is not SessionState.RECORDING or self._stopping:
            raise SessionStateError("stop recording", self.state.value)

        generation = self._generation
        self._stopping = True
        try:
            payload = await self.recorder.stop()
        except DeviceAccessError as e:
            if generation == self._generation:
                logger.error(f"Recording failed: {e}")
                self.last_error = e
                self._set_state(SessionState.IDLE)
            raise
        finally:
            self._stopping = False

        if generation != self._generation:
            logger.info("Session reset while recording was stopping, discarding audio")
            return None
        self._set_capture(payload)
        return payload

    def select_file(self, path: Union[str, Path], mime_type: Optional[str] = None) -> AudioPayload:
        """Use an audio file as the captured sample.

        Raises:
            SessionStateError: If recording or analyzing is in progress
            InvalidFileTypeError: If the file is not audio; nothing changes
            AudioFileError: If the file cannot be read; nothing changes
        """
        self._require_capture_allowed("select a file")
        try:
            payload = read_audio_file(path, mime_type)
        except CaptureError as e:
            self.last_error = e
            raise
        self.reset()
        self._set_capture(payload)
        return payload

    def select_audio(self, data: bytes, mime_type: str, filename: Optional[str] = None) -> AudioPayload:
        """Use in-memory audio bytes, e.g. an upload, as the captured sample.

        Raises:
            SessionStateError: If recording or analyzing is in progress
            InvalidFileTypeError: If ``mime_type`` is not an audio type
        """
        self._require_capture_allowed("select a file")
        if not is_audio_type(mime_type):
            error = InvalidFileTypeError(mime_type, filename)
            self.last_error = error
            raise error
        payload = AudioPayload(data=bytes(data), mime_type=mime_type, source="file", filename=filename)
        self.reset()
        self._set_capture(payload)
        return payload

    async def analyze(self) -> Optional[AnalysisResult]:
        """Analyze the captured audio and record the result in history.

        A call while another analysis is in flight is ignored.

        Returns:
            The result, or None if ignored or abandoned by a reset

        Raises:
            SessionStateError: If there is no captured audio to analyze
            AnalysisUnavailableError: If the analysis failed; the audio is kept
        """
        if self.state is SessionState.ANALYZING:
            logger.warning("Analysis already in progress, ignoring request")
            return None
        if self.state is not SessionState.CAPTURED:
            raise SessionStateError("analyze", self.state.value)

        generation = self._generation
        audio_url = self.audio_url
        prior_history = list(self._history)
        self.current_result = None
        self.last_error = None
        self._set_state(SessionState.ANALYZING)

        try:
            result = await self.analysis_client.analyze(audio_url, prior_history)
        except Exception as e:
            if generation != self._generation:
                self._publish("analysis_discarded", reason=str(e))
                return None
            error = e if isinstance(e, AnalysisUnavailableError) else AnalysisUnavailableError(str(e))
            logger.error(f"Analysis failed: {error}")
            self.last_error = error
            self._set_state(SessionState.CAPTURED)
            self._publish("analysis_failed", error=error.detail)
            if error is e:
                raise
            raise error from e

        if generation != self._generation:
            logger.info("Session moved on during analysis, discarding result")
            self._publish("analysis_discarded", risk_level=result.risk_level.value)
            return None

        entry = self._new_entry(audio_url, result)
        self._history = HistoryStore.append(self._history, entry)
        self._persist_history()

        self.current_result = result
        self._set_state(SessionState.RESULT_READY)
        self._publish(
            "analysis_completed",
            entry_id=entry.id,
            risk_level=result.risk_level.value,
            has_comparison=result.comparison_with_history is not None,
        )
        return result

    def reset(self) -> None:
        """Return to ``idle``, discarding captured audio and the displayed result.

        History is never touched. Calling reset repeatedly is harmless.
        """
        if self.state is SessionState.RECORDING and not self._stopping and self.recorder is not None:
            try:
                self.recorder.abort()
            except Exception as e:
                logger.error(f"Error releasing the microphone: {e}")

        self._generation += 1
        self.payload = None
        self._audio_url = None
        self.current_result = None
        self.last_error = None
        self._set_state(SessionState.IDLE)

    # Internals

    def _require_capture_allowed(self, command: str) -> None:
        if self._starting:
            raise SessionStateError(command, "starting a recording")
        if self._stopping:
            raise SessionStateError(command, "stopping a recording")
        if self.state not in CAPTURE_STATES:
            raise SessionStateError(command, self.state.value)

    def _set_capture(self, payload: AudioPayload) -> None:
        self.payload = payload
        self._audio_url = None
        logger.info(f"Captured {payload.size_bytes} bytes of {payload.mime_type} from {payload.source}")
        self._set_state(SessionState.CAPTURED)

    def _set_state(self, state: SessionState) -> None:
        if state is self.state:
            return
        previous = self.state
        self.state = state
        logger.debug(f"Session state: {previous.value} -> {state.value}")
        self._publish("state_changed", previous=previous.value, state=state.value)

    def _new_entry(self, audio_url: str, result: AnalysisResult) -> HistoryEntry:
        now = self.clock()
        existing = {entry.id for entry in self._history}
        while now.isoformat() in existing:
            now += timedelta(microseconds=1)
        return HistoryEntry(
            id=now.isoformat(),
            timestamp=now.strftime(TIMESTAMP_FORMAT),
            audio_url=audio_url,
            result=result,
        )

    def _persist_history(self) -> None:
        try:
            self.history_store.save(self._history)
        except PersistenceError as e:
            logger.warning(f"History kept in memory only: {e}")
            self.persistence_warning = e
            self._publish("warning", code=e.code, detail=e.detail)
        else:
            self.persistence_warning = None

    def _publish(self, event_type: str, **metadata) -> None:
        if self.publisher is None:
            return
        event = SessionEvent(event_id=str(uuid.uuid4()), event_type=event_type, metadata=metadata)
        try:
            self.publisher.publish(event)
        except Exception as e:
            logger.error(f"Error publishing {event_type} event: {e}")

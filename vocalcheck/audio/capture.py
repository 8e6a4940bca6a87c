"""Microphone capture producing a single WAV payload per recording."""

import asyncio
import io
import logging
import time
import wave
from datetime import datetime
from threading import Event, Thread
from typing import List, Optional

import numpy as np
import pyaudio

from ..exceptions import DeviceAccessError
from ..models.audio import RECORDED_MIME_TYPE, AudioFrame, AudioPayload, AudioStats

logger = logging.getLogger(__name__)


class MicrophoneRecorder:
    """Records from the default input device into an in-memory buffer.

    The device is held only between :meth:`start` and :meth:`stop` (or
    :meth:`abort`); every exit path releases the stream and the PyAudio
    instance.
    """

    def __init__(
        self,
        sample_rate: int = 16000,
        chunk_size: int = 1024,
        channels: int = 1,
        format: int = pyaudio.paInt16,
    ):
        """Initialize the recorder.

        Args:
            sample_rate: Audio sample rate in Hz
            chunk_size: Size of each audio chunk in samples
            channels: Number of audio channels (1 for mono)
            format: PyAudio sample format (16-bit signed int)
        """
        self.sample_rate = sample_rate
        self.chunk_size = chunk_size
        self.channels = channels
        self.format = format

        # Recording thread management
        self.recording_thread: Optional[Thread] = None
        self.release_thread: Optional[Thread] = None
        self.stop_event = Event()
        self.is_recording = False

        self.frames: List[AudioFrame] = []
        self.start_time: Optional[datetime] = None
        self.total_chunks = 0
        self.peak_level = 0.0
        self._read_error: Optional[Exception] = None

        self.pyaudio_instance: Optional[pyaudio.PyAudio] = None
        self.stream = None

    async def start(self) -> None:
        """Acquire the microphone and begin buffering audio.

        Raises:
            DeviceAccessError: If the device cannot be opened
        """
        if self.is_recording:
            logger.warning("Recording already in progress")
            return

        # A previous abort may still be releasing the device
        if self.release_thread is not None:
            await asyncio.to_thread(self.release_thread.join)
            self.release_thread = None

        logger.info("Starting audio recording")
        self.frames = []
        self.total_chunks = 0
        self.peak_level = 0.0
        self._read_error = None
        self.stop_event.clear()

        await asyncio.to_thread(self._open_stream)

        self.start_time = datetime.now()
        self.recording_thread = Thread(target=self._record_continuously, daemon=True)
        self.recording_thread.name = "MicrophoneRecorderThread"
        self.recording_thread.start()
        self.is_recording = True

    async def stop(self) -> AudioPayload:
        """Stop recording, release the device and return the captured audio.

        Returns:
            WAV-encoded AudioPayload

        Raises:
            DeviceAccessError: If the device failed while recording
        """
        if not self.is_recording:
            raise DeviceAccessError("No recording in progress")

        logger.info("Stopping audio recording")
        await asyncio.to_thread(self._finish)

        if self._read_error is not None:
            error = self._read_error
            self.frames = []
            raise DeviceAccessError(f"Microphone failed while recording: {error}")

        payload = AudioPayload(
            data=self._to_wav(),
            mime_type=RECORDED_MIME_TYPE,
            source="microphone",
        )
        logger.info(f"Recording stopped. Total chunks: {self.total_chunks}, {payload.size_bytes} bytes")
        return payload

    def abort(self) -> None:
        """Stop recording and discard everything buffered so far.

        Returns at once; the reader thread is joined and the device released
        on a background thread that the next :meth:`start` waits for.
        """
        if not self.is_recording:
            return
        logger.info("Aborting audio recording")
        self.is_recording = False
        self.stop_event.set()
        self.release_thread = Thread(target=self._discard, daemon=True)
        self.release_thread.name = "MicrophoneReleaseThread"
        self.release_thread.start()

    def _discard(self) -> None:
        self._finish()
        self.frames = []

    def _open_stream(self) -> None:
        self.pyaudio_instance = pyaudio.PyAudio()
        try:
            self.stream = self.pyaudio_instance.open(
                format=self.format,
                channels=self.channels,
                rate=self.sample_rate,
                input=True,
                frames_per_buffer=self.chunk_size,
                stream_callback=None,
            )
        except Exception as e:
            logger.error(f"Error accessing microphone: {e}")
            self._release()
            raise DeviceAccessError(
                "Could not access the microphone. Please check your device permissions."
            ) from e
        logger.info(f"Audio stream opened: {self.sample_rate}Hz, {self.chunk_size} samples/chunk")

    def _record_continuously(self) -> None:
        """Internal method: continuous recording loop in background thread."""
        try:
            while not self.stop_event.is_set():
                chunk = self.stream.read(self.chunk_size, exception_on_overflow=False)
                self.total_chunks += 1
                self.frames.append(AudioFrame(data=chunk, timestamp=time.time(), frame_number=self.total_chunks))
                self._update_peak_level(chunk)
        except Exception as e:
            logger.error(f"Error reading from microphone: {e}")
            self._read_error = e

    def _update_peak_level(self, chunk: bytes) -> None:
        samples = np.frombuffer(chunk, dtype=np.int16)
        if samples.size:
            level = float(np.abs(samples.astype(np.int32)).max()) / 32768.0
            self.peak_level = max(self.peak_level, level)

    def _finish(self) -> None:
        self.stop_event.set()
        if self.recording_thread and self.recording_thread.is_alive():
            self.recording_thread.join(timeout=2.0)
            if self.recording_thread.is_alive():
                logger.warning("Recording thread did not stop cleanly")
        self._release()
        self.is_recording = False

    def _release(self) -> None:
        """Close the stream and terminate PyAudio, whatever state they are in."""
        if self.stream is not None:
            try:
                self.stream.stop_stream()
                self.stream.close()
            except Exception as e:
                logger.warning(f"Error closing audio stream: {e}")
            self.stream = None
        if self.pyaudio_instance is not None:
            try:
                self.pyaudio_instance.terminate()
            except Exception as e:
                logger.warning(f"Error terminating PyAudio: {e}")
            self.pyaudio_instance = None

    def _to_wav(self) -> bytes:
        buffer = io.BytesIO()
        with wave.open(buffer, "wb") as wf:
            wf.setnchannels(self.channels)
            wf.setsampwidth(pyaudio.get_sample_size(self.format))
            wf.setframerate(self.sample_rate)
            for frame in self.frames:
                wf.writeframes(frame.data)
        return buffer.getvalue()

    def get_recording_stats(self) -> AudioStats:
        """Get current recording statistics."""
        duration = 0.0
        if self.start_time:
            duration = (datetime.now() - self.start_time).total_seconds()

        return AudioStats(
            is_recording=self.is_recording,
            duration_seconds=duration,
            sample_rate=self.sample_rate,
            chunk_size=self.chunk_size,
            total_chunks=self.total_chunks,
            peak_level=self.peak_level,
        )

    def __del__(self):
        """Ensure the device is released on deletion."""
        if self.is_recording:
            self.abort()

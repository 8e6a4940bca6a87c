"""Pytest configuration and fixtures for VocalCheck tests."""

import io
import logging
import tempfile
import wave
from unittest.mock import Mock, patch

import numpy as np
import pytest

from vocalcheck.exceptions import DeviceAccessError, EngineError
from vocalcheck.models import AudioPayload
from vocalcheck.storage import HistoryStore

from tests.fakes import FakeEngine, FakeRecorder, RecordingPublisher

# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests of a single component")
    config.addinivalue_line("markers", "integration: tests spanning several components")


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def sample_audio_chunk():
    """Generate a sample audio chunk for testing."""
    # Generate 1024 samples of 16-bit audio (sine wave)
    sample_rate = 16000
    duration = 1024 / sample_rate
    freq = 440  # A4 note

    t = np.linspace(0, duration, 1024, False)
    wave_data = np.sin(2 * np.pi * freq * t)

    # Convert to 16-bit integers
    audio_data = (wave_data * 32767).astype(np.int16)
    return audio_data.tobytes()


@pytest.fixture
def sample_wav_bytes(sample_audio_chunk):
    """A short mono 16 kHz WAV file held in memory."""
    buffer = io.BytesIO()
    with wave.open(buffer, 'wb') as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(16000)
        for _ in range(10):
            wf.writeframes(sample_audio_chunk)
    return buffer.getvalue()


@pytest.fixture
def sample_payload(sample_wav_bytes):
    return AudioPayload(data=sample_wav_bytes, mime_type="audio/wav", source="file", filename="sample.wav")


@pytest.fixture
def mock_pyaudio():
    """Mock PyAudio for testing without actual audio hardware."""
    with patch('pyaudio.PyAudio') as mock_pyaudio_class:
        mock_pyaudio_instance = Mock()
        mock_stream = Mock()

        mock_stream.read.return_value = b'\x00' * 2048  # Silent audio
        mock_stream.stop_stream.return_value = None
        mock_stream.close.return_value = None

        mock_pyaudio_instance.open.return_value = mock_stream
        mock_pyaudio_instance.terminate.return_value = None
        mock_pyaudio_instance.get_sample_size.return_value = 2

        mock_pyaudio_class.return_value = mock_pyaudio_instance

        yield {
            'class': mock_pyaudio_class,
            'instance': mock_pyaudio_instance,
            'stream': mock_stream
        }


@pytest.fixture
def history_store(temp_data_dir):
    return HistoryStore(temp_data_dir)


@pytest.fixture
def fake_engine():
    return FakeEngine()


@pytest.fixture
def fake_recorder():
    return FakeRecorder()


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def device_error():
    return DeviceAccessError("Permission denied")


@pytest.fixture
def engine_error():
    return EngineError("Gemini API error: 503 - unavailable", status=503)

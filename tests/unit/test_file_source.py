"""Unit tests for audio file ingestion."""

from pathlib import Path
from unittest.mock import patch

import pytest

from vocalcheck.audio.file_source import guess_mime_type, is_audio_type, read_audio_file, write_audio_file
from vocalcheck.exceptions import AudioFileError, InvalidFileTypeError
from vocalcheck.models import AudioPayload


@pytest.mark.unit
class TestFileSource:
    """Test cases for read_audio_file and MIME detection."""

    @pytest.mark.parametrize("name,expected", [
        ("voice.webm", "audio/webm"),
        ("voice.m4a", "audio/mp4"),
        ("voice.ogg", "audio/ogg"),
        ("voice.mp3", "audio/mpeg"),
        ("notes.txt", "text/plain"),
    ])
    def test_guess_mime_type(self, name, expected):
        assert guess_mime_type(name) == expected

    def test_guess_wav_is_audio(self):
        assert is_audio_type(guess_mime_type("voice.wav"))

    def test_is_audio_type(self):
        assert is_audio_type("audio/wav")
        assert is_audio_type("AUDIO/WEBM")
        assert not is_audio_type("video/webm")
        assert not is_audio_type("")
        assert not is_audio_type(None)

    def test_read_audio_file(self, temp_data_dir, sample_wav_bytes):
        path = Path(temp_data_dir) / "sample.wav"
        path.write_bytes(sample_wav_bytes)

        payload = read_audio_file(path)

        assert payload.data == sample_wav_bytes
        assert is_audio_type(payload.mime_type)
        assert payload.source == "file"
        assert payload.filename == "sample.wav"

    def test_declared_type_overrides_extension(self, temp_data_dir):
        path = Path(temp_data_dir) / "upload.bin"
        path.write_bytes(b"abc")

        payload = read_audio_file(path, mime_type="audio/webm")

        assert payload.mime_type == "audio/webm"

    def test_rejects_non_audio_without_reading(self, temp_data_dir):
        path = Path(temp_data_dir) / "notes.txt"
        path.write_text("hello")

        with patch.object(Path, "read_bytes") as mock_read:
            with pytest.raises(InvalidFileTypeError) as exc_info:
                read_audio_file(path)

        mock_read.assert_not_called()
        assert exc_info.value.mime_type == "text/plain"
        assert exc_info.value.filename == "notes.txt"

    def test_rejects_declared_non_audio_type(self, temp_data_dir):
        path = Path(temp_data_dir) / "clip.wav"
        path.write_bytes(b"abc")

        with pytest.raises(InvalidFileTypeError):
            read_audio_file(path, mime_type="video/mp4")

    def test_missing_file(self, temp_data_dir):
        with pytest.raises(AudioFileError):
            read_audio_file(Path(temp_data_dir) / "missing.wav")

    @pytest.mark.parametrize("mime_type", [
        "audio/",
        "audio/webm;codecs",
        'audio/webm; codecs="opus,vorbis"',
    ])
    def test_rejects_malformed_audio_type(self, temp_data_dir, mime_type):
        path = Path(temp_data_dir) / "clip.webm"
        path.write_bytes(b"abc")

        assert not is_audio_type(mime_type)
        with pytest.raises(InvalidFileTypeError):
            read_audio_file(path, mime_type=mime_type)

    def test_audio_type_with_parameters_accepted(self):
        assert is_audio_type("audio/webm;codecs=opus")

    def test_write_audio_file(self, temp_data_dir):
        path = Path(temp_data_dir) / "exports" / "take.wav"

        written = write_audio_file(path, AudioPayload(data=b"RIFF", mime_type="audio/wav"))

        assert written == path
        assert path.read_bytes() == b"RIFF"

    def test_write_audio_file_failure(self, temp_data_dir):
        blocker = Path(temp_data_dir) / "blocker"
        blocker.write_text("a file, not a directory")

        with pytest.raises(AudioFileError):
            write_audio_file(blocker / "take.wav", AudioPayload(data=b"RIFF", mime_type="audio/wav"))

"""Audio capture, file ingestion and encoding.

The PyAudio-backed recorder lives in ``vocalcheck.audio.capture`` and is
imported explicitly where a microphone is needed.
"""

from .encoder import encode, decode, is_data_uri
from .file_source import read_audio_file, write_audio_file, guess_mime_type, is_audio_type

__all__ = [
    'encode',
    'decode',
    'is_data_uri',
    'read_audio_file',
    'write_audio_file',
    'guess_mime_type',
    'is_audio_type',
]

"""Reading and writing user audio files."""

import logging
import mimetypes
from pathlib import Path
from typing import Optional, Union

from ..exceptions import AudioFileError, InvalidFileTypeError
from ..models.audio import AudioPayload
from .encoder import is_encodable_mime_type

logger = logging.getLogger(__name__)

# Extensions the stdlib table misses or maps to a non-audio type
AUDIO_EXTENSION_TYPES = {
    ".webm": "audio/webm",
    ".weba": "audio/webm",
    ".m4a": "audio/mp4",
    ".opus": "audio/ogg",
    ".ogg": "audio/ogg",
    ".oga": "audio/ogg",
    ".flac": "audio/flac",
}


def guess_mime_type(path: Union[str, Path]) -> Optional[str]:
    """Guess a file's MIME type from its extension."""
    suffix = Path(path).suffix.lower()
    if suffix in AUDIO_EXTENSION_TYPES:
        return AUDIO_EXTENSION_TYPES[suffix]
    mime_type, _ = mimetypes.guess_type(str(path))
    return mime_type


def is_audio_type(mime_type: Optional[str]) -> bool:
    """An ``audio/*`` type that can also be carried in a data URI."""
    if not mime_type or not mime_type.lower().startswith("audio/"):
        return False
    return is_encodable_mime_type(mime_type)


def read_audio_file(path: Union[str, Path], mime_type: Optional[str] = None) -> AudioPayload:
    """Wrap a user-selected file into an audio payload.

    The type check happens before the file is touched, so a rejected file
    is never read.

    Args:
        path: File selected by the user
        mime_type: Declared MIME type; guessed from the extension if omitted

    Returns:
        AudioPayload holding the file's bytes

    Raises:
        InvalidFileTypeError: If the MIME type is not an audio type
        AudioFileError: If the file cannot be read
    """
    path = Path(path)
    declared = mime_type or guess_mime_type(path)
    if not is_audio_type(declared):
        logger.warning(f"Rejected non-audio file {path.name} ({declared})")
        raise InvalidFileTypeError(declared, path.name)

    try:
        data = path.read_bytes()
    except OSError as e:
        raise AudioFileError(f"Could not read audio file {path}: {e}") from e

    logger.info(f"Loaded audio file {path.name}: {len(data)} bytes ({declared})")
    return AudioPayload(data=data, mime_type=declared, source="file", filename=path.name)


def write_audio_file(path: Union[str, Path], payload: AudioPayload) -> Path:
    """Write an audio payload's bytes to a file, creating parent directories.

    Raises:
        AudioFileError: If the file cannot be written
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(payload.data)
    except OSError as e:
        raise AudioFileError(f"Could not write audio file {path}: {e}") from e

    logger.info(f"Wrote {payload.size_bytes} bytes of {payload.mime_type} to {path}")
    return path

"""Conversion between audio payloads and base64 data URIs."""

import base64
import binascii
import re

from ..exceptions import AudioEncodingError
from ..models.audio import AudioPayload

# <type>/<subtype>[;param=value...], no commas anywhere
MIME_TYPE_GRAMMAR = r"[^,;/\s]+/[^,;/\s]+(?:;\s*[^,;=\s]+=[^,;\s]+)*"
MIME_TYPE_PATTERN = re.compile(rf"^{MIME_TYPE_GRAMMAR}$")

# data:<mime>[;param=value...];base64,<data>
DATA_URI_PATTERN = re.compile(rf"^data:(?P<mime>{MIME_TYPE_GRAMMAR});base64,(?P<data>[A-Za-z0-9+/=]*)$")


def encode(payload: AudioPayload) -> str:
    """Encode an audio payload as a self-describing data URI.

    Args:
        payload: Captured audio

    Returns:
        String of the form ``data:<mime>;base64,<data>``

    Raises:
        AudioEncodingError: If the MIME type cannot be written into a data URI
    """
    if not is_encodable_mime_type(payload.mime_type):
        raise AudioEncodingError(f"MIME type cannot be encoded in a data URI: {payload.mime_type!r}")
    data = base64.b64encode(payload.data).decode("ascii")
    return f"data:{payload.mime_type};base64,{data}"


def decode(encoded: str, source: str = "file") -> AudioPayload:
    """Decode a data URI back into the audio payload it was built from.

    Args:
        encoded: Data URI produced by :func:`encode`
        source: Source tag for the rebuilt payload

    Returns:
        AudioPayload with identical bytes and MIME type

    Raises:
        AudioEncodingError: If the string is not a base64 data URI
    """
    match = DATA_URI_PATTERN.match(encoded)
    if not match:
        raise AudioEncodingError("Expected format: 'data:<mimetype>;base64,<encoded_data>'")
    try:
        data = base64.b64decode(match.group("data"), validate=True)
    except binascii.Error as e:
        raise AudioEncodingError(f"Invalid base64 audio data: {e}") from e
    return AudioPayload(data=data, mime_type=match.group("mime"), source=source)


def is_data_uri(value: str) -> bool:
    return bool(DATA_URI_PATTERN.match(value))


def is_encodable_mime_type(mime_type: str) -> bool:
    """Check that a MIME type survives a trip through a data URI unchanged."""
    return bool(MIME_TYPE_PATTERN.match(mime_type))

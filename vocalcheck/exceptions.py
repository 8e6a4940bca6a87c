"""VocalCheck exception hierarchy.

Every application error derives from VocalCheckError so the CLI and the
session controller can report failures uniformly without crashing.
"""

from datetime import datetime
from typing import Optional


class VocalCheckError(Exception):
    """Base exception for all VocalCheck errors."""

    def __init__(self, detail: str = "An unexpected error occurred", code: str = "VOCALCHECK_ERROR"):
        self.detail = detail
        self.code = code
        self.timestamp = datetime.now().isoformat()
        super().__init__(detail)


class CaptureError(VocalCheckError):
    """Raised when audio cannot be captured from a microphone or a file."""

    def __init__(self, detail: str = "Audio capture failed", code: str = "CAPTURE_ERROR"):
        super().__init__(detail=detail, code=code)


class DeviceAccessError(CaptureError):
    """Microphone permission or hardware failure. Retry by starting again."""

    def __init__(self, detail: str = "Could not access the microphone"):
        super().__init__(detail=detail, code="DEVICE_ACCESS_ERROR")


class InvalidFileTypeError(CaptureError):
    """The selected file does not declare an audio MIME type."""

    def __init__(self, mime_type: Optional[str], filename: Optional[str] = None):
        self.mime_type = mime_type
        self.filename = filename
        name = f" '{filename}'" if filename else ""
        super().__init__(
            detail=f"Please select an audio file{name} (got type: {mime_type or 'unknown'})",
            code="INVALID_FILE_TYPE",
        )


class AudioFileError(CaptureError):
    """An audio file could not be read or written."""

    def __init__(self, detail: str):
        super().__init__(detail=detail, code="AUDIO_FILE_ERROR")


class AudioEncodingError(VocalCheckError, ValueError):
    """A string is not a valid base64 audio data URI."""

    def __init__(self, detail: str):
        super().__init__(detail=detail, code="AUDIO_ENCODING_ERROR")


class EngineError(VocalCheckError):
    """The generative engine failed to produce a response."""

    def __init__(self, detail: str, status: Optional[int] = None):
        self.status = status
        super().__init__(detail=detail, code="ENGINE_ERROR")


class AnalysisUnavailableError(VocalCheckError):
    """Primary analysis failed or returned a structurally invalid verdict."""

    def __init__(self, detail: str = "An error occurred during the analysis. Please try again."):
        super().__init__(detail=detail, code="ANALYSIS_UNAVAILABLE")


class PersistenceError(VocalCheckError):
    """Analysis history could not be written to durable storage."""

    def __init__(self, detail: str = "Failed to save analysis history"):
        super().__init__(detail=detail, code="PERSISTENCE_ERROR")


class HistoryEntryNotFoundError(VocalCheckError):
    """No history entry carries the requested id."""

    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        super().__init__(detail=f"No history entry with id {entry_id}", code="HISTORY_ENTRY_NOT_FOUND")


class SessionStateError(VocalCheckError):
    """A session command was issued in a state that does not allow it."""

    def __init__(self, command: str, state: str):
        self.command = command
        self.state = state
        super().__init__(
            detail=f"Cannot {command} while session is {state}",
            code="SESSION_STATE_ERROR",
        )


class ConfigError(VocalCheckError):
    """Raised when configuration cannot be loaded or is incomplete."""

    def __init__(self, detail: str):
        super().__init__(detail=detail, code="CONFIG_ERROR")

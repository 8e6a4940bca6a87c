"""Audio-related data models."""

from dataclasses import dataclass
from typing import Optional

RECORDED_MIME_TYPE = "audio/wav"


@dataclass(frozen=True)
class AudioPayload:
    """A single captured audio sample, immutable once produced."""
    data: bytes
    mime_type: str
    source: str = "file"  # "microphone" | "file" | "history"
    filename: Optional[str] = None

    @property
    def size_bytes(self) -> int:
        return len(self.data)


@dataclass
class AudioStats:
    """Audio recording statistics."""
    is_recording: bool
    duration_seconds: float
    sample_rate: int
    chunk_size: int
    total_chunks: int
    peak_level: float = 0.0


@dataclass
class AudioFrame:
    """A single audio frame with timestamp."""
    data: bytes
    timestamp: float  # Time when this frame was captured
    frame_number: int

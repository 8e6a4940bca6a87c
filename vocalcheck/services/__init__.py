"""Services layer for VocalCheck application logic."""

from .session_controller import SessionController, AudioRecorder
from .events import EventPublisher

__all__ = [
    "SessionController",
    "AudioRecorder",
    "EventPublisher",
]

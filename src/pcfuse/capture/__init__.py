"""Capture side: frame model, session gate, on-disk recordings."""

from .frame import Frame
from .session import CaptureSession, FrameOutcome
from .recording import RecordingError, iter_recording, load_frame, save_frame

__all__ = [
    "CaptureSession",
    "Frame",
    "FrameOutcome",
    "RecordingError",
    "iter_recording",
    "load_frame",
    "save_frame",
]

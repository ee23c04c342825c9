"""Audio-related data models."""

from dataclasses import dataclass


@dataclass
class AudioPayload:
    """A finalized recording ready for transcription."""
    data: bytes
    mime_type: str
    duration_seconds: float = 0.0
    peak_level: float = 0.0  # 0.0 - 1.0


@dataclass
class CaptureHandle:
    """Opaque handle for an acquired input stream."""
    handle_id: int
    sample_rate: int
    channels: int

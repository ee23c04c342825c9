"""Session-related data models."""

from enum import Enum


class SessionPhase(Enum):
    """Recording lifecycle phases."""
    IDLE = "idle"
    RECORDING = "recording"
    PROCESSING = "processing"

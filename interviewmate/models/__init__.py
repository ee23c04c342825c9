"""Data models for the InterviewMate application."""

from .conversation import Speaker, ConversationMessage, AISuggestion
from .audio import AudioPayload, CaptureHandle
from .session import SessionPhase
from .ui import SessionStatus

__all__ = [
    "Speaker",
    "ConversationMessage",
    "AISuggestion",
    "AudioPayload",
    "CaptureHandle",
    "SessionPhase",
    "SessionStatus",
]

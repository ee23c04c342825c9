"""Services layer for InterviewMate session orchestration."""

from .conversation_log import ConversationLog, DuplicatePolicy
from .suggestion_pipeline import SuggestionPipeline
from .speaker_registry import SpeakerRegistry
from .recording_session import RecordingSession, DurationTicker
from .event_bridge import EventBridge
from .notifier import AbstractNotifier, LoggingNotifier
from .coordinator import InterviewCoordinator

__all__ = [
    "ConversationLog",
    "DuplicatePolicy",
    "SuggestionPipeline",
    "SpeakerRegistry",
    "RecordingSession",
    "DurationTicker",
    "EventBridge",
    "AbstractNotifier",
    "LoggingNotifier",
    "InterviewCoordinator",
]

"""UI-related data models."""

from dataclasses import dataclass, field
from typing import List, Optional

from .conversation import AISuggestion, ConversationMessage, Speaker
from .session import SessionPhase


@dataclass
class SessionStatus:
    """Snapshot of everything the view needs to draw one frame."""
    phase: SessionPhase = SessionPhase.IDLE
    speaker: Speaker = Speaker.INTERVIEWEE
    duration_seconds: int = 0
    messages: List[ConversationMessage] = field(default_factory=list)
    suggestion: Optional[AISuggestion] = None
    pending_alert: Optional[str] = None

    @property
    def is_recording(self) -> bool:
        return self.phase is SessionPhase.RECORDING

    @property
    def is_processing(self) -> bool:
        return self.phase is SessionPhase.PROCESSING

"""Conversation-related data models."""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List


class Speaker(str, Enum):
    """The two fixed conversation roles."""
    INTERVIEWER = "interviewer"
    INTERVIEWEE = "interviewee"

    def other(self) -> "Speaker":
        if self is Speaker.INTERVIEWER:
            return Speaker.INTERVIEWEE
        return Speaker.INTERVIEWER

    @property
    def label(self) -> str:
        return "Interviewer" if self is Speaker.INTERVIEWER else "You"


@dataclass
class ConversationMessage:
    """A single utterance as stored by the host."""
    id: str
    speaker: Speaker
    text: str
    timestamp: int  # Milliseconds since epoch, assigned by the host
    edited: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConversationMessage":
        """Build a message from the host's JSON representation.

        Raises:
            KeyError: If a required field is missing
            ValueError: If the speaker role is unknown
        """
        return cls(
            id=str(data["id"]),
            speaker=Speaker(data["speaker"]),
            text=data.get("text") or "",
            timestamp=int(data["timestamp"]),
            edited=bool(data.get("edited", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "speaker": self.speaker.value,
            "text": self.text,
            "timestamp": self.timestamp,
            "edited": self.edited,
        }

    def with_revision(self, other: "ConversationMessage") -> "ConversationMessage":
        """Copy of this message carrying the mutable fields of ``other``."""
        return replace(self, text=other.text, edited=other.edited)


@dataclass
class AISuggestion:
    """Answer suggestions for the latest interviewer question."""
    suggestions: List[str] = field(default_factory=list)  # Display priority order
    reasoning: str = ""

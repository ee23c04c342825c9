"""Wire envelopes returned by the host, validated with pydantic."""

from typing import List, Optional

from pydantic import BaseModel, field_validator

from ..models.conversation import AISuggestion, ConversationMessage, Speaker


class HostEnvelope(BaseModel):
    """Every host response carries a success flag."""
    success: bool
    error: Optional[str] = None


class MessageSchema(BaseModel):
    id: str
    speaker: Speaker
    text: str = ""
    timestamp: int
    edited: bool = False

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        return str(value)

    def to_message(self) -> ConversationMessage:
        return ConversationMessage(
            id=self.id,
            speaker=self.speaker,
            text=self.text,
            timestamp=self.timestamp,
            edited=self.edited,
        )


class ConversationResponse(HostEnvelope):
    messages: List[MessageSchema] = []


class TranscriptionResultSchema(BaseModel):
    text: str = ""


class TranscribeResponse(HostEnvelope):
    result: Optional[TranscriptionResultSchema] = None


class SuggestionSchema(BaseModel):
    suggestions: List[str] = []
    reasoning: str = ""

    def to_suggestion(self) -> AISuggestion:
        return AISuggestion(suggestions=list(self.suggestions), reasoning=self.reasoning)


class SuggestionsResponse(HostEnvelope):
    suggestions: Optional[SuggestionSchema] = None


class ToggleSpeakerResponse(HostEnvelope):
    speaker: Optional[Speaker] = None

"""Abstract contract for the host process that owns the conversation."""

from abc import ABC, abstractmethod
from typing import List

from ..models.conversation import AISuggestion, ConversationMessage, Speaker


class AbstractHostClient(ABC):
    """Request/response side of the host collaborator.

    Writes are fire-and-request: a successful ``add_conversation_message``
    only asks the host to persist the message. The host answers with a
    ``message-added`` push event, which is the only path that changes the
    local conversation log.
    """

    @abstractmethod
    async def get_conversation(self) -> List[ConversationMessage]:
        """Fetch the canonical conversation.

        Raises:
            LoadFailure: If the host cannot return the conversation
        """

    @abstractmethod
    async def add_conversation_message(self, text: str, speaker: Speaker) -> None:
        """Ask the host to append a message.

        Raises:
            AppendFailure: If the host rejects the message
        """

    @abstractmethod
    async def transcribe_audio(self, payload: bytes, mime_type: str) -> str:
        """Transcribe a recorded payload and return its text.

        Raises:
            TranscriptionFailure: If no transcription was produced
        """

    @abstractmethod
    async def get_answer_suggestions(self, question: str) -> AISuggestion:
        """Generate answer suggestions for an interviewer question.

        Raises:
            SuggestionFailure: If suggestions are unavailable
        """

    @abstractmethod
    async def toggle_speaker(self) -> Speaker:
        """Flip the active speaker on the host and return the new role.

        Raises:
            HostRequestError: If the host does not confirm the change
        """

    async def close(self) -> None:
        """Release transport resources."""

"""Local mirror of the host's canonical conversation."""

import logging
from enum import Enum
from typing import Iterable, List, Optional

from ..models.conversation import ConversationMessage

logger = logging.getLogger(__name__)


class DuplicatePolicy(Enum):
    """What to do when the host re-delivers an id already in the log."""
    APPEND = "append"  # Blind append, keeps both copies
    REJECT = "reject"  # Keep the first delivery, drop the re-delivery
    MERGE = "merge"    # Treat the re-delivery as an update of the existing entry


class ConversationLog:
    """Ordered message cache written only by host events.

    Order is delivery order; messages are never re-sorted by timestamp.
    """

    def __init__(self, duplicate_policy: DuplicatePolicy = DuplicatePolicy.MERGE):
        self.duplicate_policy = duplicate_policy
        self._messages: List[ConversationMessage] = []

    @property
    def messages(self) -> List[ConversationMessage]:
        return list(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def get(self, message_id: str) -> Optional[ConversationMessage]:
        for message in self._messages:
            if message.id == message_id:
                return message
        return None

    def replace_all(self, messages: Iterable[ConversationMessage]) -> None:
        """Load a full snapshot, e.g. the initial fetch."""
        self._messages = []
        for message in messages:
            self.append(message)
        logger.info(f"Conversation log loaded with {len(self._messages)} messages")

    def append(self, message: ConversationMessage) -> bool:
        """Add a delivered message. Returns False if the policy dropped it."""
        if self.duplicate_policy is not DuplicatePolicy.APPEND and self.get(message.id) is not None:
            if self.duplicate_policy is DuplicatePolicy.REJECT:
                logger.warning(f"Rejected duplicate delivery of message {message.id}")
                return False
            logger.info(f"Merging duplicate delivery of message {message.id}")
            return self.update(message)

        self._messages.append(message)
        logger.debug(f"Appended message {message.id} ({message.speaker.value})")
        return True

    def update(self, message: ConversationMessage) -> bool:
        """Replace text and edited flag of every entry with ``message.id``.

        Id and timestamp of the stored entry are kept. Unknown ids are ignored.
        """
        found = False
        for index, existing in enumerate(self._messages):
            if existing.id == message.id:
                self._messages[index] = existing.with_revision(message)
                found = True

        if not found:
            logger.warning(f"Update for unknown message {message.id} ignored")
        return found

    def clear(self) -> None:
        self._messages = []
        logger.info("Conversation log cleared")

"""Answer suggestions for the most recent interviewer question."""

import logging
from typing import Optional

from pubsub import pub

from ..host.base import AbstractHostClient
from ..models.conversation import AISuggestion
from ..models.events import TOPIC_SUGGESTIONS_CHANGED

logger = logging.getLogger(__name__)


class SuggestionPipeline:
    """Requests suggestions and drops results that arrive after an invalidation.

    Every invalidation bumps ``generation``. A request remembers the
    generation it started in and only applies its result if nothing has
    changed by the time the host answers. Nothing is cancelled downstream.
    """

    def __init__(self, host: AbstractHostClient):
        self.host = host
        self.generation = 0
        self._current: Optional[AISuggestion] = None

    @property
    def current(self) -> Optional[AISuggestion]:
        return self._current

    def invalidate(self, reason: str) -> None:
        """Clear the displayed suggestion and orphan pending requests."""
        self.generation += 1
        logger.debug(f"Suggestions invalidated ({reason}), generation={self.generation}")
        self._set_current(None)

    async def request(self, question: str) -> bool:
        """Fetch suggestions for ``question``.

        Returns:
            True if the result became current, False if it failed or went stale
        """
        token = self.generation
        logger.info(f"Requesting suggestions (generation={token})")
        try:
            suggestion = await self.host.get_answer_suggestions(question)
        except Exception as e:
            # Suggestions are best-effort and never interrupt the interview
            logger.error(f"Failed to get AI suggestions: {e}")
            return False

        if token != self.generation:
            logger.warning(f"Discarding stale suggestions (generation {token} != {self.generation})")
            return False

        self._set_current(suggestion)
        return True

    def _set_current(self, suggestion: Optional[AISuggestion]) -> None:
        if suggestion is None and self._current is None:
            return
        self._current = suggestion
        pub.sendMessage(TOPIC_SUGGESTIONS_CHANGED, suggestion=suggestion)

"""Active speaker role."""

import logging
from typing import Callable

from ..errors import HostRequestError, SpeakerToggleRejected
from ..host.base import AbstractHostClient
from ..models.conversation import Speaker
from ..models.session import SessionPhase
from .suggestion_pipeline import SuggestionPipeline

logger = logging.getLogger(__name__)


class SpeakerRegistry:
    """Tracks which of the two roles is speaking now."""

    def __init__(self, host: AbstractHostClient, pipeline: SuggestionPipeline,
                 phase_provider: Callable[[], SessionPhase],
                 initial: Speaker = Speaker.INTERVIEWEE):
        """Initialize speaker registry.

        Args:
            host: Host client used to flip the canonical speaker
            pipeline: Suggestions to invalidate on every role change
            phase_provider: Returns the current recording phase
            initial: Role active before the host reports one
        """
        self.host = host
        self.pipeline = pipeline
        self.phase_provider = phase_provider
        self._active = initial
        self._toggling = False

    @property
    def active(self) -> Speaker:
        return self._active

    @property
    def toggle_pending(self) -> bool:
        """True while a toggle request is waiting on the host."""
        return self._toggling

    def can_toggle(self) -> bool:
        return not self._toggling and self.phase_provider() is SessionPhase.IDLE

    async def toggle(self) -> Speaker:
        """Switch roles through the host.

        Raises:
            SpeakerToggleRejected: If a recording is in progress or processing,
                or another toggle is still waiting on the host
        """
        phase = self.phase_provider()
        if phase is not SessionPhase.IDLE:
            raise SpeakerToggleRejected(f"Cannot toggle speaker while {phase.value}")
        if self._toggling:
            raise SpeakerToggleRejected("Speaker toggle already in progress")

        self._toggling = True
        try:
            speaker = await self.host.toggle_speaker()
        except HostRequestError as e:
            logger.error(f"Failed to toggle speaker: {e}")
            return self._active
        finally:
            self._toggling = False

        phase = self.phase_provider()
        if phase is not SessionPhase.IDLE:
            # The host has already switched; follow it rather than diverge
            logger.warning(f"Speaker toggle completed while {phase.value}")

        self._adopt(speaker, "toggle")
        return speaker

    def apply_remote(self, speaker: Speaker) -> None:
        """Adopt a role pushed by the host."""
        self._adopt(speaker, "host")

    def _adopt(self, speaker: Speaker, source: str) -> None:
        logger.info(f"Active speaker {self._active.value} -> {speaker.value} ({source})")
        self._active = speaker
        self.pipeline.invalidate(f"speaker changed by {source}")

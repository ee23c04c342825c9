"""Composition root wiring the session components together."""

import logging
from typing import Optional

from pubsub import pub

from ..audio.capture import AbstractCaptureDevice
from ..config import InterviewMateConfig
from ..host.base import AbstractHostClient
from ..models.conversation import Speaker
from ..models.events import TOPIC_TOGGLE_RECORDING
from ..models.session import SessionPhase
from ..models.ui import SessionStatus
from .conversation_log import ConversationLog, DuplicatePolicy
from .event_bridge import EventBridge
from .notifier import AbstractNotifier, LoggingNotifier
from .recording_session import RecordingSession
from .speaker_registry import SpeakerRegistry
from .suggestion_pipeline import SuggestionPipeline

logger = logging.getLogger(__name__)


class InterviewCoordinator:
    """Single entry point for the UI and the CLI.

    Builds the suggestion pipeline, conversation log, recording session,
    speaker registry and event bridge around one host client and one
    capture device.
    """

    def __init__(self,
                 host: AbstractHostClient,
                 capture: AbstractCaptureDevice,
                 notifier: Optional[AbstractNotifier] = None,
                 initial_speaker: Speaker = Speaker.INTERVIEWEE,
                 duplicate_policy: DuplicatePolicy = DuplicatePolicy.MERGE,
                 tick_interval_seconds: float = 1.0):
        self.host = host
        self.capture = capture
        self.notifier = notifier or LoggingNotifier()

        self.pipeline = SuggestionPipeline(host)
        self.log = ConversationLog(duplicate_policy)
        self.session = RecordingSession(
            capture=capture,
            host=host,
            pipeline=self.pipeline,
            notifier=self.notifier,
            speaker_provider=self._active_speaker,
            tick_interval_seconds=tick_interval_seconds,
            start_blocker=self._start_blocker,
        )
        self.registry = SpeakerRegistry(
            host=host,
            pipeline=self.pipeline,
            phase_provider=self._phase,
            initial=initial_speaker,
        )
        self.bridge = EventBridge(
            host=host,
            log=self.log,
            registry=self.registry,
            session=self.session,
            pipeline=self.pipeline,
        )
        logger.info("InterviewCoordinator initialized")

    @classmethod
    def from_config(cls, config: InterviewMateConfig, host: AbstractHostClient,
                    capture: AbstractCaptureDevice,
                    notifier: Optional[AbstractNotifier] = None) -> "InterviewCoordinator":
        return cls(
            host=host,
            capture=capture,
            notifier=notifier,
            initial_speaker=Speaker(config.get('session.initial_speaker', 'interviewee')),
            duplicate_policy=DuplicatePolicy(config.get('conversation.duplicate_policy', 'merge')),
            tick_interval_seconds=float(config.get('session.tick_interval_seconds', 1.0)),
        )

    def _active_speaker(self) -> Speaker:
        return self.registry.active

    def _phase(self) -> SessionPhase:
        return self.session.phase

    def _start_blocker(self) -> Optional[str]:
        if self.registry.toggle_pending:
            return "speaker change in progress"
        return None

    async def activate(self) -> None:
        await self.bridge.activate()

    async def teardown(self) -> None:
        await self.bridge.teardown()

    async def start_recording(self) -> None:
        await self.session.start()

    async def stop_recording(self):
        return await self.session.stop()

    async def toggle_speaker(self) -> Speaker:
        return await self.registry.toggle()

    def request_toggle_recording(self) -> None:
        """Fire the local toggle-recording signal."""
        pub.sendMessage(TOPIC_TOGGLE_RECORDING)

    def status(self, pending_alert: Optional[str] = None) -> SessionStatus:
        return SessionStatus(
            phase=self.session.phase,
            speaker=self.registry.active,
            duration_seconds=self.session.duration_seconds,
            messages=self.log.messages,
            suggestion=self.pipeline.current,
            pending_alert=pending_alert,
        )

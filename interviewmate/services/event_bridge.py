"""Turns host push events and local shortcuts into state changes."""

import asyncio
import logging
from typing import Callable, Set, Tuple

from pubsub import pub

from ..errors import CaptureUnavailable, LoadFailure, SessionStateError
from ..host.base import AbstractHostClient
from ..models.conversation import ConversationMessage, Speaker
from ..models.events import (
    TOPIC_CONVERSATION_CLEARED,
    TOPIC_MESSAGE_ADDED,
    TOPIC_MESSAGE_UPDATED,
    TOPIC_SPEAKER_CHANGED,
    TOPIC_TOGGLE_RECORDING,
)
from .conversation_log import ConversationLog
from .recording_session import RecordingSession
from .speaker_registry import SpeakerRegistry
from .suggestion_pipeline import SuggestionPipeline

logger = logging.getLogger(__name__)

Subscription = Tuple[Callable, str]


class EventBridge:
    """Owns every standing subscription of an active conversation view.

    The conversation log is written only from here: the initial load and the
    host's message events. Local actions never touch the log directly.
    """

    def __init__(self,
                 host: AbstractHostClient,
                 log: ConversationLog,
                 registry: SpeakerRegistry,
                 session: RecordingSession,
                 pipeline: SuggestionPipeline):
        self.host = host
        self.log = log
        self.registry = registry
        self.session = session
        self.pipeline = pipeline

        self._subscriptions: Set[Subscription] = set()
        self._tasks: Set[asyncio.Task] = set()
        self.active = False

    async def activate(self) -> None:
        """Subscribe to all streams, then load the conversation."""
        if self.active:
            logger.debug("EventBridge already active")
            return

        self._subscribe(TOPIC_MESSAGE_ADDED, self._on_message_added)
        self._subscribe(TOPIC_MESSAGE_UPDATED, self._on_message_updated)
        self._subscribe(TOPIC_SPEAKER_CHANGED, self._on_speaker_changed)
        self._subscribe(TOPIC_CONVERSATION_CLEARED, self._on_conversation_cleared)
        self._subscribe(TOPIC_TOGGLE_RECORDING, self._on_toggle_recording)
        self.active = True
        logger.info(f"EventBridge active with {len(self._subscriptions)} subscriptions")

        await self._load_conversation()

    async def _load_conversation(self) -> None:
        try:
            loaded = await self.host.get_conversation()
        except LoadFailure as e:
            logger.error(f"Failed to load conversation: {e}")
            return

        # Keep messages pushed while the fetch was in flight
        loaded_ids = {m.id for m in loaded}
        arrived = [m for m in self.log.messages if m.id not in loaded_ids]
        self.log.replace_all(loaded + arrived)

    def _subscribe(self, topic: str, handler: Callable) -> None:
        pub.subscribe(handler, topic)
        self._subscriptions.add((handler, topic))

    async def teardown(self) -> None:
        """Release every subscription and the duration ticker. Safe to call twice."""
        while self._subscriptions:
            handler, topic = self._subscriptions.pop()
            pub.unsubscribe(handler, topic)
        await self.session.shutdown()
        if self.active:
            logger.info("EventBridge torn down")
        self.active = False

    async def drain(self) -> None:
        """Wait for toggle-recording tasks still in flight."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _on_message_added(self, message: ConversationMessage) -> None:
        self.log.append(message)

    def _on_message_updated(self, message: ConversationMessage) -> None:
        self.log.update(message)

    def _on_speaker_changed(self, speaker: Speaker) -> None:
        self.registry.apply_remote(speaker)

    def _on_conversation_cleared(self) -> None:
        self.log.clear()
        self.pipeline.invalidate("conversation cleared")

    def _on_toggle_recording(self) -> None:
        task = asyncio.get_running_loop().create_task(self.toggle_recording())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def toggle_recording(self) -> None:
        """Stop if recording right now, otherwise start."""
        try:
            if self.session.is_recording:
                await self.session.stop()
            else:
                await self.session.start()
        except SessionStateError as e:
            logger.warning(f"Ignoring toggle-recording: {e}")
        except CaptureUnavailable as e:
            logger.info(f"Recording not started: {e}")

"""WebSocket reader that republishes host push events on pub/sub topics."""

import asyncio
import json
import logging
from typing import Any, Dict, Optional

import aiohttp
from pubsub import pub

from ..models.conversation import ConversationMessage, Speaker
from ..models.events import (
    HOST_EVENT_TOPICS,
    TOPIC_CONVERSATION_CLEARED,
    TOPIC_MESSAGE_ADDED,
    TOPIC_MESSAGE_UPDATED,
    TOPIC_SPEAKER_CHANGED,
)

logger = logging.getLogger(__name__)


class HostEventStream:
    """Reads ``{"event": ..., "payload": ...}`` frames in delivery order.

    Frames are dispatched one at a time on the event loop, so listeners see
    host events in exactly the order the host sent them.
    """

    def __init__(self, base_url: str, session: Optional[aiohttp.ClientSession] = None,
                 reconnect_delay: float = 2.0):
        self.url = f"{base_url.rstrip('/')}/events"
        self.reconnect_delay = reconnect_delay
        self._session = session
        self._owns_session = session is None
        self._stopped = asyncio.Event()
        self.frames_dispatched = 0

    async def run(self) -> None:
        """Consume the stream until ``stop()``, reconnecting after drops."""
        if self._session is None:
            self._session = aiohttp.ClientSession()
        try:
            while not self._stopped.is_set():
                try:
                    await self._consume()
                except aiohttp.ClientError as e:
                    logger.warning(f"Host event stream disconnected: {e!r}")
                if self._stopped.is_set():
                    break
                try:
                    await asyncio.wait_for(self._stopped.wait(), timeout=self.reconnect_delay)
                except asyncio.TimeoutError:
                    logger.info("Reconnecting to host event stream")
        finally:
            if self._owns_session and self._session is not None:
                await self._session.close()
                self._session = None

    async def _consume(self) -> None:
        async with self._session.ws_connect(self.url) as ws:
            logger.info(f"Connected to host event stream: {self.url}")
            async for msg in ws:
                if msg.type == aiohttp.WSMsgType.TEXT:
                    try:
                        self.dispatch(msg.data)
                    except Exception as e:
                        logger.error(f"Listener failed for host event: {e}", exc_info=True)
                elif msg.type == aiohttp.WSMsgType.ERROR:
                    logger.warning(f"Host event stream error: {ws.exception()!r}")
                    break
                if self._stopped.is_set():
                    break

    def stop(self) -> None:
        self._stopped.set()

    def dispatch(self, raw: str) -> bool:
        """Publish one raw frame. Returns False for malformed or unknown frames."""
        try:
            frame = json.loads(raw)
            name = frame["event"]
            payload = frame.get("payload") or {}
        except (ValueError, TypeError, KeyError) as e:
            logger.warning(f"Dropping malformed host frame: {e!r}")
            return False

        topic = HOST_EVENT_TOPICS.get(name)
        if topic is None:
            logger.debug(f"Ignoring unknown host event: {name}")
            return False

        try:
            kwargs = _topic_arguments(topic, payload)
        except (KeyError, ValueError, TypeError) as e:
            logger.warning(f"Dropping host event {name} with bad payload: {e!r}")
            return False

        pub.sendMessage(topic, **kwargs)
        self.frames_dispatched += 1
        return True


def _topic_arguments(topic: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    if topic in (TOPIC_MESSAGE_ADDED, TOPIC_MESSAGE_UPDATED):
        return {"message": ConversationMessage.from_dict(payload["message"])}
    if topic == TOPIC_SPEAKER_CHANGED:
        return {"speaker": Speaker(payload["speaker"])}
    if topic == TOPIC_CONVERSATION_CLEARED:
        return {}
    raise ValueError(f"No argument mapping for topic {topic}")

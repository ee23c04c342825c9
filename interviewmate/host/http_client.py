"""aiohttp client for the host's request/response endpoints."""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Type

import aiohttp
from pydantic import ValidationError

from ..errors import (
    AppendFailure,
    HostRequestError,
    LoadFailure,
    SuggestionFailure,
    TranscriptionFailure,
)
from ..models.conversation import AISuggestion, ConversationMessage, Speaker
from .base import AbstractHostClient
from .schemas import (
    ConversationResponse,
    HostEnvelope,
    SuggestionsResponse,
    ToggleSpeakerResponse,
    TranscribeResponse,
)

logger = logging.getLogger(__name__)


class HttpHostClient(AbstractHostClient):
    """Talks to the host process over HTTP."""

    def __init__(self, base_url: str, timeout_seconds: float = 30.0,
                 session: Optional[aiohttp.ClientSession] = None):
        """Initialize host client.

        Args:
            base_url: Host root URL, e.g. http://127.0.0.1:8765
            timeout_seconds: Total timeout per request
            session: Optional shared session; created lazily when omitted
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._session = session
        self._owns_session = session is None

        logger.info(f"HttpHostClient initialized for {self.base_url}")

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
            self._owns_session = True
        return self._session

    async def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            async with self._get_session().request(method, url, **kwargs) as response:
                if response.status >= 300:
                    error_text = await response.text()
                    raise HostRequestError(f"{method} {path} failed: {response.status} - {error_text}")
                return await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            # ValueError covers a body declared as JSON that does not parse
            raise HostRequestError(f"{method} {path} failed: {e!r}") from e

    async def _call(self, schema: Type[HostEnvelope], failure: Type[Exception],
                    method: str, path: str, **kwargs) -> Any:
        """Run a request and validate its envelope, mapping errors to ``failure``."""
        try:
            payload = await self._request(method, path, **kwargs)
            parsed = schema.model_validate(payload)
        except (HostRequestError, ValidationError) as e:
            raise failure(str(e)) from e

        if not parsed.success:
            raise failure(parsed.error or f"{method} {path} reported failure")
        return parsed

    async def get_conversation(self) -> List[ConversationMessage]:
        parsed = await self._call(ConversationResponse, LoadFailure, "GET", "/conversation")
        messages = [m.to_message() for m in parsed.messages]
        logger.debug(f"Loaded {len(messages)} conversation messages")
        return messages

    async def add_conversation_message(self, text: str, speaker: Speaker) -> None:
        await self._call(HostEnvelope, AppendFailure, "POST", "/conversation/messages",
                         json={"text": text, "speaker": speaker.value})

    async def transcribe_audio(self, payload: bytes, mime_type: str) -> str:
        parsed = await self._call(TranscribeResponse, TranscriptionFailure, "POST", "/transcribe",
                                  data=payload, headers={"Content-Type": mime_type})
        if parsed.result is None:
            raise TranscriptionFailure("Transcription returned no result")
        return parsed.result.text

    async def get_answer_suggestions(self, question: str) -> AISuggestion:
        parsed = await self._call(SuggestionsResponse, SuggestionFailure, "POST", "/suggestions",
                                  json={"question": question})
        if parsed.suggestions is None:
            raise SuggestionFailure("Host returned no suggestions")
        return parsed.suggestions.to_suggestion()

    async def toggle_speaker(self) -> Speaker:
        parsed = await self._call(ToggleSpeakerResponse, HostRequestError, "POST", "/speaker/toggle")
        if parsed.speaker is None:
            raise HostRequestError("Host did not report the new speaker")
        return parsed.speaker

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

"""Recording lifecycle: capture, transcribe, append, maybe suggest."""

import asyncio
import logging
from typing import Callable, Optional

from pubsub import pub

from ..audio.capture import AbstractCaptureDevice
from ..errors import (
    AppendFailure,
    CaptureUnavailable,
    SessionStateError,
    TranscriptionFailure,
)
from ..host.base import AbstractHostClient
from ..models.audio import CaptureHandle
from ..models.conversation import Speaker
from ..models.events import TOPIC_DURATION_TICK
from ..models.session import SessionPhase
from .notifier import AbstractNotifier
from .suggestion_pipeline import SuggestionPipeline

logger = logging.getLogger(__name__)


class DurationTicker:
    """Counts whole seconds of recording on a periodic asyncio task."""

    def __init__(self, interval_seconds: float = 1.0):
        self.interval_seconds = interval_seconds
        self.seconds = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None

    def start(self) -> None:
        """Reset to zero and start ticking. Must be called from the event loop."""
        self.cancel()
        self.seconds = 0
        self._task = asyncio.get_running_loop().create_task(self._run())

    def cancel(self) -> bool:
        """Stop ticking. Returns False if there was nothing to cancel."""
        if self._task is None:
            return False
        self._task.cancel()
        self._task = None
        return True

    def reset(self) -> None:
        self.seconds = 0

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            self.seconds += 1
            pub.sendMessage(TOPIC_DURATION_TICK, seconds=self.seconds)


class RecordingSession:
    """Owns the Idle -> Recording -> Processing -> Idle state machine.

    The capture handle and the duration ticker are held exclusively here.
    Both are released on every exit path of ``stop()`` and on ``shutdown()``.
    """

    def __init__(self,
                 capture: AbstractCaptureDevice,
                 host: AbstractHostClient,
                 pipeline: SuggestionPipeline,
                 notifier: AbstractNotifier,
                 speaker_provider: Callable[[], Speaker],
                 tick_interval_seconds: float = 1.0,
                 start_blocker: Optional[Callable[[], Optional[str]]] = None):
        """Initialize recording session.

        Args:
            capture: Audio capture collaborator
            host: Host client for transcription and message append
            pipeline: Suggestion pipeline fed by interviewer utterances
            notifier: Channel for failures the user has to acknowledge
            speaker_provider: Returns the active speaker
            tick_interval_seconds: Duration ticker cadence
            start_blocker: Returns a reason to refuse start, or None to allow it
        """
        self.capture = capture
        self.host = host
        self.pipeline = pipeline
        self.notifier = notifier
        self.speaker_provider = speaker_provider
        self.start_blocker = start_blocker
        self.ticker = DurationTicker(tick_interval_seconds)

        self._phase = SessionPhase.IDLE
        self._handle: Optional[CaptureHandle] = None
        self._transition = False  # True while start() waits on the capture device
        self._closed = False

    @property
    def phase(self) -> SessionPhase:
        return self._phase

    @property
    def is_recording(self) -> bool:
        return self._phase is SessionPhase.RECORDING

    @property
    def is_processing(self) -> bool:
        return self._phase is SessionPhase.PROCESSING

    @property
    def duration_seconds(self) -> int:
        return self.ticker.seconds

    async def start(self) -> None:
        """Begin a recording.

        Raises:
            SessionStateError: If not idle, or the start blocker refused
            CaptureUnavailable: If the capture device refused; already surfaced
        """
        if self._phase is not SessionPhase.IDLE or self._transition:
            raise SessionStateError(f"Cannot start recording while {self._phase.value}")
        blocked = self.start_blocker() if self.start_blocker else None
        if blocked:
            raise SessionStateError(f"Cannot start recording: {blocked}")

        self._closed = False
        self.pipeline.invalidate("new recording")
        self._transition = True
        try:
            self._handle = await self.capture.start_capture()
        except CaptureUnavailable as e:
            self.ticker.reset()
            logger.error(f"Failed to start recording: {e}")
            await self.notifier.alert(
                str(e) or "Failed to start recording. Please check microphone permissions.")
            raise
        finally:
            self._transition = False

        if self._closed:
            # shutdown() ran while the device was opening
            handle, self._handle = self._handle, None
            await _release_off_loop(self.capture, handle)
            self.ticker.reset()
            logger.info(f"Recording abandoned, session shut down during start (handle {handle.handle_id})")
            return

        self._phase = SessionPhase.RECORDING
        self.ticker.start()
        logger.info(f"Recording started (handle {self._handle.handle_id})")

    async def stop(self) -> Optional[str]:
        """Finish the recording and run it through the pipeline.

        Returns:
            The transcribed text, or None if processing failed

        Raises:
            SessionStateError: If not recording
        """
        if self._phase is not SessionPhase.RECORDING or self._transition:
            raise SessionStateError(f"Cannot stop recording while {self._phase.value}")

        speaker = self.speaker_provider()
        self.ticker.cancel()
        self._phase = SessionPhase.PROCESSING
        logger.info(f"Recording stopped, processing as {speaker.value}")

        try:
            payload = await self._finalize_capture()
            text = await self.host.transcribe_audio(payload.data, payload.mime_type)
            logger.info(f"Transcribed {payload.duration_seconds:.1f}s of audio: '{text[:50]}'")

            # The message shows up in the log via the host's message-added event
            await self.host.add_conversation_message(text, speaker)

            if speaker is Speaker.INTERVIEWER:
                await self.pipeline.request(text)
            else:
                self.pipeline.invalidate("interviewee answered")
            return text
        except (CaptureUnavailable, TranscriptionFailure, AppendFailure) as e:
            logger.error(f"Failed to process recording: {e}")
            await self.notifier.alert(str(e) or "Failed to process recording")
            return None
        finally:
            self._phase = SessionPhase.IDLE
            self.ticker.reset()
            logger.debug("Session back to idle")

    async def _finalize_capture(self):
        handle = self._handle
        try:
            return await self.capture.stop_capture(handle)
        finally:
            self.capture.release(handle)
            self._handle = None

    async def shutdown(self) -> None:
        """Cancel the ticker and drop any held capture handle. Idempotent.

        A start() still waiting on the device releases its handle once it
        returns, instead of entering the recording state.
        """
        self._closed = True
        self.ticker.cancel()
        if self._handle is not None:
            handle, self._handle = self._handle, None
            await _release_off_loop(self.capture, handle)
        if self._phase is SessionPhase.RECORDING:
            self._phase = SessionPhase.IDLE
            self.ticker.reset()
        logger.debug("Recording session shut down")


async def _release_off_loop(capture: AbstractCaptureDevice, handle: CaptureHandle) -> None:
    """Release on a worker thread; releasing may join the capture thread."""
    loop = asyncio.get_running_loop()
    await loop.run_in_executor(None, capture.release, handle)

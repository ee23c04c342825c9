"""Pytest configuration and fixtures for InterviewMate tests."""

import asyncio
import itertools
import logging
import time
from typing import List, Optional
from unittest.mock import Mock, patch

import numpy as np
import pytest
from pubsub import pub

from interviewmate.audio.capture import AbstractCaptureDevice
from interviewmate.host.base import AbstractHostClient
from interviewmate.models.audio import AudioPayload, CaptureHandle
from interviewmate.models.conversation import AISuggestion, ConversationMessage, Speaker
from interviewmate.models.events import TOPIC_MESSAGE_ADDED
from interviewmate.services.coordinator import InterviewCoordinator
from interviewmate.services.notifier import AbstractNotifier


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class FakeHost(AbstractHostClient):
    """In-memory host that pushes message-added events like the real one."""

    def __init__(self):
        self.messages: List[ConversationMessage] = []
        self.speaker = Speaker.INTERVIEWEE
        self.transcription_text = "Hello"
        self.transcription_error: Optional[Exception] = None
        self.append_error: Optional[Exception] = None
        self.load_error: Optional[Exception] = None
        self.suggestion_error: Optional[Exception] = None
        self.suggestion = AISuggestion(suggestions=["Mention retries", "Talk about timeouts"],
                                       reasoning="Reliability question")
        self.hold_suggestions = False
        self.pending_suggestions: List[asyncio.Future] = []
        self.transcription_gate: Optional[asyncio.Future] = None

        self.transcribe_calls = []
        self.append_calls = []
        self.suggestion_requests = []
        self.toggle_calls = 0
        self.toggle_gate: Optional[asyncio.Future] = None
        self._ids = itertools.count(1)

    def make_message(self, text: str, speaker: Speaker) -> ConversationMessage:
        return ConversationMessage(
            id=f"msg-{next(self._ids)}",
            speaker=speaker,
            text=text,
            timestamp=int(time.time() * 1000),
        )

    async def get_conversation(self):
        if self.load_error:
            raise self.load_error
        return list(self.messages)

    async def add_conversation_message(self, text, speaker):
        self.append_calls.append((text, speaker))
        if self.append_error:
            raise self.append_error
        message = self.make_message(text, speaker)
        self.messages.append(message)
        pub.sendMessage(TOPIC_MESSAGE_ADDED, message=message)

    async def transcribe_audio(self, payload, mime_type):
        self.transcribe_calls.append((payload, mime_type))
        if self.transcription_gate is not None:
            await self.transcription_gate
        if self.transcription_error:
            raise self.transcription_error
        return self.transcription_text

    async def get_answer_suggestions(self, question):
        self.suggestion_requests.append(question)
        if self.hold_suggestions:
            future = asyncio.get_running_loop().create_future()
            self.pending_suggestions.append(future)
            return await future
        if self.suggestion_error:
            raise self.suggestion_error
        return self.suggestion

    async def toggle_speaker(self):
        self.toggle_calls += 1
        if self.toggle_gate is not None:
            await self.toggle_gate
        self.speaker = self.speaker.other()
        return self.speaker


class FakeCapture(AbstractCaptureDevice):
    """Capture device that records calls and returns a fixed payload."""

    def __init__(self):
        self.start_error: Optional[Exception] = None
        self.start_gate: Optional[asyncio.Future] = None
        self.payload = AudioPayload(data=b"RIFF....WAVE", mime_type="audio/wav",
                                    duration_seconds=1.0, peak_level=0.5)
        self.start_calls = 0
        self.stop_calls = 0
        self.released: List[CaptureHandle] = []
        self.active: Optional[CaptureHandle] = None
        self._ids = itertools.count(1)

    async def start_capture(self):
        self.start_calls += 1
        if self.start_gate is not None:
            await self.start_gate
        if self.start_error:
            raise self.start_error
        self.active = CaptureHandle(handle_id=next(self._ids), sample_rate=16000, channels=1)
        return self.active

    async def stop_capture(self, handle):
        self.stop_calls += 1
        self.active = None
        return self.payload

    def release(self, handle):
        self.released.append(handle)
        if self.active is not None and self.active.handle_id == handle.handle_id:
            self.active = None


class RecordingNotifier(AbstractNotifier):
    """Notifier that remembers what it was asked to show."""

    def __init__(self):
        self.alerts: List[str] = []
        self.warnings: List[str] = []

    async def alert(self, message):
        self.alerts.append(message)

    def warn(self, message):
        self.warnings.append(message)


async def wait_for(condition, timeout: float = 1.0) -> None:
    """Yield to the event loop until ``condition()`` holds."""
    deadline = time.monotonic() + timeout
    while not condition():
        if time.monotonic() > deadline:
            raise AssertionError("Condition not met in time")
        await asyncio.sleep(0.001)


@pytest.fixture(autouse=True)
def _reset_pubsub():
    """Drop listeners left behind by a test."""
    yield
    pub.unsubAll()


@pytest.fixture
def fake_host():
    return FakeHost()


@pytest.fixture
def fake_capture():
    return FakeCapture()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def make_coordinator(fake_host, fake_capture, notifier):
    """Factory for coordinators over the shared fakes."""
    def _make(initial_speaker=Speaker.INTERVIEWEE, **kwargs):
        kwargs.setdefault("tick_interval_seconds", 0.01)
        return InterviewCoordinator(
            host=fake_host,
            capture=fake_capture,
            notifier=notifier,
            initial_speaker=initial_speaker,
            **kwargs
        )
    return _make


@pytest.fixture
def sample_audio_chunk():
    """Generate a sample audio chunk for testing."""
    # Generate 1024 samples of 16-bit audio (sine wave)
    sample_rate = 16000
    duration = 1024 / sample_rate
    freq = 440  # A4 note

    t = np.linspace(0, duration, 1024, False)
    wave_data = np.sin(2 * np.pi * freq * t)

    audio_data = (wave_data * 32767 * 0.5).astype(np.int16)
    return audio_data.tobytes()


@pytest.fixture
def mock_pyaudio(sample_audio_chunk):
    """Mock PyAudio for testing without actual audio hardware."""
    with patch('pyaudio.PyAudio') as mock_pyaudio_class:
        mock_pyaudio_instance = Mock()
        mock_stream = Mock()

        def _read(*args, **kwargs):
            time.sleep(0.005)
            return sample_audio_chunk

        mock_stream.read.side_effect = _read
        mock_stream.stop_stream.return_value = None
        mock_stream.close.return_value = None

        mock_pyaudio_instance.open.return_value = mock_stream
        mock_pyaudio_instance.terminate.return_value = None

        mock_pyaudio_class.return_value = mock_pyaudio_instance

        yield {
            'class': mock_pyaudio_class,
            'instance': mock_pyaudio_instance,
            'stream': mock_stream
        }


@pytest.fixture
def config_file(tmp_path):
    """Write a YAML config and return its path."""
    def _write(text: str) -> str:
        path = tmp_path / "interviewmate.yaml"
        path.write_text(text, encoding="utf-8")
        return str(path)
    return _write


@pytest.fixture
def wait_until():
    """Async helper that yields to the loop until a condition holds."""
    return wait_for

"""Microphone capture producing one WAV payload per recording."""

import asyncio
import errno
import io
import itertools
import logging
import wave
from abc import ABC, abstractmethod
from threading import Thread, Event
from typing import List, Optional

import numpy as np
import pyaudio

from ..errors import CaptureUnavailable, DeviceUnavailable, PermissionDenied
from ..models.audio import AudioPayload, CaptureHandle

logger = logging.getLogger(__name__)

WAV_MIME_TYPE = "audio/wav"


class AbstractCaptureDevice(ABC):
    """Audio capture collaborator used by the recording session."""

    @abstractmethod
    async def start_capture(self) -> CaptureHandle:
        """Begin capturing audio.

        Raises:
            PermissionDenied: Microphone access refused
            DeviceUnavailable: No usable input device
        """

    @abstractmethod
    async def stop_capture(self, handle: CaptureHandle) -> AudioPayload:
        """Stop capturing and return everything recorded since start."""

    @abstractmethod
    def release(self, handle: CaptureHandle) -> None:
        """Drop the handle without producing a payload. Safe to call twice."""


class PyAudioCapture(AbstractCaptureDevice):
    """PyAudio input stream read on a background thread."""

    def __init__(
        self,
        sample_rate: int = 16000,
        chunk_size: int = 1024,
        channels: int = 1,
        format: int = pyaudio.paInt16,
    ):
        """Initialize audio capture with specified parameters.

        Args:
            sample_rate: Audio sample rate in Hz
            chunk_size: Size of each audio chunk in samples
            channels: Number of audio channels (1 for mono)
            format: Audio format (16-bit signed int)
        """
        self.sample_rate = sample_rate
        self.chunk_size = chunk_size
        self.channels = channels
        self.format = format

        self.recording_thread: Optional[Thread] = None
        self.stop_event = Event()
        self.is_recording = False
        self.frames: List[bytes] = []
        self.total_chunks = 0

        # Reused across recordings, created on first start
        self.pyaudio_instance: Optional[pyaudio.PyAudio] = None
        self.stream = None
        self._handle: Optional[CaptureHandle] = None
        self._handle_ids = itertools.count(1)

    async def start_capture(self) -> CaptureHandle:
        if self.is_recording:
            raise DeviceUnavailable("Capture already in progress")

        logger.info("Starting audio capture")
        self.stream = self._open_stream()
        self.stop_event.clear()
        self.frames = []
        self.total_chunks = 0

        self.recording_thread = Thread(target=self._record_continuously, daemon=True)
        self.recording_thread.name = "AudioCaptureThread"
        self.recording_thread.start()
        self.is_recording = True

        self._handle = CaptureHandle(
            handle_id=next(self._handle_ids),
            sample_rate=self.sample_rate,
            channels=self.channels,
        )
        return self._handle

    async def stop_capture(self, handle: CaptureHandle) -> AudioPayload:
        self._check_handle(handle)
        logger.info("Stopping audio capture")
        self.stop_event.set()

        thread = self.recording_thread
        if thread and thread.is_alive():
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, thread.join, 2.0)
            if thread.is_alive():
                logger.warning("Recording thread did not stop cleanly")

        self._close_stream()
        self.is_recording = False
        self._handle = None
        logger.info(f"Capture stopped. Total chunks: {self.total_chunks}")
        return self._build_payload(b"".join(self.frames))

    def release(self, handle: CaptureHandle) -> None:
        if self._handle is None or self._handle.handle_id != handle.handle_id:
            return
        self.stop_event.set()
        if self.recording_thread and self.recording_thread.is_alive():
            self.recording_thread.join(timeout=2.0)
        self._close_stream()
        self.is_recording = False
        self._handle = None
        self.frames = []
        logger.info("Capture handle released")

    def terminate(self) -> None:
        """Free the PyAudio instance."""
        if self._handle is not None:
            self.release(self._handle)
        if self.pyaudio_instance:
            self.pyaudio_instance.terminate()
            self.pyaudio_instance = None

    def _check_handle(self, handle: CaptureHandle) -> None:
        if self._handle is None or self._handle.handle_id != handle.handle_id:
            raise CaptureUnavailable(f"Capture handle {handle.handle_id} is not active")

    def _open_stream(self):
        try:
            if self.pyaudio_instance is None:
                self.pyaudio_instance = pyaudio.PyAudio()
            stream = self.pyaudio_instance.open(
                format=self.format,
                channels=self.channels,
                rate=self.sample_rate,
                input=True,
                frames_per_buffer=self.chunk_size,
                stream_callback=None
            )
        except OSError as e:
            raise _map_open_error(e) from e
        logger.info(f"Audio stream opened: {self.sample_rate}Hz, "
                    f"{self.chunk_size} samples/chunk")
        return stream

    def _close_stream(self) -> None:
        if self.stream is None:
            return
        try:
            self.stream.stop_stream()
            self.stream.close()
        except OSError as e:
            logger.warning(f"Error closing audio stream: {e}")
        self.stream = None

    def _record_continuously(self) -> None:
        """Internal method: continuous recording loop in background thread."""
        while not self.stop_event.is_set():
            try:
                audio_chunk = self.stream.read(
                    self.chunk_size,
                    exception_on_overflow=False
                )
            except OSError as e:
                logger.error(f"Audio read failed: {e}")
                break
            self.frames.append(audio_chunk)
            self.total_chunks += 1

    def _build_payload(self, pcm: bytes) -> AudioPayload:
        sample_width = pyaudio.get_sample_size(self.format)
        buffer = io.BytesIO()
        with wave.open(buffer, 'wb') as wf:
            wf.setnchannels(self.channels)
            wf.setsampwidth(sample_width)
            wf.setframerate(self.sample_rate)
            wf.writeframes(pcm)

        bytes_per_second = self.sample_rate * self.channels * sample_width
        return AudioPayload(
            data=buffer.getvalue(),
            mime_type=WAV_MIME_TYPE,
            duration_seconds=len(pcm) / bytes_per_second if bytes_per_second else 0.0,
            # Peak level is only defined for 16-bit samples
            peak_level=peak_level(pcm) if self.format == pyaudio.paInt16 else 0.0,
        )


def peak_level(pcm: bytes) -> float:
    """Peak absolute amplitude of 16-bit PCM, scaled to 0.0 - 1.0."""
    if len(pcm) < 2:
        return 0.0
    samples = np.frombuffer(pcm[: len(pcm) - len(pcm) % 2], dtype=np.int16)
    return float(np.abs(samples.astype(np.int32)).max()) / 32768.0


def _map_open_error(error: OSError) -> CaptureUnavailable:
    message = str(error)
    if error.errno in (errno.EACCES, errno.EPERM) or "permission" in message.lower():
        return PermissionDenied(f"Microphone permission denied: {message}")
    return DeviceUnavailable(f"Audio input device unavailable: {message}")

"""Audio capture module."""

from .capture import AbstractCaptureDevice, PyAudioCapture

__all__ = [
    'AbstractCaptureDevice',
    'PyAudioCapture'
]

"""Exception types raised by the conversation capture core."""


class InterviewMateError(Exception):
    """Base class for all InterviewMate errors."""


class CaptureUnavailable(InterviewMateError):
    """Audio capture could not be started."""


class PermissionDenied(CaptureUnavailable):
    """Microphone access was refused."""


class DeviceUnavailable(CaptureUnavailable):
    """No usable input device."""


class TranscriptionFailure(InterviewMateError):
    """Speech-to-text did not produce a result."""


class AppendFailure(InterviewMateError):
    """The host rejected a new conversation message."""


class SuggestionFailure(InterviewMateError):
    """Answer suggestions could not be generated."""


class LoadFailure(InterviewMateError):
    """The initial conversation fetch failed."""


class HostRequestError(InterviewMateError):
    """Generic host request failure (transport or envelope)."""


class SessionStateError(InterviewMateError):
    """An operation was invoked from a state that does not permit it."""


class SpeakerToggleRejected(SessionStateError):
    """Speaker cannot change while recording or processing."""

"""Terminal user interface for InterviewMate."""

from .conversation_view import ConversationView, format_duration, format_time
from .keyboard_input import KeyboardInputHandler, ShortcutAction
from .notifier import ConsoleNotifier

__all__ = [
    "ConversationView",
    "format_duration",
    "format_time",
    "KeyboardInputHandler",
    "ShortcutAction",
    "ConsoleNotifier",
]

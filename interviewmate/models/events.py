"""Pub/sub topic names shared by the host stream, the core and the UI."""

from pubsub import pub

# Host-pushed events
TOPIC_MESSAGE_ADDED = "conversation_message_added"        # message=ConversationMessage
TOPIC_MESSAGE_UPDATED = "conversation_message_updated"    # message=ConversationMessage
TOPIC_SPEAKER_CHANGED = "conversation_speaker_changed"    # speaker=Speaker
TOPIC_CONVERSATION_CLEARED = "conversation_cleared"       # no payload

# Process-local signals
TOPIC_TOGGLE_RECORDING = "shortcut_toggle_recording"      # no payload
TOPIC_DURATION_TICK = "session_duration_tick"             # seconds=int
TOPIC_SUGGESTIONS_CHANGED = "suggestions_changed"         # suggestion=Optional[AISuggestion]

# Wire names used by the host event stream
HOST_EVENT_TOPICS = {
    "message-added": TOPIC_MESSAGE_ADDED,
    "message-updated": TOPIC_MESSAGE_UPDATED,
    "speaker-changed": TOPIC_SPEAKER_CHANGED,
    "conversation-cleared": TOPIC_CONVERSATION_CLEARED,
}


def _message_listener(message):
    """message: ConversationMessage delivered by the host"""


def _speaker_listener(speaker):
    """speaker: Speaker now active on the host"""


def _no_payload_listener():
    """No message data"""


def _tick_listener(seconds):
    """seconds: whole seconds recorded so far"""


def _suggestion_listener(suggestion):
    """suggestion: current AISuggestion, or None once invalidated"""


TOPIC_PROTOTYPES = {
    TOPIC_MESSAGE_ADDED: _message_listener,
    TOPIC_MESSAGE_UPDATED: _message_listener,
    TOPIC_SPEAKER_CHANGED: _speaker_listener,
    TOPIC_CONVERSATION_CLEARED: _no_payload_listener,
    TOPIC_TOGGLE_RECORDING: _no_payload_listener,
    TOPIC_DURATION_TICK: _tick_listener,
    TOPIC_SUGGESTIONS_CHANGED: _suggestion_listener,
}


def define_topics() -> None:
    """Register every topic with its message data spec. Safe to call repeatedly."""
    manager = pub.getDefaultTopicMgr()
    for name, prototype in TOPIC_PROTOTYPES.items():
        manager.getOrCreateTopic(name, prototype)


define_topics()

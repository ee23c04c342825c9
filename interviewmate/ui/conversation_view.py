"""Terminal rendering of the recording controls, conversation and suggestions."""

from datetime import datetime
from typing import List

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..models.conversation import AISuggestion, ConversationMessage, Speaker
from ..models.ui import SessionStatus


def format_duration(seconds: int) -> str:
    """Format a recording duration as m:ss."""
    mins, secs = divmod(max(0, int(seconds)), 60)
    return f"{mins}:{secs:02d}"


def format_time(timestamp_ms: int) -> str:
    """Format a millisecond epoch timestamp as local HH:MM."""
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%H:%M")


def speaker_label(speaker: Speaker) -> str:
    return "👤 Interviewer" if speaker is Speaker.INTERVIEWER else "🎤 You"


class ConversationView:
    """Builds one rich renderable per frame from a SessionStatus."""

    def __init__(self, shortcuts: dict = None):
        self.shortcuts = shortcuts or {}

    def render(self, status: SessionStatus) -> RenderableType:
        parts: List[RenderableType] = [self.render_controls(status)]
        if status.messages:
            parts.append(self.render_messages(status.messages))
        if status.suggestion:
            parts.append(self.render_suggestion(status.suggestion))
        if status.pending_alert:
            parts.append(Panel(Text(status.pending_alert, style="bold red"),
                               title="⚠️  Error - press any key", style="red"))
        return Group(*parts)

    def render_controls(self, status: SessionStatus) -> Text:
        if status.is_recording:
            record = Text(f"⏹ Stop ({format_duration(status.duration_seconds)})", style="bold white on red")
        else:
            record = Text("⏺ Start Recording", style="bold white on green")
        if status.is_processing:
            record.stylize("dim")

        speaker_style = "bold white on blue"
        if status.is_recording or status.is_processing:
            speaker_style = "dim white on blue"

        controls = Text.assemble(record, "  ", (speaker_label(status.speaker), speaker_style))
        if status.is_processing:
            controls.append("  Processing...", style="italic bright_black")

        keys = []
        if self.shortcuts.get("toggle_recording"):
            keys.append(f"[{_key_name(self.shortcuts['toggle_recording'])}] record")
        if self.shortcuts.get("toggle_speaker"):
            keys.append(f"[{_key_name(self.shortcuts['toggle_speaker'])}] speaker")
        if self.shortcuts.get("quit"):
            keys.append(f"[{_key_name(self.shortcuts['quit'])}] quit")
        if keys:
            controls.append("    " + "  ".join(keys), style="bright_black")
        return controls

    def render_messages(self, messages: List[ConversationMessage]) -> Panel:
        table = Table.grid(padding=(0, 1))
        table.add_column(no_wrap=True)
        table.add_column(ratio=1)
        table.add_column(no_wrap=True, style="bright_black")
        for message in messages:
            style = "blue" if message.speaker is Speaker.INTERVIEWER else "green"
            text = message.text + (" (edited)" if message.edited else "")
            table.add_row(Text(speaker_label(message.speaker), style=style),
                          text,
                          format_time(message.timestamp))
        return Panel(table, title="Conversation", title_align="left")

    def render_suggestion(self, suggestion: AISuggestion) -> Panel:
        lines = Text()
        for index, item in enumerate(suggestion.suggestions):
            if index:
                lines.append("\n")
            lines.append("• ", style="magenta")
            lines.append(item)
        return Panel(lines, title="🤖 AI Answer Suggestions", title_align="left")


def _key_name(key: str) -> str:
    return "space" if key == " " else key

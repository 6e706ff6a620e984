"""plain-text transcript exporter."""

from typing import Sequence

from dualchat.core.models import ChatConversation, Notepad, StoredChatMessage
from dualchat.core.timestamps import display
from dualchat.exporters import exporter
from dualchat.exporters.base import Exporter, RenderContext
from dualchat.exporters.labels import attachment_markers, purpose_label, sender_label

SECTION_SEPARATOR = "\n\n" + "=" * 31 + "\n\n"
BODY_INDENT = "  "


def _single_line(value: str) -> str:
    """flattens line breaks so header fields cannot start a new line."""
    return " ".join(value.splitlines())


def _indent(text: str) -> str:
    """indents every line of a free-text body under its header."""
    return "\n".join(BODY_INDENT + line for line in text.splitlines())


def format_message_line(message: StoredChatMessage) -> str:
    """
    renders one message as '[timestamp] sender (purpose) [markers]: text'.

    continuation lines of the text are indented, so every unindented line
    in a transcript is a header written by the formatter.
    """
    header = (
        f"[{display(message.timestamp)}] "
        f"{sender_label(message.sender)} ({purpose_label(message.purpose)})"
    )
    for marker in attachment_markers(message):
        header += f" [{_single_line(marker)}]"
    first, *rest = message.text.splitlines() or [""]
    line = f"{_single_line(header)}: {first}"
    if rest:
        line += "\n" + _indent("\n".join(rest))
    return line


def _notepad_section(heading: str, notepad: Notepad) -> list[str]:
    history = notepad.history
    return [
        heading,
        _indent(notepad.content) if notepad.content else "",
        "",
        f"(notepad history: {len(history)} snapshot(s), current index {history.cursor})",
    ]


def format_conversation_as_text(conversation: ChatConversation) -> str:
    """human-readable transcript of one conversation."""
    lines = [
        f"# Conversation: {_single_line(conversation.title)}",
        f"ID: {_single_line(conversation.id)}",
        f"Created: {_single_line(display(conversation.created_at))}",
        f"Updated: {_single_line(display(conversation.updated_at))}",
        "",
        "--- Messages ---",
    ]
    for message in conversation.messages:
        lines.append(format_message_line(message))
        lines.append("")

    active = conversation.active_notepad
    if active is None:
        lines.append("--- Notepad (current) ---")
        lines.append("")
    else:
        lines.extend(_notepad_section("--- Notepad (current) ---", active))
        for notepad in conversation.notepads:
            if notepad is not active:
                lines.append("")
                lines.extend(_notepad_section(f"--- Notepad: {_single_line(notepad.title)} ---", notepad))
    return "\n".join(lines)


def format_all_conversations_as_text(conversations: Sequence[ChatConversation]) -> str:
    """transcripts joined by a separator, in caller-supplied order."""
    return SECTION_SEPARATOR.join(format_conversation_as_text(c) for c in conversations)


@exporter("text", "txt")
class TextExporter(Exporter):
    """exports conversations as plain-text transcripts."""

    def render(self, conversation: ChatConversation, ctx: RenderContext) -> str:
        return format_conversation_as_text(conversation)

    def render_all(self, conversations: Sequence[ChatConversation], ctx: RenderContext) -> str:
        return format_all_conversations_as_text(conversations)

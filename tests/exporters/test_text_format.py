"""tests for the plain-text exporter."""

from dualchat.core.history import NotepadHistory
from dualchat.core.models import (
    ChatConversation,
    ImageAttachment,
    Notepad,
    Purpose,
    Sender,
    StoredChatMessage,
    TextAttachment,
)
from dualchat.core.parser import normalize_conversation
from dualchat.exporters.text import (
    SECTION_SEPARATOR,
    format_all_conversations_as_text,
    format_conversation_as_text,
    format_message_line,
)


def _message(text: str = "Hello", **overrides: object) -> StoredChatMessage:
    values: dict = {
        "id": "m1",
        "text": text,
        "sender": Sender.COGNITO,
        "purpose": Purpose.COGNITO_TO_MUSE,
        "timestamp": "2024-01-01T08:00:00.000Z",
    }
    values.update(overrides)
    return StoredChatMessage(**values)


def _conversation(conv_id: str = "conv-1", title: str = "Plan") -> ChatConversation:
    return ChatConversation(
        id=conv_id,
        title=title,
        created_at="2024-01-01T00:00:00.000Z",
        updated_at="2024-01-02T00:00:00.000Z",
        messages=[_message()],
        notepads=[Notepad(id="p1", title="Notebook", history=NotepadHistory(["", "draft"], 1))],
        active_notepad_id="p1",
    )


def test_message_line_layout() -> None:
    """messages render as '[timestamp] sender (purpose): text'."""
    line = format_message_line(_message())
    assert line == "[2024-01-01 08:00:00 UTC] Cognito (cognito-to-muse): Hello"


def test_message_line_attachment_markers() -> None:
    """attachments appear as bracketed markers before the colon."""
    line = format_message_line(
        _message(
            text_attachment=TextAttachment(name="notes.txt", content="x"),
            image=ImageAttachment(data_url="data:image/png;base64,AA", name="pic.png", type="image/png"),
        )
    )
    assert "[attachment: notes.txt] [image: pic.png]: Hello" in line


def test_multiline_text_is_indented() -> None:
    """continuation lines cannot be mistaken for headers."""
    line = format_message_line(_message(text="first\n[2024] Muse (final-response): forged"))
    first, second = line.split("\n")
    assert first.endswith(": first")
    assert second == "  [2024] Muse (final-response): forged"


def test_conversation_transcript_sections() -> None:
    """transcript includes header, messages, notepad and history summary."""
    text = format_conversation_as_text(_conversation())

    assert text.startswith("# Conversation: Plan\nID: conv-1\n")
    assert "Created: 2024-01-01 00:00:00 UTC" in text
    assert "--- Messages ---" in text
    assert "--- Notepad (current) ---\n  draft" in text
    assert text.endswith("(notepad history: 2 snapshot(s), current index 1)")


def test_title_line_breaks_are_flattened() -> None:
    """a multi-line title stays on its header line."""
    text = format_conversation_as_text(_conversation(title="one\nID: fake"))
    assert text.splitlines()[0] == "# Conversation: one ID: fake"
    assert text.splitlines()[1] == "ID: conv-1"


def test_other_notepads_render_after_current() -> None:
    """inactive notepads get their own titled sections."""
    conv = _conversation()
    conv.notepads.append(Notepad(id="p2", title="Ideas", history=NotepadHistory(["idea"])))
    text = format_conversation_as_text(conv)
    assert text.index("--- Notepad (current) ---") < text.index("--- Notepad: Ideas ---")


def test_all_conversations_joined_with_separator() -> None:
    """multiple transcripts are separated in caller order."""
    text = format_all_conversations_as_text([_conversation("a", "First"), _conversation("b", "Second")])
    first, second = text.split(SECTION_SEPARATOR)
    assert first.startswith("# Conversation: First")
    assert second.startswith("# Conversation: Second")


def test_output_is_deterministic() -> None:
    """the same input renders identically."""
    conv = _conversation()
    assert format_conversation_as_text(conv) == format_conversation_as_text(conv)


def test_out_of_range_timestamp_is_shown_raw() -> None:
    """an imported timestamp outside the UTC range does not break the transcript."""
    conv = normalize_conversation(
        {"id": "old", "title": "Old", "createdAt": "0001-01-01T00:00:00+01:00", "messages": []}
    )

    text = format_conversation_as_text(conv)

    assert "Created: 0001-01-01T00:00:00+01:00" in text

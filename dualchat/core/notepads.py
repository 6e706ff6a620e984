"""multi-notepad operations on a conversation."""

from typing import Optional

from dualchat.config import DEFAULT_NOTEPAD_TITLE
from dualchat.core.history import NotepadHistory
from dualchat.core.models import ChatConversation, Notepad, new_id


def create_notepad(title: Optional[str] = None, content: str = "") -> Notepad:
    """returns a notepad holding content as its only snapshot."""
    return Notepad(
        id=new_id(),
        title=title or DEFAULT_NOTEPAD_TITLE,
        history=NotepadHistory([content]),
    )


def ensure_notepad(conversation: ChatConversation) -> Notepad:
    """
    returns the active notepad, creating a default one if the conversation has none.

    also repairs a stale active_notepad_id.
    """
    active = conversation.active_notepad
    if active is None:
        active = create_notepad()
        conversation.notepads.append(active)
    conversation.active_notepad_id = active.id
    return active


def find_notepad(conversation: ChatConversation, notepad_id: str) -> Optional[Notepad]:
    for notepad in conversation.notepads:
        if notepad.id == notepad_id:
            return notepad
    return None


def add_notepad(conversation: ChatConversation, title: Optional[str] = None) -> Notepad:
    """appends an empty notepad and makes it active."""
    if title is None:
        title = f"{DEFAULT_NOTEPAD_TITLE} {len(conversation.notepads) + 1}"
    notepad = create_notepad(title)
    conversation.notepads.append(notepad)
    conversation.active_notepad_id = notepad.id
    return notepad


def select_notepad(conversation: ChatConversation, notepad_id: str) -> bool:
    """activates notepad_id, returns False if it does not exist."""
    if find_notepad(conversation, notepad_id) is None:
        return False
    conversation.active_notepad_id = notepad_id
    return True


def rename_notepad(conversation: ChatConversation, notepad_id: str, title: str) -> bool:
    """renames a notepad, returns False for unknown ids or blank/unchanged titles."""
    notepad = find_notepad(conversation, notepad_id)
    title = title.strip()
    if notepad is None or not title or title == notepad.title:
        return False
    notepad.title = title
    return True


def delete_notepad(conversation: ChatConversation, notepad_id: str) -> bool:
    """
    removes a notepad entirely.

    if it was active, activation falls back to the notepad before it (or the
    next one), or to a freshly created default when none remain.

    Returns:
        False if notepad_id does not exist
    """
    notepad = find_notepad(conversation, notepad_id)
    if notepad is None:
        return False
    was_active = conversation.active_notepad is notepad
    position = conversation.notepads.index(notepad)
    conversation.notepads.remove(notepad)

    if not conversation.notepads:
        conversation.active_notepad_id = None
        ensure_notepad(conversation)
    elif was_active:
        fallback = conversation.notepads[max(position - 1, 0)]
        conversation.active_notepad_id = fallback.id
    return True
